"""Profanity filter for peer forum submissions."""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import PROFANITY_WORDS

logger = logging.getLogger(__name__)

BLOCK_REASON = "Contains inappropriate language"


@dataclass(frozen=True)
class FilterResult:
    """Outcome of a content check. Blocked content is never redacted."""
    blocked: bool
    content: str
    reason: Optional[str] = None


class ContentFilter:
    """Case-insensitive substring check against a fixed word list."""

    def __init__(self, words: Iterable[str] = PROFANITY_WORDS):
        self.words = tuple(word.lower() for word in words)

    def check(self, content: str) -> FilterResult:
        lowered = (content or "").lower()
        if any(word in lowered for word in self.words):
            logger.info(
                "CONTENT_FILTER_BLOCKED",
                extra={"content_length": len(lowered)}
            )
            return FilterResult(blocked=True, content=content, reason=BLOCK_REASON)
        return FilterResult(blocked=False, content=content)

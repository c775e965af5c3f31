"""Risk classification strategy.

Handlers depend on the RiskClassifier interface only, so a model-backed
classifier can replace the keyword implementation without touching them.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from mindhaven.shared.models import RiskLevel, PostRiskAnalysis
from .config import KeywordTiers, CHAT_KEYWORDS, FORUM_KEYWORDS

logger = logging.getLogger(__name__)


class RiskClassifier(ABC):
    """Maps free text to a risk level. Implementations must be pure."""

    @abstractmethod
    def classify(self, text: str) -> RiskLevel:
        """Return the risk level for text."""

    def analyze_post(self, text: str) -> PostRiskAnalysis:
        """Classify forum content and derive its moderation flags.

        needs_moderation is set for high and crisis; flagged only for crisis.
        """
        return PostRiskAnalysis.from_level(self.classify(text))


class KeywordRiskClassifier(RiskClassifier):
    """First-match keyword tiers.

    Tiers are checked crisis, then high, then moderate. No scoring
    across tiers: a single crisis keyword outranks any number of
    lower-tier matches. No match yields LOW.
    """

    def __init__(self, tiers: KeywordTiers):
        self.tiers = tiers
        self._ordered: Tuple[Tuple[RiskLevel, Tuple[str, ...]], ...] = (
            (RiskLevel.CRISIS, tuple(k.lower() for k in tiers.crisis)),
            (RiskLevel.HIGH, tuple(k.lower() for k in tiers.high)),
            (RiskLevel.MODERATE, tuple(k.lower() for k in tiers.moderate)),
        )

    def classify(self, text: str) -> RiskLevel:
        level, _ = self.match(text)
        return level

    def match(self, text: str) -> Tuple[RiskLevel, Optional[str]]:
        """Return the risk level and the keyword that decided it."""
        lowered = (text or "").lower()
        for level, keywords in self._ordered:
            for keyword in keywords:
                if keyword in lowered:
                    logger.debug(
                        "RISK_KEYWORD_MATCHED",
                        extra={"risk_level": level.value, "text_length": len(lowered)}
                    )
                    return level, keyword
        return RiskLevel.LOW, None


def chat_classifier() -> KeywordRiskClassifier:
    return KeywordRiskClassifier(CHAT_KEYWORDS)


def forum_classifier() -> KeywordRiskClassifier:
    return KeywordRiskClassifier(FORUM_KEYWORDS)

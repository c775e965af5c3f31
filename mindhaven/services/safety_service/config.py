"""Safety Service configuration: keyword tiers and the profanity list.

Keyword matching is a stand-in for a trained risk model. Matching is
case-insensitive substring search; the first tier that matches wins.
"""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class KeywordTiers:
    """Keyword sets checked in priority order: crisis, high, moderate."""
    crisis: Tuple[str, ...]
    high: Tuple[str, ...]
    moderate: Tuple[str, ...]


# Chat messages to the support assistant
CHAT_KEYWORDS = KeywordTiers(
    crisis=(
        "suicide",
        "kill myself",
        "end it all",
        "no point living",
    ),
    high=(
        "hopeless",
        "worthless",
        "can't go on",
        "everything is wrong",
    ),
    moderate=(
        "stressed",
        "anxious",
        "worried",
        "sad",
        "depressed",
    ),
)

# Peer forum posts and replies
FORUM_KEYWORDS = KeywordTiers(
    crisis=(
        "suicide",
        "kill myself",
        "end it all",
        "no hope",
    ),
    high=(
        "hopeless",
        "worthless",
        "nobody cares",
        "give up",
    ),
    moderate=(
        "struggling",
        "difficult time",
        "overwhelmed",
        "stressed",
    ),
)

# Blocks the whole submission; there is no partial redaction
PROFANITY_WORDS: Tuple[str, ...] = (
    "fuck",
    "shit",
    "damn",
    "bitch",
    "asshole",
    "bastard",
)


@dataclass(frozen=True)
class SafetyConfig:
    """Configuration for content filtering and risk classification."""
    chat_keywords: KeywordTiers = CHAT_KEYWORDS
    forum_keywords: KeywordTiers = FORUM_KEYWORDS
    profanity_words: Tuple[str, ...] = PROFANITY_WORDS

    # Version tracking for log correlation when keyword lists change
    pattern_version: str = "2026.10.01"

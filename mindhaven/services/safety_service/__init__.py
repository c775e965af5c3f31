"""Safety Service: content filtering and keyword risk classification.

Every chat message and forum submission passes through here before it
is persisted.

Components:
- content_filter.py: ContentFilter, whole-submission profanity block
- classifier.py: RiskClassifier strategy and the keyword implementation
- config.py: keyword tiers and profanity list

Usage:
    from mindhaven.services.safety_service import chat_classifier
    level = chat_classifier().classify("I feel hopeless")
"""

from .classifier import (
    RiskClassifier,
    KeywordRiskClassifier,
    chat_classifier,
    forum_classifier,
)
from .content_filter import ContentFilter, FilterResult
from .config import SafetyConfig, KeywordTiers, CHAT_KEYWORDS, FORUM_KEYWORDS, PROFANITY_WORDS

__all__ = [
    "RiskClassifier",
    "KeywordRiskClassifier",
    "chat_classifier",
    "forum_classifier",
    "ContentFilter",
    "FilterResult",
    "SafetyConfig",
    "KeywordTiers",
    "CHAT_KEYWORDS",
    "FORUM_KEYWORDS",
    "PROFANITY_WORDS",
]

"""Risk level domain models.

Risk levels are assigned by keyword classification of chat messages
and forum content. The ordering matters: crisis is checked first.
"""
from dataclasses import dataclass
from enum import Enum


class RiskLevel(Enum):
    """Risk classification levels for free-text input."""
    LOW = "low"             # No keyword tier matched
    MODERATE = "moderate"   # Everyday stress language
    HIGH = "high"           # Hopelessness, worthlessness
    CRISIS = "crisis"       # Self-harm language: triggers intervention

    @classmethod
    def values(cls) -> tuple:
        """All level values in ascending severity."""
        return tuple(level.value for level in cls)

    @property
    def needs_moderation(self) -> bool:
        return self in (RiskLevel.HIGH, RiskLevel.CRISIS)


@dataclass(frozen=True)
class PostRiskAnalysis:
    """Classification result for forum content.

    Flagged content is withheld from public listings pending review.
    """
    risk_level: RiskLevel
    needs_moderation: bool
    flagged: bool

    @classmethod
    def from_level(cls, risk_level: RiskLevel) -> "PostRiskAnalysis":
        return cls(
            risk_level=risk_level,
            needs_moderation=risk_level.needs_moderation,
            flagged=risk_level == RiskLevel.CRISIS,
        )

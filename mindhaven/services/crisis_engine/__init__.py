"""Crisis Engine: emergency response to crisis-level content.

When a chat message or forum submission is classified as crisis, the
engine tries to auto-book an urgent counselor appointment and always
returns a user-safe message, even when booking fails.
"""

from .intervention import (
    CrisisConfig,
    CrisisInterventionWorkflow,
    InterventionResult,
    NextDaySlotFinder,
    SlotFinder,
)

__all__ = [
    "CrisisConfig",
    "CrisisInterventionWorkflow",
    "InterventionResult",
    "NextDaySlotFinder",
    "SlotFinder",
]

"""Shared domain models for the MindHaven platform."""
from .risk import RiskLevel, PostRiskAnalysis
from .records import (
    UserRole,
    UserProfile,
    UserStats,
    ActivityLogEntry,
    ChatLogEntry,
    RiskAnalytics,
    PeerPost,
    Reply,
    Booking,
    BookingStatus,
    Assessment,
    CounselorSlot,
    default_mental_health_profile,
)

__all__ = [
    "RiskLevel",
    "PostRiskAnalysis",
    "UserRole",
    "UserProfile",
    "UserStats",
    "ActivityLogEntry",
    "ChatLogEntry",
    "RiskAnalytics",
    "PeerPost",
    "Reply",
    "Booking",
    "BookingStatus",
    "Assessment",
    "CounselorSlot",
    "default_mental_health_profile",
]

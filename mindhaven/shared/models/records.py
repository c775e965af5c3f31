"""Persisted record shapes.

Every record is stored in the KV store as a JSON object with camelCase
keys, which is also the shape returned over HTTP. Timestamps are ISO-8601
UTC strings.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .risk import RiskLevel


class UserRole:
    STUDENT = "student"
    COUNSELOR = "counselor"
    ADMIN = "admin"

    ALL = frozenset({STUDENT, COUNSELOR, ADMIN})


def default_settings() -> Dict[str, Any]:
    return {
        "notifications": True,
        "language": "English",
        "theme": "light",
    }


def default_mental_health_profile() -> Dict[str, Any]:
    return {
        "assessmentHistory": [],
        "riskLevel": "unknown",
        "lastAssessment": None,
        "preferences": {
            "anonymousMode": False,
            "shareWithPeers": True,
        },
    }


@dataclass
class UserProfile:
    """Profile written at signup, merged on update."""
    id: str
    email: str
    name: str
    role: str
    created_at: str
    student_id: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    last_login: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=default_settings)
    mental_health_profile: Dict[str, Any] = field(
        default_factory=default_mental_health_profile
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "studentId": self.student_id,
            "department": self.department,
            "year": self.year,
            "createdAt": self.created_at,
            "lastLogin": self.last_login,
            "settings": dict(self.settings),
            "mentalHealthProfile": dict(self.mental_health_profile),
        }


@dataclass
class UserStats:
    """Per-user usage counters."""
    last_activity: str
    total_sessions: int = 0
    total_assessments: int = 0
    streak_days: int = 0
    resources_accessed: int = 0
    peer_interactions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "totalAssessments": self.total_assessments,
            "lastActivity": self.last_activity,
            "streakDays": self.streak_days,
            "resourcesAccessed": self.resources_accessed,
            "peerInteractions": self.peer_interactions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserStats":
        return cls(
            last_activity=data.get("lastActivity", ""),
            total_sessions=int(data.get("totalSessions", 0)),
            total_assessments=int(data.get("totalAssessments", 0)),
            streak_days=int(data.get("streakDays", 0)),
            resources_accessed=int(data.get("resourcesAccessed", 0)),
            peer_interactions=int(data.get("peerInteractions", 0)),
        )


@dataclass(frozen=True)
class ActivityLogEntry:
    """Append-only entry in the day's activity log."""
    user_id: str
    activity: str
    timestamp: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "activity": self.activity,
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ChatLogEntry:
    """Append-only entry in a user's per-day chat log."""
    user_id: str
    session_id: str
    message: str
    response: str
    risk_level: RiskLevel
    timestamp: str

    @property
    def needs_intervention(self) -> bool:
        return self.risk_level == RiskLevel.CRISIS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "sessionId": self.session_id,
            "message": self.message,
            "response": self.response,
            "riskLevel": self.risk_level.value,
            "timestamp": self.timestamp,
            "needsIntervention": self.needs_intervention,
        }


@dataclass
class RiskAnalytics:
    """Per-day counters of classified interactions by risk level."""
    low: int = 0
    moderate: int = 0
    high: int = 0
    crisis: int = 0

    def increment(self, risk_level: RiskLevel) -> None:
        setattr(self, risk_level.value, getattr(self, risk_level.value) + 1)

    @property
    def total(self) -> int:
        return self.low + self.moderate + self.high + self.crisis

    def to_dict(self) -> Dict[str, int]:
        return {
            "low": self.low,
            "moderate": self.moderate,
            "high": self.high,
            "crisis": self.crisis,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RiskAnalytics":
        data = data or {}
        return cls(**{level: int(data.get(level, 0)) for level in RiskLevel.values()})


@dataclass
class Reply:
    """Reply to a peer post; embedded in the post and stored on its own."""
    id: str
    user_id: str
    post_id: str
    content: str
    is_anonymous: bool
    timestamp: str
    risk_level: RiskLevel
    flagged: bool
    likes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "postId": self.post_id,
            "content": self.content,
            "isAnonymous": self.is_anonymous,
            "timestamp": self.timestamp,
            "likes": self.likes,
            "riskLevel": self.risk_level.value,
            "flagged": self.flagged,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reply":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            post_id=data["postId"],
            content=data["content"],
            is_anonymous=bool(data.get("isAnonymous", False)),
            timestamp=data["timestamp"],
            risk_level=RiskLevel(data.get("riskLevel", "low")),
            flagged=bool(data.get("flagged", False)),
            likes=int(data.get("likes", 0)),
        )


@dataclass
class PeerPost:
    """Forum post with moderation flags set before persistence."""
    id: str
    user_id: str
    content: str
    category: str
    is_anonymous: bool
    timestamp: str
    risk_level: RiskLevel
    is_moderated: bool
    flagged: bool
    likes: int = 0
    replies: List[Reply] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "content": self.content,
            "category": self.category,
            "isAnonymous": self.is_anonymous,
            "timestamp": self.timestamp,
            "likes": self.likes,
            "replies": [reply.to_dict() for reply in self.replies],
            "isModerated": self.is_moderated,
            "riskLevel": self.risk_level.value,
            "flagged": self.flagged,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeerPost":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            content=data["content"],
            category=data["category"],
            is_anonymous=bool(data.get("isAnonymous", False)),
            timestamp=data["timestamp"],
            risk_level=RiskLevel(data.get("riskLevel", "low")),
            is_moderated=bool(data.get("isModerated", False)),
            flagged=bool(data.get("flagged", False)),
            likes=int(data.get("likes", 0)),
            replies=[Reply.from_dict(r) for r in data.get("replies", [])],
        )


class BookingStatus:
    SCHEDULED = "scheduled"
    EMERGENCY_SCHEDULED = "emergency_scheduled"


@dataclass
class Booking:
    """Counselor appointment, booked manually or by crisis intervention."""
    id: str
    user_id: str
    counselor_id: str
    date: str
    time: str
    session_type: str
    mode: str
    status: str
    created_at: str
    notes: Optional[str] = None
    priority: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "counselorId": self.counselor_id,
            "date": self.date,
            "time": self.time,
            "sessionType": self.session_type,
            "mode": self.mode,
            "notes": self.notes,
            "status": self.status,
            "createdAt": self.created_at,
        }
        if self.priority is not None:
            data["priority"] = self.priority
        return data


@dataclass(frozen=True)
class Assessment:
    """Completed self-assessment questionnaire."""
    id: str
    user_id: str
    type: str
    responses: Any
    score: Any
    risk_level: Any
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type,
            "responses": self.responses,
            "score": self.score,
            "riskLevel": self.risk_level,
            "timestamp": self.timestamp,
        }

    def history_entry(self) -> Dict[str, Any]:
        """Compact form kept in the profile's assessment history."""
        return {
            "id": self.id,
            "type": self.type,
            "score": self.score,
            "riskLevel": self.risk_level,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class CounselorSlot:
    """An open counselor appointment slot."""
    counselor_id: str
    date: str
    time: str
    available: bool = True

"""User accounts, profiles, usage statistics and activity tracking.

Identity creation is delegated to the auth provider; everything else
(profile, stats, role/department indexes, activity logs, assessments)
is stored in the KV store.
"""
import logging
import uuid
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from mindhaven.shared.database import KVStore, append_to_index, keys
from mindhaven.shared.errors import NotFoundError, ServerConfigurationError, ValidationError
from mindhaven.shared.models import (
    ActivityLogEntry,
    Assessment,
    UserProfile,
    UserRole,
    UserStats,
    default_mental_health_profile,
)
from mindhaven.shared.utils import day_key, hash_user_id, isoformat_z, parse_timestamp, utc_now
from .auth_provider import AuthProvider

logger = logging.getLogger(__name__)

# Activity type -> UserStats counter it increments
ACTIVITY_COUNTERS: Dict[str, str] = {
    "session_start": "total_sessions",
    "assessment_complete": "total_assessments",
    "resource_access": "resources_accessed",
    "peer_interaction": "peer_interactions",
    "peer_post_created": "peer_interactions",
    "peer_reply_created": "peer_interactions",
}

LOGIN_ACTIVITY = "login"

SERVER_MANAGED_PROFILE_FIELDS = frozenset({"id", "createdAt", "lastLogin"})
OBJECT_PROFILE_FIELDS = ("settings", "mentalHealthProfile")


class AccountManager:
    """Creates accounts and maintains profile, stats and activity records."""

    def __init__(
        self,
        store: KVStore,
        auth_provider: Optional[AuthProvider] = None,
        now: Callable = utc_now,
    ):
        """Initialize manager with dependencies.

        Args:
            store: KV store
            auth_provider: Identity provider; None when credentials are
                not configured, in which case signup fails with a
                configuration error
            now: Clock (injected for testing)
        """
        self.store = store
        self.auth_provider = auth_provider
        self._now = now

    def create_user_account(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        role: Optional[str],
        student_id: Optional[str] = None,
        department: Optional[str] = None,
        year: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an identity, profile, stats record and index entries.

        Returns:
            {"success": True, "user": {id, email, name, role}}

        Raises:
            ValidationError: Missing field or unknown role
            ServerConfigurationError: No auth provider configured
            UpstreamError: Auth provider or storage failure
        """
        if not email or not password or not name or not role:
            raise ValidationError("Missing required fields")
        if role not in UserRole.ALL:
            raise ValidationError("Invalid role")
        if self.auth_provider is None:
            logger.error("SIGNUP_AUTH_PROVIDER_MISSING", extra={"reason": "missing_supabase_credentials"})
            raise ServerConfigurationError("Auth provider credentials are not configured")

        auth_user = self.auth_provider.create_user(
            email=email,
            password=password,
            metadata={"name": name, "role": role},
        )
        now = isoformat_z(self._now())

        profile = UserProfile(
            id=auth_user.id,
            email=email,
            name=name,
            role=role,
            created_at=now,
            student_id=student_id or None,
            department=department or None,
            year=year or None,
        )
        self.store.set(keys.user_profile(auth_user.id), profile.to_dict())
        self.store.set(keys.user_stats(auth_user.id), UserStats(last_activity=now).to_dict())

        append_to_index(self.store, keys.users_by_role(role), auth_user.id)
        if role == UserRole.STUDENT and department:
            append_to_index(self.store, keys.users_by_department(department), auth_user.id)

        logger.info(
            "USER_ACCOUNT_CREATED",
            extra={
                "user_id_hash": hash_user_id(auth_user.id),
                "role": role,
                "has_department": bool(department),
            }
        )

        return {
            "success": True,
            "user": {
                "id": auth_user.id,
                "email": email,
                "name": name,
                "role": role,
            },
        }

    def get_user_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.store.get(keys.user_profile(user_id))

    def update_user_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge updates into the stored profile.

        Server-managed fields (id, createdAt, lastLogin) are ignored.
        settings and mentalHealthProfile must be objects when present.

        Raises:
            ValidationError: If updates is not an object or a nested field
                has the wrong type
            NotFoundError: If no profile exists for user_id
        """
        if not isinstance(updates, dict):
            raise ValidationError("Invalid profile update")
        for field in OBJECT_PROFILE_FIELDS:
            if field in updates and not isinstance(updates[field], dict):
                raise ValidationError(f"Invalid profile field: {field}")

        profile = self.get_user_profile(user_id)
        if not profile:
            logger.warning("PROFILE_UPDATE_NOT_FOUND", extra={"user_id_hash": hash_user_id(user_id)})
            raise NotFoundError("Profile not found")

        accepted = {k: v for k, v in updates.items() if k not in SERVER_MANAGED_PROFILE_FIELDS}
        profile.update(accepted)
        self.store.set(keys.user_profile(user_id), profile)

        logger.info(
            "PROFILE_UPDATED",
            extra={"user_id_hash": hash_user_id(user_id), "fields": sorted(accepted)}
        )
        return profile

    def record_user_activity(
        self,
        user_id: str,
        activity: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Update usage counters and append to today's activity log.

        Streak: activity on the day after the last activity extends the
        streak, a gap of more than one day resets it to 1.

        Returns:
            The stored activity log entry
        """
        now = self._now()
        stamp = isoformat_z(now)

        stats_data = self.store.get(keys.user_stats(user_id))
        stats = UserStats.from_dict(stats_data) if stats_data else UserStats(last_activity=stamp)

        stats.streak_days = _next_streak(stats, now)
        stats.last_activity = stamp
        counter = ACTIVITY_COUNTERS.get(activity)
        if counter:
            setattr(stats, counter, getattr(stats, counter) + 1)
        self.store.set(keys.user_stats(user_id), stats.to_dict())

        entry = ActivityLogEntry(
            user_id=user_id,
            activity=activity,
            timestamp=stamp,
            metadata=metadata or {},
        )
        append_to_index(self.store, keys.activity_log(day_key(now)), entry.to_dict())

        if activity == LOGIN_ACTIVITY:
            profile = self.get_user_profile(user_id)
            if profile:
                profile["lastLogin"] = stamp
                self.store.set(keys.user_profile(user_id), profile)

        logger.info(
            "USER_ACTIVITY_RECORDED",
            extra={
                "user_id_hash": hash_user_id(user_id),
                "activity": activity,
                "streak_days": stats.streak_days,
            }
        )
        return entry.to_dict()

    def record_assessment(
        self,
        user_id: Optional[str],
        assessment_type: Optional[str],
        responses: Any,
        score: Any,
        risk_level: Any,
    ) -> Assessment:
        """Store a completed self-assessment and fold it into the profile.

        Raises:
            ValidationError: Missing user id or assessment type
        """
        if not user_id or not assessment_type:
            raise ValidationError("Missing required fields")

        assessment = Assessment(
            id=f"assessment_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            type=assessment_type,
            responses=responses,
            score=score,
            risk_level=risk_level,
            timestamp=isoformat_z(self._now()),
        )
        self.store.set(keys.assessment(user_id, assessment.id), assessment.to_dict())

        profile = self.get_user_profile(user_id)
        if profile:
            health = profile.get("mentalHealthProfile")
            if not isinstance(health, dict):
                health = profile["mentalHealthProfile"] = default_mental_health_profile()
            if not isinstance(health.get("assessmentHistory"), list):
                health["assessmentHistory"] = []
            health["lastAssessment"] = assessment.to_dict()
            health["riskLevel"] = risk_level
            health["assessmentHistory"].append(assessment.history_entry())
            self.store.set(keys.user_profile(user_id), profile)

        self.record_user_activity(
            user_id,
            "assessment_complete",
            {"assessmentType": assessment_type, "score": score, "riskLevel": risk_level},
        )
        return assessment


def _next_streak(stats: UserStats, now) -> int:
    last = parse_timestamp(stats.last_activity)
    if last is None or stats.streak_days <= 0:
        return 1
    if last.date() == now.date():
        return stats.streak_days
    if last.date() == (now - timedelta(days=1)).date():
        return stats.streak_days + 1
    return 1

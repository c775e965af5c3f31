"""Tests for account creation, profiles and activity tracking."""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from mindhaven.shared.database import InMemoryKVStore, keys
from mindhaven.shared.errors import (
    NotFoundError,
    ServerConfigurationError,
    UpstreamError,
    ValidationError,
)
from mindhaven.shared.utils import configure_hash_salt
from mindhaven.services.account_service import AccountManager, AuthProvider, AuthUser

NOW = datetime(2026, 10, 18, 9, 0)


@pytest.fixture(autouse=True)
def setup_hash_salt():
    configure_hash_salt("test_salt_that_is_at_least_32_characters_long")


class Clock:
    def __init__(self, current):
        self.current = current

    def __call__(self):
        return self.current


@pytest.fixture
def store():
    return InMemoryKVStore()


@pytest.fixture
def auth_provider():
    provider = MagicMock(spec=AuthProvider)
    provider.create_user.return_value = AuthUser(id="user-1", email="sam@campus.edu")
    return provider


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def accounts(store, auth_provider, clock):
    return AccountManager(store, auth_provider=auth_provider, now=clock)


def _signup(accounts, **overrides):
    fields = {
        "email": "sam@campus.edu",
        "password": "s3cret-pass",
        "name": "Sam",
        "role": "student",
        "student_id": "S123",
        "department": "CS",
        "year": "2",
    }
    fields.update(overrides)
    return accounts.create_user_account(**fields)


class TestCreateUserAccount:
    def test_returns_public_user(self, accounts):
        assert _signup(accounts) == {
            "success": True,
            "user": {"id": "user-1", "email": "sam@campus.edu", "name": "Sam", "role": "student"},
        }

    def test_writes_profile_with_defaults(self, accounts, store):
        _signup(accounts)

        profile = store.get(keys.user_profile("user-1"))
        assert profile["studentId"] == "S123"
        assert profile["department"] == "CS"
        assert profile["createdAt"] == "2026-10-18T09:00:00.000Z"
        assert profile["lastLogin"] is None
        assert profile["settings"] == {"notifications": True, "language": "English", "theme": "light"}
        assert profile["mentalHealthProfile"]["riskLevel"] == "unknown"
        assert profile["mentalHealthProfile"]["assessmentHistory"] == []

    def test_writes_zeroed_stats(self, accounts, store):
        _signup(accounts)

        stats = store.get(keys.user_stats("user-1"))
        assert stats["totalSessions"] == 0
        assert stats["streakDays"] == 0
        assert stats["lastActivity"] == "2026-10-18T09:00:00.000Z"

    def test_indexes_student_by_role_and_department(self, accounts, store):
        _signup(accounts)

        assert store.get(keys.users_by_role("student")) == ["user-1"]
        assert store.get(keys.users_by_department("CS")) == ["user-1"]

    def test_counselor_not_indexed_by_department(self, accounts, store):
        _signup(accounts, role="counselor")

        assert store.get(keys.users_by_role("counselor")) == ["user-1"]
        assert store.get(keys.users_by_department("CS")) is None

    def test_passes_name_and_role_to_provider(self, accounts, auth_provider):
        _signup(accounts)

        auth_provider.create_user.assert_called_once_with(
            email="sam@campus.edu",
            password="s3cret-pass",
            metadata={"name": "Sam", "role": "student"},
        )

    def test_missing_role(self, accounts, auth_provider, store):
        with pytest.raises(ValidationError) as exc_info:
            _signup(accounts, role=None)

        assert exc_info.value.public_message == "Missing required fields"
        auth_provider.create_user.assert_not_called()
        assert store.keys() == []

    def test_invalid_role(self, accounts):
        with pytest.raises(ValidationError) as exc_info:
            _signup(accounts, role="superuser")

        assert exc_info.value.public_message == "Invalid role"

    def test_no_auth_provider(self, store):
        accounts = AccountManager(store)

        with pytest.raises(ServerConfigurationError) as exc_info:
            _signup(accounts)

        assert exc_info.value.public_message == "Server configuration error"
        assert store.keys() == []

    def test_provider_failure_writes_nothing(self, accounts, auth_provider, store):
        auth_provider.create_user.side_effect = UpstreamError("Auth error: exists", "Account creation failed")

        with pytest.raises(UpstreamError):
            _signup(accounts)

        assert store.keys() == []


class TestProfiles:
    def test_get_missing_profile(self, accounts):
        assert accounts.get_user_profile("nobody") is None

    def test_update_merges_fields(self, accounts):
        _signup(accounts)

        profile = accounts.update_user_profile("user-1", {"name": "Samantha", "year": "3"})

        assert profile["name"] == "Samantha"
        assert profile["year"] == "3"
        assert profile["email"] == "sam@campus.edu"
        assert accounts.get_user_profile("user-1")["name"] == "Samantha"

    def test_update_cannot_change_id(self, accounts):
        _signup(accounts)

        profile = accounts.update_user_profile("user-1", {"id": "someone-else"})

        assert profile["id"] == "user-1"

    def test_update_ignores_server_managed_fields(self, accounts):
        _signup(accounts)
        created = accounts.get_user_profile("user-1")

        profile = accounts.update_user_profile(
            "user-1", {"createdAt": "1999-01-01", "lastLogin": 5, "name": "Samantha"}
        )

        assert profile["createdAt"] == created["createdAt"]
        assert profile["lastLogin"] == created["lastLogin"]
        assert profile["name"] == "Samantha"

    @pytest.mark.parametrize("field", ["mentalHealthProfile", "settings"])
    def test_update_rejects_non_object_fields(self, accounts, field):
        _signup(accounts)

        with pytest.raises(ValidationError):
            accounts.update_user_profile("user-1", {field: "x"})

        assert isinstance(accounts.get_user_profile("user-1")[field], dict)

    def test_update_rejects_non_object_body(self, accounts):
        _signup(accounts)

        with pytest.raises(ValidationError):
            accounts.update_user_profile("user-1", ["name"])

    def test_update_missing_profile(self, accounts):
        with pytest.raises(NotFoundError):
            accounts.update_user_profile("nobody", {"name": "X"})


class TestRecordUserActivity:
    def test_counter_activities(self, accounts, store):
        for activity in ("session_start", "session_start", "resource_access", "peer_interaction"):
            accounts.record_user_activity("u1", activity)

        stats = store.get(keys.user_stats("u1"))
        assert stats["totalSessions"] == 2
        assert stats["resourcesAccessed"] == 1
        assert stats["peerInteractions"] == 1

    def test_uncounted_activity_updates_last_activity(self, accounts, store, clock):
        accounts.record_user_activity("u1", "session_start")
        clock.current = NOW + timedelta(hours=2)

        accounts.record_user_activity("u1", "mood_check")

        stats = store.get(keys.user_stats("u1"))
        assert stats["totalSessions"] == 1
        assert stats["lastActivity"] == "2026-10-18T11:00:00.000Z"

    def test_appends_to_days_activity_log(self, accounts, store):
        entry = accounts.record_user_activity("u1", "session_start", {"source": "web"})

        assert entry == {
            "userId": "u1",
            "activity": "session_start",
            "timestamp": "2026-10-18T09:00:00.000Z",
            "metadata": {"source": "web"},
        }
        assert store.get(keys.activity_log("2026-10-18")) == [entry]

    def test_streak(self, accounts, store, clock):
        accounts.record_user_activity("u1", "session_start")
        assert store.get(keys.user_stats("u1"))["streakDays"] == 1

        clock.current = NOW + timedelta(hours=3)
        accounts.record_user_activity("u1", "session_start")
        assert store.get(keys.user_stats("u1"))["streakDays"] == 1

        clock.current = NOW + timedelta(days=1)
        accounts.record_user_activity("u1", "session_start")
        assert store.get(keys.user_stats("u1"))["streakDays"] == 2

        clock.current = NOW + timedelta(days=4)
        accounts.record_user_activity("u1", "session_start")
        assert store.get(keys.user_stats("u1"))["streakDays"] == 1

    def test_login_stamps_profile(self, accounts, store):
        _signup(accounts)

        accounts.record_user_activity("user-1", "login")

        assert store.get(keys.user_profile("user-1"))["lastLogin"] == "2026-10-18T09:00:00.000Z"


class TestRecordAssessment:
    def test_stores_assessment_and_updates_profile(self, accounts, store):
        _signup(accounts)

        assessment = accounts.record_assessment(
            user_id="user-1",
            assessment_type="PHQ-9",
            responses=[1, 2, 1],
            score=4,
            risk_level="moderate",
        )

        assert store.get(keys.assessment("user-1", assessment.id))["score"] == 4
        health = store.get(keys.user_profile("user-1"))["mentalHealthProfile"]
        assert health["riskLevel"] == "moderate"
        assert health["lastAssessment"]["id"] == assessment.id
        assert health["assessmentHistory"] == [assessment.history_entry()]
        assert store.get(keys.user_stats("user-1"))["totalAssessments"] == 1

    def test_without_profile_still_stored(self, accounts, store):
        assessment = accounts.record_assessment("u9", "GAD-7", [0], 0, "low")

        assert store.get(keys.assessment("u9", assessment.id)) is not None
        assert store.get(keys.user_profile("u9")) is None

    def test_missing_type(self, accounts):
        with pytest.raises(ValidationError):
            accounts.record_assessment("u1", None, [], 0, "low")

    @pytest.mark.parametrize("stored", [None, "x", {"assessmentHistory": "x"}])
    def test_repairs_malformed_health_profile(self, accounts, store, stored):
        _signup(accounts)
        profile = store.get(keys.user_profile("user-1"))
        profile["mentalHealthProfile"] = stored
        store.set(keys.user_profile("user-1"), profile)

        assessment = accounts.record_assessment("user-1", "PHQ-9", [1], 1, "low")

        health = store.get(keys.user_profile("user-1"))["mentalHealthProfile"]
        assert health["riskLevel"] == "low"
        assert health["assessmentHistory"] == [assessment.history_entry()]

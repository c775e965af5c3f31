"""Tests for counselor session booking."""
from datetime import datetime

import pytest

from mindhaven.shared.database import InMemoryKVStore, keys
from mindhaven.shared.errors import ValidationError
from mindhaven.shared.utils import configure_hash_salt
from mindhaven.services.account_service import AccountManager
from mindhaven.services.booking_service import BookingManager
from mindhaven.services.crisis_engine import CrisisInterventionWorkflow

NOW = datetime(2026, 10, 18, 9, 0)


@pytest.fixture(autouse=True)
def setup_hash_salt():
    configure_hash_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def store():
    return InMemoryKVStore()


@pytest.fixture
def bookings(store):
    return BookingManager(store, AccountManager(store, now=lambda: NOW), now=lambda: NOW)


class TestBookSession:
    def test_defaults(self, bookings, store):
        booking = bookings.book_session("u1", "counselor_2", "2026-10-20", "14:00")

        data = booking.to_dict()
        assert data["status"] == "scheduled"
        assert data["sessionType"] == "individual"
        assert data["mode"] == "in_person"
        assert data["notes"] is None
        assert data["createdAt"] == "2026-10-18T09:00:00.000Z"
        assert "priority" not in data
        assert booking.id.startswith("booking_")
        assert store.get(keys.booking(booking.id)) == data
        assert store.get(keys.user_bookings("u1")) == [booking.id]

    def test_explicit_options(self, bookings):
        booking = bookings.book_session(
            "u1", "counselor_2", "2026-10-20", "14:00",
            session_type="group", mode="video_call", notes="first visit",
        )

        assert booking.session_type == "group"
        assert booking.mode == "video_call"
        assert booking.notes == "first visit"

    def test_records_activity(self, bookings, store):
        bookings.book_session("u1", "counselor_2", "2026-10-20", "14:00")

        log = store.get(keys.activity_log("2026-10-18"))
        assert log[0]["activity"] == "session_booked"
        assert log[0]["metadata"]["counselorId"] == "counselor_2"

    def test_missing_time(self, bookings, store):
        with pytest.raises(ValidationError):
            bookings.book_session("u1", "counselor_2", "2026-10-20", None)
        assert store.keys() == []


class TestGetUserBookings:
    def test_includes_emergency_bookings_in_order(self, bookings, store):
        first = bookings.book_session("u1", "counselor_2", "2026-10-20", "14:00")
        workflow = CrisisInterventionWorkflow(store, bookings.accounts.record_user_activity)
        emergency = workflow.trigger("u1").appointment

        listed = bookings.get_user_bookings("u1")

        assert [b["id"] for b in listed] == [first.id, emergency.id]
        assert listed[1]["status"] == "emergency_scheduled"

    def test_unknown_user(self, bookings):
        assert bookings.get_user_bookings("nobody") == []

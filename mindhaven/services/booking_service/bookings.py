"""Counselor session booking.

Manual bookings are stored at booking:<id> with status "scheduled" and
indexed under user_bookings:<user>. Emergency bookings created by the
crisis engine share the same keys, so a user's list includes both.
"""
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from mindhaven.shared.database import KVStore, append_to_index, get_list, keys
from mindhaven.shared.errors import ValidationError
from mindhaven.shared.models import Booking, BookingStatus
from mindhaven.shared.utils import hash_user_id, isoformat_z, timestamp_ms, utc_now
from mindhaven.services.account_service import AccountManager

logger = logging.getLogger(__name__)


class BookingManager:
    """Creates and lists counselor appointments."""

    def __init__(self, store: KVStore, accounts: AccountManager, now: Callable = utc_now):
        self.store = store
        self.accounts = accounts
        self._now = now

    def book_session(
        self,
        user_id: Optional[str],
        counselor_id: Optional[str],
        date: Optional[str],
        time: Optional[str],
        session_type: Optional[str] = None,
        mode: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """Store a scheduled booking and index it under the user.

        Raises:
            ValidationError: Missing user, counselor, date or time
        """
        if not user_id or not counselor_id or not date or not time:
            raise ValidationError("Missing required fields")

        now = self._now()
        booking = Booking(
            id=f"booking_{timestamp_ms(now)}_{uuid.uuid4().hex[:6]}",
            user_id=user_id,
            counselor_id=counselor_id,
            date=date,
            time=time,
            session_type=session_type or "individual",
            mode=mode or "in_person",
            notes=notes,
            status=BookingStatus.SCHEDULED,
            created_at=isoformat_z(now),
        )

        self.store.set(keys.booking(booking.id), booking.to_dict())
        append_to_index(self.store, keys.user_bookings(user_id), booking.id)

        logger.info(
            "SESSION_BOOKED",
            extra={
                "booking_id": booking.id,
                "user_id_hash": hash_user_id(user_id),
                "counselor_id": counselor_id,
                "session_type": booking.session_type,
            }
        )

        self.accounts.record_user_activity(
            user_id,
            "session_booked",
            {"counselorId": counselor_id, "sessionType": booking.session_type, "mode": booking.mode},
        )
        return booking

    def get_user_bookings(self, user_id: str) -> List[Dict[str, Any]]:
        """All bookings for user_id in the order they were made."""
        bookings = []
        for booking_id in get_list(self.store, keys.user_bookings(user_id)):
            data = self.store.get(keys.booking(booking_id))
            if data:
                bookings.append(data)
        return bookings

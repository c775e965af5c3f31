"""Crisis intervention workflow - emergency auto-booking.

Runs whenever a chat message, forum post or reply is classified as
crisis. It looks up the next open counselor slot and, if one exists,
books an urgent emergency appointment for the user.

This is the "fire alarm": it never raises. Any failure degrades to a
message directing the user to emergency services, because the user has
just expressed crisis language and must always get a response.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from mindhaven.shared.database import KVStore, append_to_index, keys
from mindhaven.shared.models import Booking, BookingStatus, CounselorSlot
from mindhaven.shared.utils import hash_user_id, isoformat_z, timestamp_ms, utc_now

logger = logging.getLogger(__name__)

ActivityRecorder = Callable[[str, str, Optional[Dict[str, Any]]], None]


@dataclass(frozen=True)
class CrisisConfig:
    """Emergency booking defaults and user-facing messages."""
    default_counselor_id: str = "counselor_1"
    emergency_slot_time: str = "09:00"
    session_type: str = "crisis_intervention"
    mode: str = "video_call"
    priority: str = "urgent"
    booking_notes: str = "Auto-booked due to crisis detection"
    booked_message: str = (
        "Emergency appointment has been automatically scheduled. "
        "Please check your booking details."
    )
    no_slot_message: str = (
        "Crisis detected. Please contact emergency services immediately "
        "or visit the nearest counseling center."
    )
    failure_message: str = (
        "Crisis detected. Please seek immediate help from emergency services."
    )


@dataclass(frozen=True)
class InterventionResult:
    """Outcome of an intervention attempt. message is never empty."""
    auto_booking: bool
    message: str
    appointment: Optional[Booking] = None

    @property
    def appointment_id(self) -> Optional[str]:
        return self.appointment.id if self.appointment else None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "autoBooking": self.auto_booking,
            "message": self.message,
        }
        if self.appointment is not None:
            result["appointmentId"] = self.appointment.id
            result["appointment"] = self.appointment.to_dict()
        return result


class SlotFinder(ABC):
    """Scheduling collaborator that locates open counselor time."""

    @abstractmethod
    def find_next_available_slot(self) -> Optional[CounselorSlot]:
        """Return the earliest open slot, or None when nothing is free."""


class NextDaySlotFinder(SlotFinder):
    """Offers the first slot of the next day with the on-call counselor.

    Stands in until counselor calendars are stored.
    """

    def __init__(self, config: Optional[CrisisConfig] = None, now: Callable = utc_now):
        self.config = config or CrisisConfig()
        self._now = now

    def find_next_available_slot(self) -> Optional[CounselorSlot]:
        tomorrow = self._now() + timedelta(days=1)
        return CounselorSlot(
            counselor_id=self.config.default_counselor_id,
            date=tomorrow.strftime("%Y-%m-%d"),
            time=self.config.emergency_slot_time,
            available=True,
        )


class CrisisInterventionWorkflow:
    """Orchestrates emergency slot lookup and auto-booking."""

    def __init__(
        self,
        store: KVStore,
        activity_recorder: ActivityRecorder,
        slot_finder: Optional[SlotFinder] = None,
        config: Optional[CrisisConfig] = None,
    ):
        """Initialize workflow with dependencies.

        Args:
            store: KV store for bookings
            activity_recorder: Callable(user_id, activity, metadata) used
                by respond() to log the intervention attempt
            slot_finder: Scheduling collaborator (next-day default)
            config: Booking defaults and messages
        """
        self.store = store
        self.config = config or CrisisConfig()
        self.slot_finder = slot_finder or NextDaySlotFinder(self.config)
        self.activity_recorder = activity_recorder

        logger.info("CRISIS_WORKFLOW_INITIALIZED")

    def trigger(self, user_id: str) -> InterventionResult:
        """Attempt an emergency booking for user_id.

        Returns:
            InterventionResult; auto_booking is False when no slot was
            found or anything failed

        Logs:
            - CRISIS_INTERVENTION_TRIGGERED: On entry (critical)
            - CRISIS_EMERGENCY_BOOKED: After the booking is stored
            - CRISIS_NO_SLOT_AVAILABLE: When the slot finder returns None
            - CRISIS_INTERVENTION_FAILED: On any error
        """
        try:
            user_id_hash = hash_user_id(user_id)
            logger.critical(
                "CRISIS_INTERVENTION_TRIGGERED",
                extra={"user_id_hash": user_id_hash, "action": "EMERGENCY_BOOKING"}
            )

            slot = self.slot_finder.find_next_available_slot()
            if slot is None or not slot.available:
                logger.critical(
                    "CRISIS_NO_SLOT_AVAILABLE",
                    extra={"user_id_hash": user_id_hash, "action": "REFER_TO_EMERGENCY_SERVICES"}
                )
                return InterventionResult(auto_booking=False, message=self.config.no_slot_message)

            booking = self._book_emergency(user_id, slot)
        except Exception as e:
            logger.critical(
                "CRISIS_INTERVENTION_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_FOLLOW_UP_REQUIRED",
                }
            )
            return InterventionResult(auto_booking=False, message=self.config.failure_message)

        logger.critical(
            "CRISIS_EMERGENCY_BOOKED",
            extra={
                "user_id_hash": user_id_hash,
                "booking_id": booking.id,
                "counselor_id": booking.counselor_id,
                "date": booking.date,
                "time": booking.time,
            }
        )
        return InterventionResult(
            auto_booking=True,
            message=self.config.booked_message,
            appointment=booking,
        )

    def respond(
        self,
        user_id: str,
        source: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> InterventionResult:
        """Trigger the intervention and record the attempt in the activity log.

        A failure to record the activity is logged but does not prevent
        the intervention result from reaching the user.

        Args:
            user_id: User who produced crisis-level content
            source: Where the content came from (ai_chat, peer_post, peer_reply)
            metadata: Extra activity metadata
        """
        result = self.trigger(user_id)

        activity_metadata = {
            "riskLevel": "crisis",
            "source": source,
            "autoBooking": result.auto_booking,
            "appointmentId": result.appointment_id,
        }
        activity_metadata.update(metadata or {})

        try:
            self.activity_recorder(user_id, "crisis_intervention_triggered", activity_metadata)
        except Exception as e:
            logger.critical(
                "CRISIS_ACTIVITY_RECORD_FAILED",
                extra={
                    "user_id_hash": hash_user_id(user_id),
                    "source": source,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                }
            )

        return result

    def _book_emergency(self, user_id: str, slot: CounselorSlot) -> Booking:
        now = utc_now()
        booking = Booking(
            id=f"emergency_{timestamp_ms(now)}_{uuid.uuid4().hex[:6]}",
            user_id=user_id,
            counselor_id=slot.counselor_id,
            date=slot.date,
            time=slot.time,
            session_type=self.config.session_type,
            mode=self.config.mode,
            notes=self.config.booking_notes,
            status=BookingStatus.EMERGENCY_SCHEDULED,
            priority=self.config.priority,
            created_at=isoformat_z(now),
        )

        self.store.set(keys.booking(booking.id), booking.to_dict())
        append_to_index(self.store, keys.user_bookings(user_id), booking.id)
        return booking

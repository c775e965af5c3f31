"""Booking Service: counselor appointments."""

from .bookings import BookingManager

__all__ = ["BookingManager"]

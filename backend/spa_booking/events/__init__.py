"""Booking domain events and their publisher."""

from .booking_events import BookingCanceled, BookingConfirmed, BookingCreated
from .publisher import EventPublisher, get_event_publisher

__all__ = [
    "BookingCreated",
    "BookingConfirmed",
    "BookingCanceled",
    "EventPublisher",
    "get_event_publisher",
]

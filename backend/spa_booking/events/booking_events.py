"""Booking domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class BookingCreated:
    """Fired after a booking is committed."""

    booking_id: str
    contact_email: str
    arrival_at: datetime
    created_at: datetime
    created_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingConfirmed:
    """Fired after a pending booking is confirmed."""

    booking_id: str
    contact_email: str
    arrival_at: datetime
    confirmed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingCanceled:
    """Fired after a booking is canceled."""

    booking_id: str
    contact_email: str
    previous_status: str
    canceled_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

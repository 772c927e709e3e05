# backend/spa_booking/models/booking.py
"""
Booking model for the spa booking API.

A booking is a self-contained document: contact details, the guests
(items) with their program/package selections, and the price snapshots
frozen when the selections were made. Catalog edits made afterwards never
change a stored booking.
"""

from decimal import Decimal
from enum import Enum
import logging
from typing import Dict, Optional

from sqlalchemy import JSON, Column, Index, Integer, Numeric, String, Text

from ..core.ulid_helper import generate_ulid
from ..database import Base
from ..utils.time_utils import utc_now
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"


def normalize_search_key(value: Optional[str]) -> str:
    """Case-folded, whitespace-trimmed key used for prefix search."""
    return (value or "").strip().casefold()


class Booking(Base):
    """
    Spa booking record.

    ``items`` holds the guest list as a JSON document:
    ``[{person_name, programs: [...], packages: [...]}]`` where every
    selection carries its ``*_snapshot`` fields. ``subtotal`` and
    ``grand_total`` are always derived from those snapshots.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    arrival_at = Column(UTCDateTime, nullable=False)

    # Contact
    contact_name = Column(String(200), nullable=False)
    contact_email = Column(String(320), nullable=False)
    contact_phone = Column(String(50), nullable=True)
    search_key = Column(String(200), nullable=False, index=True)

    # Guests and snapshotted selections
    items = Column(JSON, nullable=False, default=list)
    party_size = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=False, default="")

    # Derived totals
    subtotal = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    grand_total = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    # Timestamps (millisecond precision so page tokens resume exactly)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now)

    created_by = Column(String(128), nullable=True)

    __table_args__ = (
        Index("ix_bookings_status_created_at", "status", "created_at"),
        Index("ix_bookings_search_key_created_at", "search_key", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} status={self.status}>"

    @property
    def contact(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.contact_name,
            "email": self.contact_email,
            "phone": self.contact_phone,
        }

    @property
    def totals(self) -> Dict[str, Decimal]:
        return {
            "subtotal": Decimal(self.subtotal or 0),
            "grand_total": Decimal(self.grand_total or 0),
        }

    @property
    def is_canceled(self) -> bool:
        return self.status == BookingStatus.CANCELED.value

    def set_contact(self, name: str, email: str, phone: Optional[str]) -> None:
        self.contact_name = name
        self.contact_email = email
        self.contact_phone = phone
        self.search_key = normalize_search_key(name)

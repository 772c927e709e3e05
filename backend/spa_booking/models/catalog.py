# backend/spa_booking/models/catalog.py
"""
Catalog models: treatment programs and bundled packages.

Bookings only ever read these to take price snapshots. Records are
soft-deleted by clearing ``is_active`` so historical references stay valid.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, Column, Integer, Numeric, String, Text

from ..core.constants import DEFAULT_CURRENCY
from ..core.ulid_helper import generate_ulid
from ..database import Base
from ..utils.time_utils import utc_now
from .types import UTCDateTime


class Program(Base):
    """
    A treatment program with one or more duration/price options.

    ``duration_options`` is a JSON list of
    ``{"duration_minutes": int, "price": "<decimal string>"}``.
    """

    __tablename__ = "programs"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    duration_options = Column(JSON, nullable=False, default=list)
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<Program {self.name} ({self.id})>"

    @property
    def available_durations(self) -> List[int]:
        return sorted(int(o["duration_minutes"]) for o in self.duration_options or [])

    def find_option(self, duration_minutes: int) -> Optional[Dict[str, Any]]:
        """Exact-match lookup of a duration option."""
        for option in self.duration_options or []:
            if int(option["duration_minutes"]) == duration_minutes:
                return {
                    "duration_minutes": int(option["duration_minutes"]),
                    "price": Decimal(str(option["price"])),
                }
        return None


class Package(Base):
    """A bundle sold at a fixed package price for a number of people."""

    __tablename__ = "packages"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    original_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    package_price = Column(Numeric(12, 2), nullable=False)
    number_of_people = Column(Integer, nullable=False, default=1)
    duration_minutes = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<Package {self.name} ({self.id})>"

# backend/spa_booking/schemas/booking.py
"""
Booking schemas for the spa booking API.

Request models validate shape only: catalog lookups, snapshotting and
totals happen in the service layer. Totals and snapshot fields are never
accepted from clients.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..core.constants import MAX_NOTE_LENGTH
from ..models.booking import BookingStatus
from ._strict_base import StrictModel, StrictRequestModel
from .base import Money, StandardizedModel

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ContactIn(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)

    @field_validator("phone")
    @classmethod
    def _blank_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ContactPatch(StrictRequestModel):
    """Partial contact update; omitted fields keep their stored value."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)


class ProgramSelectionIn(StrictRequestModel):
    program_id: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0)
    qty: int = Field(default=1, ge=1)


class PackageSelectionIn(StrictRequestModel):
    package_id: str = Field(..., min_length=1)
    qty: int = Field(default=1, ge=1)


class BookingItemIn(StrictRequestModel):
    """One guest and what they booked."""

    person_name: str = Field(..., min_length=1, max_length=200)
    programs: List[ProgramSelectionIn] = Field(default_factory=list)
    packages: List[PackageSelectionIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_selection(self) -> "BookingItemIn":
        if not self.programs and not self.packages:
            raise ValueError("Each guest needs at least one program or package")
        return self


class BookingCreate(StrictRequestModel):
    arrival_at: datetime
    contact: ContactIn
    items: List[BookingItemIn] = Field(..., min_length=1)
    note: str = Field(default="", max_length=MAX_NOTE_LENGTH)

    @field_validator("arrival_at")
    @classmethod
    def _require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("arrival_at must include a timezone offset")
        return v


class BookingUpdateDetails(StrictRequestModel):
    """
    Detail update.

    ``items``, when present, replaces the whole guest list and triggers a
    fresh snapshot pass; selections are never patched individually.
    """

    arrival_at: Optional[datetime] = None
    contact: Optional[ContactPatch] = None
    items: Optional[List[BookingItemIn]] = Field(default=None, min_length=1)
    note: Optional[str] = Field(default=None, max_length=MAX_NOTE_LENGTH)

    @field_validator("arrival_at")
    @classmethod
    def _require_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            raise ValueError("arrival_at must include a timezone offset")
        return v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ContactOut(StandardizedModel):
    name: str
    email: str
    phone: Optional[str] = None


class ProgramSelectionOut(StandardizedModel):
    program_id: str
    qty: int
    duration_minutes: int
    name_snapshot: str
    price_snapshot: Money
    duration_snapshot: int
    currency_snapshot: str


class PackageSelectionOut(StandardizedModel):
    package_id: str
    qty: int
    name_snapshot: str
    price_snapshot: Money
    original_price_snapshot: Optional[Money] = None
    number_of_people_snapshot: Optional[int] = None
    duration_snapshot: int
    currency_snapshot: str


class BookingItemOut(StandardizedModel):
    person_name: str
    programs: List[ProgramSelectionOut] = Field(default_factory=list)
    packages: List[PackageSelectionOut] = Field(default_factory=list)


class BookingTotalsOut(StandardizedModel):
    subtotal: Money
    grand_total: Money


class BookingResponse(StandardizedModel):
    id: str
    status: BookingStatus
    arrival_at: datetime
    contact: ContactOut
    items: List[BookingItemOut]
    party_size: int
    note: str = ""
    totals: BookingTotalsOut
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = None

    @classmethod
    def from_booking(cls, booking: Any) -> "BookingResponse":
        """Create a BookingResponse from the Booking ORM model."""
        return cls(
            id=booking.id,
            status=booking.status,
            arrival_at=booking.arrival_at,
            contact=ContactOut(**booking.contact),
            items=[BookingItemOut.model_validate(item) for item in booking.items or []],
            party_size=booking.party_size,
            note=booking.note or "",
            totals=BookingTotalsOut(**booking.totals),
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            created_by=booking.created_by,
        )


class BookingListMeta(StrictModel):
    applied_range: str
    order_by: List[str]
    sort_dir: str
    page_size: int
    status_filter: List[str] = Field(default_factory=list)
    notices: List[str] = Field(default_factory=list)


class BookingListResponse(StrictModel):
    """Keyset-paginated booking listing."""

    items: List[BookingResponse]
    next_page_token: Optional[str] = None
    has_more: bool
    meta: BookingListMeta

    @classmethod
    def from_page(cls, page: Any) -> "BookingListResponse":
        return cls(
            items=[BookingResponse.from_booking(b) for b in page.items],
            next_page_token=page.next_page_token,
            has_more=page.has_more,
            meta=BookingListMeta(**page.meta),
        )


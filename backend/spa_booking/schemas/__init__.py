# backend/spa_booking/schemas/__init__.py
"""Pydantic request/response schemas for the spa booking API."""

from .booking import (
    BookingCreate,
    BookingItemIn,
    BookingListMeta,
    BookingListResponse,
    BookingResponse,
    BookingUpdateDetails,
    ContactIn,
    ContactPatch,
    PackageSelectionIn,
    ProgramSelectionIn,
)
from .catalog import (
    DurationOption,
    PackageCreate,
    PackageResponse,
    PackageUpdate,
    ProgramCreate,
    ProgramResponse,
    ProgramUpdate,
)

__all__ = [
    "BookingCreate",
    "BookingItemIn",
    "BookingListMeta",
    "BookingListResponse",
    "BookingResponse",
    "BookingUpdateDetails",
    "ContactIn",
    "ContactPatch",
    "PackageSelectionIn",
    "ProgramSelectionIn",
    "DurationOption",
    "PackageCreate",
    "PackageResponse",
    "PackageUpdate",
    "ProgramCreate",
    "ProgramResponse",
    "ProgramUpdate",
]

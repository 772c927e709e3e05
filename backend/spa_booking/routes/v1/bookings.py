# backend/spa_booking/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET / - List bookings (filter, search, sort, keyset pages)
    POST / - Create a pending booking
    GET /{booking_id} - Booking details
    PATCH /{booking_id} - Update arrival time, contact, guests or note
    POST /{booking_id}/confirm - Confirm a pending booking
    POST /{booking_id}/cancel - Cancel a booking
"""

import asyncio
from datetime import datetime
import logging
from typing import Any, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_actor_id, get_booking_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdateDetails,
)
from ...services.booking_query_planner import BookingListParams, SortDirection
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _booking_id_path() -> Any:
    return Path(
        ...,
        description="Booking ULID",
        pattern=ULID_PATH_PATTERN,
        examples=["01HZX3Y5R8K2M4N6P7Q9S0T1VW"],
    )


# ============================================================================
# SECTION 1: Collection routes
# ============================================================================


@router.get(
    "",
    response_model=BookingListResponse,
    responses={400: {"description": "Invalid filter, sort field or page token"}},
)
async def list_bookings(
    status_filter: Optional[List[str]] = Query(
        None,
        alias="status",
        description="Status to match; repeat or comma-separate for several (max 10 honoured)",
    ),
    q: Optional[str] = Query(None, description="Case-insensitive contact name prefix"),
    date_from: Optional[datetime] = Query(None, alias="from", description="created_at lower bound"),
    date_to: Optional[datetime] = Query(None, alias="to", description="created_at upper bound"),
    sort_by: str = Query("created_at", description="Sort field"),
    sort_dir: SortDirection = Query(SortDirection.DESC, description="Sort direction"),
    page_size: Optional[int] = Query(None, ge=1, description="Page size (clamped to the server max)"),
    page_token: Optional[str] = Query(None, description="Opaque token from a previous page"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    params = BookingListParams(
        status=status_filter,
        q=q,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_dir=sort_dir,
        page_size=page_size,
        page_token=page_token,
    )
    try:
        page = await asyncio.to_thread(booking_service.list_bookings, params)
        return BookingListResponse.from_page(page)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown, inactive or mis-sized catalog selection"}},
)
async def create_booking(
    booking_data: BookingCreate,
    actor_id: Optional[str] = Depends(get_actor_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking, booking_data.model_dump(), actor_id
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters)
# ============================================================================


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: str = _booking_id_path(),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={
        400: {"description": "Booking is canceled or a selection is invalid"},
        404: {"description": "Booking not found"},
    },
)
async def update_booking(
    update_data: BookingUpdateDetails,
    booking_id: str = _booking_id_path(),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking_details,
            booking_id,
            update_data.model_dump(exclude_unset=True),
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/confirm",
    response_model=BookingResponse,
    responses={
        400: {"description": "Transition not allowed from the current status"},
        404: {"description": "Booking not found"},
    },
)
async def confirm_booking(
    booking_id: str = _booking_id_path(),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.confirm_booking, booking_id)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def cancel_booking(
    booking_id: str = _booking_id_path(),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.cancel_booking, booking_id)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)

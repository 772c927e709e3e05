# backend/spa_booking/services/booking_lifecycle.py
"""
Booking lifecycle state machine.

    pending   -> pending | confirmed | canceled
    confirmed -> confirmed | canceled
    canceled  -> canceled

``canceled`` is terminal. Re-requesting the current state is allowed and
treated by the service layer as a no-op, which makes repeated cancels
idempotent instead of erroring.
"""

from __future__ import annotations

from typing import Mapping, Union

from ..core.exceptions import BookingCanceledException, InvalidStatusTransitionException
from ..models.booking import Booking, BookingStatus

StatusLike = Union[BookingStatus, str]

ALLOWED_TRANSITIONS: Mapping[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELED}),
    BookingStatus.CANCELED: frozenset({BookingStatus.CANCELED}),
}


def _coerce(value: StatusLike) -> BookingStatus | None:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).lower())
    except ValueError:
        return None


def _label(value: StatusLike) -> str:
    return value.value if isinstance(value, BookingStatus) else str(value)


def _allowed_target(current: StatusLike, requested: StatusLike) -> BookingStatus | None:
    source = _coerce(current)
    target = _coerce(requested)
    if source is None or target is None:
        return None
    return target if target in ALLOWED_TRANSITIONS.get(source, frozenset()) else None


def can_transition(current: StatusLike, requested: StatusLike) -> bool:
    return _allowed_target(current, requested) is not None


def assert_transition(current: StatusLike, requested: StatusLike) -> BookingStatus:
    """Return the target status, or raise a client error if the move is not allowed."""
    target = _allowed_target(current, requested)
    if target is None:
        raise InvalidStatusTransitionException(_label(current), _label(requested))
    return target


def is_noop(current: StatusLike, requested: StatusLike) -> bool:
    return _coerce(current) is not None and _coerce(current) == _coerce(requested)


def assert_mutable(booking: Booking) -> None:
    """Detail updates are rejected once a booking is canceled."""
    if booking.is_canceled:
        raise BookingCanceledException(booking.id)

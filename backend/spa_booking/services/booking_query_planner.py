# backend/spa_booking/services/booking_query_planner.py
"""
Query planning for the booking listing endpoint.

The store accepts at most one inequality (range) field per query and that
field has to lead the sort order. Planning therefore decides, from the raw
listing parameters:

- which range filter applies (text prefix wins over a date range),
- the equality / "in" predicate on status,
- the ordering chain: range field, requested sort field, then ``id``.

The plan is a plain value object; repositories translate it into their own
query calls and the page-token codec validates tokens against its shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

from ..core.config import settings
from ..core.exceptions import ValidationException
from ..models.booking import BookingStatus, normalize_search_key
from ..utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)

ID_FIELD = "id"
SEARCH_KEY_FIELD = "search_key"
DATE_RANGE_FIELD = "created_at"
STATUS_FIELD = "status"

# Highest code point in the BMP private use area; appended to a prefix it
# forms the exclusive upper bound of every string starting with that prefix.
PREFIX_SENTINEL = "\uf8ff"

# Listing field -> Booking attribute
FIELD_ATTRIBUTES: Dict[str, str] = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "arrival_at": "arrival_at",
    "name": "contact_name",
    "status": "status",
    "id": "id",
    SEARCH_KEY_FIELD: "search_key",
}
SORTABLE_FIELDS = frozenset({"created_at", "updated_at", "arrival_at", "name", "status", "id"})
TIMESTAMP_FIELDS = frozenset({"created_at", "updated_at", "arrival_at"})

DATE_FILTER_IGNORED_NOTICE = (
    "Date filters (from/to) were ignored because a search term (q) was supplied."
)


class RangeField(str, Enum):
    NONE = "none"
    TEXT_PREFIX = "text_prefix"
    DATE_RANGE = "date_range"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class BookingListParams:
    """Raw listing parameters as received from the API layer."""

    status: Union[str, Sequence[str], None] = None
    q: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_by: str = "created_at"
    sort_dir: SortDirection = SortDirection.DESC
    page_size: Optional[int] = None
    page_token: Optional[str] = None


@dataclass(frozen=True)
class RangePredicate:
    field: str
    lower: Any = None
    upper: Any = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True


@dataclass(frozen=True)
class EqualityPredicate:
    field: str
    values: Tuple[str, ...]

    @property
    def operator(self) -> str:
        return "==" if len(self.values) == 1 else "in"


@dataclass(frozen=True)
class BookingQueryPlan:
    range_field: RangeField
    range_predicate: Optional[RangePredicate]
    equality: Optional[EqualityPredicate]
    sort_by: str
    sort_dir: SortDirection
    ordering_chain: Tuple[str, ...]
    page_size: int
    notices: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def expected_pivot_count(self) -> int:
        return len(self.ordering_chain)

    @property
    def timestamp_positions(self) -> Tuple[int, ...]:
        """Chain positions holding timestamps, derived from the field types."""
        return tuple(i for i, name in enumerate(self.ordering_chain) if name in TIMESTAMP_FIELDS)

    @property
    def fetch_limit(self) -> int:
        """One extra row tells whether another page exists without a count query."""
        return self.page_size + 1

    def meta(self) -> Dict[str, Any]:
        return {
            "applied_range": self.range_field.value,
            "order_by": list(self.ordering_chain),
            "sort_dir": self.sort_dir.value,
            "page_size": self.page_size,
            "status_filter": list(self.equality.values) if self.equality else [],
            "notices": list(self.notices),
        }


def _normalize_statuses(raw: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    if raw is None:
        return ()
    values: Iterable[str] = [raw] if isinstance(raw, (str, BookingStatus)) else raw
    seen: list[str] = []
    for value in values:
        for part in str(getattr(value, "value", value)).split(","):
            candidate = part.strip().lower()
            if not candidate or candidate in seen:
                continue
            try:
                BookingStatus(candidate)
            except ValueError:
                raise ValidationException(
                    f"Unknown booking status: {candidate}",
                    code="INVALID_STATUS_FILTER",
                    details={"status": candidate, "allowed": [s.value for s in BookingStatus]},
                )
            seen.append(candidate)
    return tuple(seen)


def _clamp_page_size(requested: Optional[int]) -> int:
    if requested is None:
        return settings.bookings_default_page_size
    return max(1, min(int(requested), settings.bookings_max_page_size))


def plan_booking_query(params: BookingListParams) -> BookingQueryPlan:
    """Build the query plan for one listing request."""
    notices: list[str] = []

    sort_by = (params.sort_by or "created_at").strip()
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationException(
            f"Unsupported sort field: {sort_by}",
            code="UNSUPPORTED_SORT_FIELD",
            details={"sort_by": sort_by, "allowed": sorted(SORTABLE_FIELDS)},
        )
    sort_dir = SortDirection(params.sort_dir)

    statuses = _normalize_statuses(params.status)
    limit = settings.bookings_in_filter_limit
    if len(statuses) > limit:
        logger.info("Status filter truncated from %d to %d values", len(statuses), limit)
        notices.append(f"Status filter truncated to the first {limit} values.")
        statuses = statuses[:limit]
    equality = EqualityPredicate(STATUS_FIELD, statuses) if statuses else None

    term = normalize_search_key(params.q)
    has_dates = params.date_from is not None or params.date_to is not None

    range_predicate: Optional[RangePredicate] = None
    range_field = RangeField.NONE
    range_attr: Optional[str] = None

    if term:
        range_field = RangeField.TEXT_PREFIX
        range_attr = SEARCH_KEY_FIELD
        range_predicate = RangePredicate(
            field=SEARCH_KEY_FIELD,
            lower=term,
            upper=term + PREFIX_SENTINEL,
            lower_inclusive=True,
            upper_inclusive=False,
        )
        if has_dates:
            notices.append(DATE_FILTER_IGNORED_NOTICE)
    elif has_dates:
        range_field = RangeField.DATE_RANGE
        range_attr = DATE_RANGE_FIELD
        range_predicate = RangePredicate(
            field=DATE_RANGE_FIELD,
            lower=ensure_utc(params.date_from) if params.date_from else None,
            upper=ensure_utc(params.date_to) if params.date_to else None,
        )

    chain: list[str] = []
    if range_attr:
        chain.append(range_attr)
    if sort_by not in chain:
        chain.append(sort_by)
    if ID_FIELD not in chain:
        chain.append(ID_FIELD)

    plan = BookingQueryPlan(
        range_field=range_field,
        range_predicate=range_predicate,
        equality=equality,
        sort_by=sort_by,
        sort_dir=sort_dir,
        ordering_chain=tuple(chain),
        page_size=_clamp_page_size(params.page_size),
        notices=tuple(notices),
    )
    logger.debug(
        "Planned booking query: range=%s chain=%s status=%s",
        plan.range_field.value,
        plan.ordering_chain,
        statuses,
    )
    return plan

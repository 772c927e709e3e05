# backend/spa_booking/services/booking_service.py
"""
Booking Service for the spa booking API

Handles all booking-related business logic including:
- Creating bookings from snapshotted catalog selections
- Keyset-paginated listing with filters and sorting
- Detail updates with totals recomputation
- Lifecycle transitions (confirm, cancel)
- Publishing lifecycle events after commit
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BookingNotFoundException,
    RepositoryException,
    ServiceException,
    StoreUnavailableException,
)
from ..events import BookingCanceled, BookingConfirmed, BookingCreated
from ..events.publisher import EventPublisher, get_event_publisher
from ..models.booking import Booking, BookingStatus, normalize_search_key
from ..repositories.booking_repository import BookingRepository
from ..utils.cursor_codec import (
    decode_page_token,
    encode_page_token,
    revive_typed_pivots,
    validate_pivot_shape,
)
from ..utils.time_utils import ensure_utc, truncate_to_millis, utc_now
from .base import BaseService, _is_transient
from .booking_lifecycle import assert_mutable, assert_transition, is_noop
from .booking_query_planner import (
    TIMESTAMP_FIELDS,
    BookingListParams,
    BookingQueryPlan,
    plan_booking_query,
)
from .booking_totals import compute_totals, currencies_in
from .snapshot_service import CatalogSnapshotService


@dataclass
class BookingPage:
    """One page of a booking listing."""

    items: List[Booking]
    next_page_token: Optional[str]
    has_more: bool
    meta: Dict[str, Any] = field(default_factory=dict)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Every mutation is a single read-modify-write on one booking row, run
    through ``run_in_transaction``. Catalog snapshots are resolved right
    before the transaction opens.
    """

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        snapshot_service: Optional[CatalogSnapshotService] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db)
        self.repository = booking_repository or BookingRepository(db)
        self.snapshot_service = snapshot_service or CatalogSnapshotService(db)
        self.event_publisher = event_publisher or get_event_publisher()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(self, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Booking:
        """
        Create a pending booking.

        Args:
            data: ``{arrival_at, contact: {name, email, phone}, items, note}``
            actor_id: Opaque caller identity stamped into ``created_by``

        Raises:
            CatalogItemNotFoundException, CatalogItemInactiveException,
            DurationOptionNotFoundException: a selection cannot be snapshotted
        """
        items = self.snapshot_service.build_items(data["items"])
        totals = compute_totals(items)
        self._warn_mixed_currency(items)

        contact = data["contact"]
        arrival_at = truncate_to_millis(ensure_utc(data["arrival_at"]))

        def work(session: Session) -> Booking:
            now = utc_now()
            return self.repository.create(
                status=BookingStatus.PENDING.value,
                arrival_at=arrival_at,
                contact_name=contact["name"],
                contact_email=contact["email"],
                contact_phone=contact.get("phone"),
                search_key=normalize_search_key(contact["name"]),
                items=items,
                party_size=len(items),
                note=data.get("note") or "",
                subtotal=totals.subtotal,
                grand_total=totals.grand_total,
                created_at=now,
                updated_at=now,
                created_by=actor_id,
            )

        booking = self.run_in_transaction(work, operation="create_booking")
        self.logger.info(
            "Created booking %s for %d guest(s), subtotal %s", booking.id, booking.party_size, totals.subtotal
        )
        self._publish(
            BookingCreated(
                booking_id=booking.id,
                contact_email=booking.contact_email,
                arrival_at=booking.arrival_at,
                created_at=booking.created_at,
                created_by=booking.created_by,
            )
        )
        return booking

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._read(lambda: self.repository.get_by_id(booking_id), "get_booking")
        if booking is None:
            raise BookingNotFoundException(booking_id)
        return booking

    @BaseService.measure_operation("list_bookings")
    def list_bookings(self, params: BookingListParams) -> BookingPage:
        """
        List bookings one keyset page at a time.

        The incoming token is checked against the current plan's shape
        before the store is touched; the store is asked for one row more
        than the page size to learn whether another page exists.
        """
        plan = plan_booking_query(params)
        pivots = self._pivots_from_token(params.page_token, plan)

        rows = self._read(lambda: self.repository.list_page(plan, pivots), "list_bookings")

        has_more = len(rows) > plan.page_size
        page_rows = rows[: plan.page_size]
        next_token: Optional[str] = None
        if has_more and page_rows:
            next_token = encode_page_token(
                self.repository.pivot_values(page_rows[-1], plan.ordering_chain),
                settings.bookings_cursor_version,
                plan.range_field.value,
            )

        return BookingPage(
            items=page_rows,
            next_page_token=next_token,
            has_more=has_more,
            meta=plan.meta(),
        )

    def _pivots_from_token(
        self, page_token: Optional[str], plan: BookingQueryPlan
    ) -> Optional[List[Any]]:
        if not page_token:
            return None
        decoded = decode_page_token(page_token)
        validate_pivot_shape(
            decoded,
            expected_count=plan.expected_pivot_count,
            range_field=plan.range_field.value,
            version=settings.bookings_cursor_version,
        )
        return revive_typed_pivots(decoded.pivots, plan.ordering_chain, TIMESTAMP_FIELDS)

    # ------------------------------------------------------------------
    # Update details
    # ------------------------------------------------------------------

    @BaseService.measure_operation("update_booking_details")
    def update_booking_details(self, booking_id: str, changes: Mapping[str, Any]) -> Booking:
        """
        Update arrival time, contact, guest list or note.

        ``changes`` only carries the fields the caller sent. A new guest list
        replaces the old one wholesale and totals are recomputed from its
        fresh snapshots in the same transaction.

        Raises:
            BookingNotFoundException: unknown id
            BookingCanceledException: the booking is canceled
        """
        # Fail fast on unknown or canceled bookings before reading the catalog;
        # the transaction below re-checks under the row lock.
        assert_mutable(self.get_booking(booking_id))

        items = None
        totals = None
        if changes.get("items") is not None:
            items = self.snapshot_service.build_items(changes["items"])
            totals = compute_totals(items)
            self._warn_mixed_currency(items)

        def work(session: Session) -> Booking:
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise BookingNotFoundException(booking_id)
            assert_mutable(booking)

            updates: Dict[str, Any] = {}
            if changes.get("arrival_at") is not None:
                updates["arrival_at"] = truncate_to_millis(ensure_utc(changes["arrival_at"]))
            if changes.get("note") is not None:
                updates["note"] = changes["note"]
            if items is not None and totals is not None:
                updates.update(
                    items=items,
                    party_size=len(items),
                    subtotal=totals.subtotal,
                    grand_total=totals.grand_total,
                )

            contact = changes.get("contact")
            if contact:
                booking.set_contact(
                    contact.get("name") or booking.contact_name,
                    contact.get("email") or booking.contact_email,
                    contact.get("phone", booking.contact_phone),
                )
            elif not updates:
                return booking

            updates["updated_at"] = utc_now()
            return self.repository.update(booking, **updates)

        booking = self.run_in_transaction(work, operation="update_booking_details")
        self.logger.info("Updated booking %s (%s)", booking_id, ", ".join(sorted(changes)) or "no fields")
        return booking

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str) -> Booking:
        booking, previous = self._transition(booking_id, BookingStatus.CONFIRMED)
        if previous is not None:
            self._publish(
                BookingConfirmed(
                    booking_id=booking.id,
                    contact_email=booking.contact_email,
                    arrival_at=booking.arrival_at,
                    confirmed_at=booking.updated_at,
                )
            )
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str) -> Booking:
        """Cancel a booking. Canceling an already canceled booking is a no-op."""
        booking, previous = self._transition(booking_id, BookingStatus.CANCELED)
        if previous is not None:
            self._publish(
                BookingCanceled(
                    booking_id=booking.id,
                    contact_email=booking.contact_email,
                    previous_status=previous,
                    canceled_at=booking.updated_at,
                )
            )
        return booking

    def _transition(
        self, booking_id: str, requested: BookingStatus
    ) -> Tuple[Booking, Optional[str]]:
        """
        Apply one status transition atomically.

        Returns the booking and its previous status, or ``None`` in place of
        the previous status when the request was a same-state no-op.
        """
        operation = f"{requested.value}_booking"

        def work(session: Session) -> Tuple[Booking, Optional[str]]:
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise BookingNotFoundException(booking_id)
            current = booking.status
            target = assert_transition(current, requested)
            if is_noop(current, target):
                return booking, None
            self.repository.update(booking, status=target.value, updated_at=utc_now())
            return booking, current

        booking, previous = self.run_in_transaction(work, operation=operation)
        if previous is None:
            self.logger.info("Booking %s already %s; nothing to do", booking_id, requested.value)
        else:
            self.logger.info("Booking %s: %s -> %s", booking_id, previous, requested.value)
        return booking, previous

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read(self, fetch: Any, operation: str) -> Any:
        """Run a lock-free read, mapping store failures to server errors."""
        try:
            return fetch()
        except RepositoryException as exc:
            if _is_transient(exc):
                raise StoreUnavailableException(
                    f"{operation} failed: booking store unavailable",
                    code="STORE_UNAVAILABLE",
                ) from exc
            raise ServiceException(f"{operation} failed: {exc}", code="STORE_ERROR") from exc

    def _warn_mixed_currency(self, items: List[Dict[str, Any]]) -> None:
        currencies = currencies_in(items)
        if len(currencies) > 1:
            self.logger.warning(
                "Booking mixes currencies %s; totals are summed without conversion",
                sorted(currencies),
            )

    def _publish(self, event: Any) -> None:
        # Runs after commit; publisher failures are logged only.
        try:
            self.event_publisher.publish(event)
        except Exception:
            self.logger.exception("Failed to publish %s", type(event).__name__)

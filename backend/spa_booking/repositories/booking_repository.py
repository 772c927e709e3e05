# backend/spa_booking/repositories/booking_repository.py
"""
Booking Repository

Translates a ``BookingQueryPlan`` into SQLAlchemy calls and provides the
row-locked read used by lifecycle transactions.

Listing uses keyset pagination: rows strictly after the pivot tuple in the
plan's ordering chain, all keys sorted in the same direction.
"""

from typing import Any, List, Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..services.booking_query_planner import (
    FIELD_ATTRIBUTES,
    BookingQueryPlan,
    RangePredicate,
    SortDirection,
)
from .base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """Data access for bookings."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    # ------------------------------------------------------------------
    # Single-record access
    # ------------------------------------------------------------------

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """
        Re-read a booking inside the caller's transaction and lock its row.

        Concurrent lifecycle transactions on the same booking queue behind
        this lock, so each one observes the previous one's write.
        """
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}") from e

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    @staticmethod
    def _column(field_name: str) -> Any:
        return getattr(Booking, FIELD_ATTRIBUTES[field_name])

    def _apply_range(self, query: Query, predicate: RangePredicate) -> Query:
        column = self._column(predicate.field)
        if predicate.lower is not None:
            query = query.filter(
                column >= predicate.lower if predicate.lower_inclusive else column > predicate.lower
            )
        if predicate.upper is not None:
            query = query.filter(
                column <= predicate.upper if predicate.upper_inclusive else column < predicate.upper
            )
        return query

    def _after_pivots(
        self, chain: Sequence[str], pivots: Sequence[Any], direction: SortDirection
    ) -> ColumnElement[bool]:
        """(k1, k2, ..., kn) strictly after (p1, p2, ..., pn) in chain order."""
        columns = [self._column(name) for name in chain]
        branches = []
        for i, column in enumerate(columns):
            ties = [columns[j] == pivots[j] for j in range(i)]
            step = column > pivots[i] if direction == SortDirection.ASC else column < pivots[i]
            branches.append(and_(*ties, step))
        return or_(*branches)

    def build_list_query(
        self, plan: BookingQueryPlan, pivots: Optional[Sequence[Any]] = None
    ) -> Query:
        query = self._build_query()

        if plan.equality is not None:
            column = self._column(plan.equality.field)
            values = list(plan.equality.values)
            query = query.filter(column == values[0] if len(values) == 1 else column.in_(values))

        if plan.range_predicate is not None:
            query = self._apply_range(query, plan.range_predicate)

        if pivots:
            query = query.filter(self._after_pivots(plan.ordering_chain, pivots, plan.sort_dir))

        order = [
            self._column(name).asc() if plan.sort_dir == SortDirection.ASC else self._column(name).desc()
            for name in plan.ordering_chain
        ]
        return query.order_by(*order)

    def list_page(
        self,
        plan: BookingQueryPlan,
        pivots: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[Booking]:
        """Fetch up to ``limit`` rows (defaults to ``plan.fetch_limit``)."""
        query = self.build_list_query(plan, pivots).limit(limit or plan.fetch_limit)
        return self._execute_query(query)

    @staticmethod
    def pivot_values(booking: Booking, chain: Sequence[str]) -> List[Any]:
        """Values of the ordering-chain fields on one row, in chain order."""
        return [getattr(booking, FIELD_ATTRIBUTES[name]) for name in chain]

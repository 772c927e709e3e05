"""Booking repository tests: keyset translation and batched reads."""

from datetime import datetime, timedelta, timezone

from spa_booking.repositories.booking_repository import BookingRepository
from spa_booking.repositories.catalog_repository import ProgramRepository
from spa_booking.services.booking_query_planner import (
    BookingListParams,
    SortDirection,
    plan_booking_query,
)

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class TestListPage:
    def test_fetches_one_extra_row(self, db, seed_booking):
        for i in range(4):
            seed_booking(name=f"G{i}", created_at=T0 + timedelta(minutes=i))
        plan = plan_booking_query(BookingListParams(page_size=2))
        rows = BookingRepository(db).list_page(plan)
        assert len(rows) == 3

    def test_keyset_breaks_ties_on_id(self, db, seed_booking):
        same = [seed_booking(name=f"Tie{i}", created_at=T0) for i in range(3)]
        repo = BookingRepository(db)
        plan = plan_booking_query(BookingListParams(page_size=1, sort_dir=SortDirection.ASC))
        ordered = sorted(b.id for b in same)

        first = repo.list_page(plan)[:1]
        pivots = repo.pivot_values(first[0], plan.ordering_chain)
        rest = repo.list_page(plan, pivots, limit=10)

        assert [b.id for b in first + rest] == ordered

    def test_pivot_values_follow_chain(self, db, seed_booking):
        booking = seed_booking(name="Mia", created_at=T0)
        plan = plan_booking_query(BookingListParams(q="mi", sort_by="name"))
        values = BookingRepository.pivot_values(booking, plan.ordering_chain)
        assert values == ["mia", "Mia", booking.id]

    def test_get_for_update_rereads_row(self, db, seed_booking):
        booking = seed_booking(created_at=T0)
        locked = BookingRepository(db).get_for_update(booking.id)
        assert locked is booking
        assert BookingRepository(db).get_for_update("01HZX3Y5R8K2M4N6P7Q9S0T1VW") is None


class TestBatchedReads:
    def test_missing_ids_are_absent(self, db, catalog):
        found = ProgramRepository(db).get_many_by_ids(
            [catalog["thai"].id, "01HZX3Y5R8K2M4N6P7Q9S0T1VW", catalog["thai"].id]
        )
        assert list(found) == [catalog["thai"].id]

    def test_empty_request_skips_query(self, db):
        assert ProgramRepository(db).get_many_by_ids([]) == {}

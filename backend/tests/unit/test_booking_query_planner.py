"""
Unit tests for booking query planning.

Coverage:
1) Range field selection (text prefix beats date range)
2) Ordering chain construction
3) Status equality / in predicates and truncation
4) Sort field whitelist and page size clamping
"""

from datetime import datetime, timezone

import pytest

from spa_booking.core.config import settings
from spa_booking.core.exceptions import ValidationException
from spa_booking.services.booking_query_planner import (
    DATE_FILTER_IGNORED_NOTICE,
    PREFIX_SENTINEL,
    BookingListParams,
    RangeField,
    SortDirection,
    plan_booking_query,
)

JAN = datetime(2026, 1, 1, tzinfo=timezone.utc)
FEB = datetime(2026, 2, 1, tzinfo=timezone.utc)


class TestRangeSelection:
    def test_no_filters_orders_by_sort_field_then_id(self):
        plan = plan_booking_query(BookingListParams())
        assert plan.range_field == RangeField.NONE
        assert plan.range_predicate is None
        assert plan.ordering_chain == ("created_at", "id")
        assert plan.sort_dir == SortDirection.DESC

    def test_date_range_with_name_sort(self):
        plan = plan_booking_query(
            BookingListParams(date_from=JAN, date_to=FEB, sort_by="name", sort_dir=SortDirection.ASC)
        )
        assert plan.range_field == RangeField.DATE_RANGE
        assert plan.ordering_chain == ("created_at", "name", "id")
        assert plan.expected_pivot_count == 3
        predicate = plan.range_predicate
        assert predicate.field == "created_at"
        assert (predicate.lower, predicate.upper) == (JAN, FEB)
        assert predicate.lower_inclusive and predicate.upper_inclusive

    def test_open_ended_date_range(self):
        plan = plan_booking_query(BookingListParams(date_from=JAN))
        assert plan.range_field == RangeField.DATE_RANGE
        assert plan.range_predicate.upper is None
        # created_at is both range and sort field; it appears once
        assert plan.ordering_chain == ("created_at", "id")

    def test_text_prefix(self):
        plan = plan_booking_query(BookingListParams(q="  Ali ", sort_by="arrival_at"))
        assert plan.range_field == RangeField.TEXT_PREFIX
        predicate = plan.range_predicate
        assert predicate.field == "search_key"
        assert predicate.lower == "ali"
        assert predicate.upper == "ali" + PREFIX_SENTINEL
        assert predicate.lower_inclusive and not predicate.upper_inclusive
        assert plan.ordering_chain == ("search_key", "arrival_at", "id")
        assert plan.notices == ()

    def test_text_prefix_wins_over_dates_with_notice(self):
        plan = plan_booking_query(BookingListParams(q="bo", date_from=JAN, date_to=FEB))
        assert plan.range_field == RangeField.TEXT_PREFIX
        assert DATE_FILTER_IGNORED_NOTICE in plan.notices
        assert plan.meta()["notices"] == [DATE_FILTER_IGNORED_NOTICE]

    def test_blank_search_term_is_ignored(self):
        plan = plan_booking_query(BookingListParams(q="   ", date_from=JAN))
        assert plan.range_field == RangeField.DATE_RANGE
        assert plan.notices == ()

    def test_timestamp_positions_follow_field_types(self):
        plan = plan_booking_query(BookingListParams(q="a", sort_by="updated_at"))
        assert plan.timestamp_positions == (1,)


class TestStatusFilter:
    def test_single_status_is_equality(self):
        plan = plan_booking_query(BookingListParams(status="pending"))
        assert plan.equality.values == ("pending",)
        assert plan.equality.operator == "=="

    def test_several_statuses_use_in(self):
        plan = plan_booking_query(BookingListParams(status=["pending", "confirmed,pending"]))
        assert plan.equality.values == ("pending", "confirmed")
        assert plan.equality.operator == "in"

    def test_unknown_status_is_client_error(self):
        with pytest.raises(ValidationException) as exc_info:
            plan_booking_query(BookingListParams(status="archived"))
        assert exc_info.value.code == "INVALID_STATUS_FILTER"

    def test_excess_alternatives_are_truncated(self, monkeypatch):
        monkeypatch.setattr(settings, "bookings_in_filter_limit", 2)
        plan = plan_booking_query(BookingListParams(status="pending,confirmed,canceled"))
        assert plan.equality.values == ("pending", "confirmed")
        assert plan.notices


class TestSortAndPaging:
    def test_unknown_sort_field_is_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            plan_booking_query(BookingListParams(sort_by="contact_email"))
        assert exc_info.value.code == "UNSUPPORTED_SORT_FIELD"

    def test_name_sort_is_allowed(self):
        plan = plan_booking_query(BookingListParams(sort_by="name"))
        assert plan.ordering_chain == ("name", "id")

    def test_sort_by_id_is_not_duplicated(self):
        plan = plan_booking_query(BookingListParams(sort_by="id"))
        assert plan.ordering_chain == ("id",)

    def test_page_size_defaults_and_clamps(self):
        assert plan_booking_query(BookingListParams()).page_size == settings.bookings_default_page_size
        big = plan_booking_query(BookingListParams(page_size=10_000))
        assert big.page_size == settings.bookings_max_page_size
        assert big.fetch_limit == settings.bookings_max_page_size + 1

    def test_meta_describes_plan(self):
        plan = plan_booking_query(BookingListParams(status="canceled", page_size=5))
        assert plan.meta() == {
            "applied_range": "none",
            "order_by": ["created_at", "id"],
            "sort_dir": "desc",
            "page_size": 5,
            "status_filter": ["canceled"],
            "notices": [],
        }

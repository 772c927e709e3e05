"""Catalog snapshot resolution tests."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from spa_booking.core.exceptions import (
    CatalogItemInactiveException,
    CatalogItemNotFoundException,
    DurationOptionNotFoundException,
)
from spa_booking.services.snapshot_service import CatalogSnapshotService

MISSING_ID = "01HZX3Y5R8K2M4N6P7Q9S0T1VW"


@pytest.fixture
def snapshots(db):
    return CatalogSnapshotService(db)


class TestBuildItems:
    def test_program_and_package_snapshots(self, snapshots, catalog):
        items = snapshots.build_items(
            [
                {
                    "person_name": "Alice",
                    "programs": [{"program_id": catalog["thai"].id, "duration_minutes": 90, "qty": 2}],
                    "packages": [{"package_id": catalog["couple"].id}],
                }
            ]
        )
        program = items[0]["programs"][0]
        assert program == {
            "program_id": catalog["thai"].id,
            "qty": 2,
            "duration_minutes": 90,
            "name_snapshot": "Thai Massage",
            "price_snapshot": "750",
            "duration_snapshot": 90,
            "currency_snapshot": "THB",
        }
        package = items[0]["packages"][0]
        assert package["qty"] == 1
        assert Decimal(package["price_snapshot"]) == Decimal("1200")
        assert package["number_of_people_snapshot"] == 2
        assert package["duration_snapshot"] == 120

    def test_unknown_program(self, snapshots, catalog):
        with pytest.raises(CatalogItemNotFoundException) as exc_info:
            snapshots.build_items(
                [{"person_name": "A", "programs": [{"program_id": MISSING_ID, "duration_minutes": 60}]}]
            )
        err = exc_info.value
        assert err.is_client_error
        assert err.code == "PROGRAM_NOT_FOUND"
        assert MISSING_ID in err.message

    def test_unknown_package(self, snapshots, catalog):
        with pytest.raises(CatalogItemNotFoundException) as exc_info:
            snapshots.build_items([{"person_name": "A", "packages": [{"package_id": MISSING_ID}]}])
        assert exc_info.value.code == "PACKAGE_NOT_FOUND"

    def test_inactive_program(self, snapshots, catalog):
        with pytest.raises(CatalogItemInactiveException):
            snapshots.build_items(
                [
                    {
                        "person_name": "A",
                        "programs": [{"program_id": catalog["retired"].id, "duration_minutes": 60}],
                    }
                ]
            )

    def test_duration_must_match_exactly(self, snapshots, catalog):
        with pytest.raises(DurationOptionNotFoundException) as exc_info:
            snapshots.build_items(
                [
                    {
                        "person_name": "A",
                        "programs": [{"program_id": catalog["thai"].id, "duration_minutes": 75}],
                    }
                ]
            )
        assert exc_info.value.is_client_error

    def test_catalog_is_read_once_per_record_type(self, db):
        programs = MagicMock()
        programs.get_many_by_ids.return_value = {}
        packages = MagicMock()
        packages.get_many_by_ids.return_value = {}
        service = CatalogSnapshotService(db, program_repository=programs, package_repository=packages)

        assert service.build_items([]) == []
        programs.get_many_by_ids.assert_called_once_with([])
        packages.get_many_by_ids.assert_called_once_with([])

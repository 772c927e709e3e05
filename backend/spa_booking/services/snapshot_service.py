# backend/spa_booking/services/snapshot_service.py
"""
Catalog snapshot resolution.

Turns client selections (ids, quantities, a program duration) into
self-contained snapshot dicts by reading the catalog once per record type.
The snapshot freezes name, unit price, duration and currency, so later
catalog edits never change an existing booking.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    CatalogItemInactiveException,
    CatalogItemNotFoundException,
    DurationOptionNotFoundException,
)
from ..models.catalog import Package, Program
from ..repositories.catalog_repository import PackageRepository, ProgramRepository
from .base import BaseService


def _money(value: Any) -> str:
    return format(Decimal(str(value)), "f")


class CatalogSnapshotService(BaseService):
    """Batched catalog reads producing immutable selection snapshots."""

    def __init__(
        self,
        db: Session,
        program_repository: Optional[ProgramRepository] = None,
        package_repository: Optional[PackageRepository] = None,
    ):
        super().__init__(db)
        self.program_repository = program_repository or ProgramRepository(db)
        self.package_repository = package_repository or PackageRepository(db)

    def resolve_programs(self, ids: Iterable[str]) -> Dict[str, Program]:
        return self.program_repository.get_many_by_ids(list(ids))

    def resolve_packages(self, ids: Iterable[str]) -> Dict[str, Package]:
        return self.package_repository.get_many_by_ids(list(ids))

    @BaseService.measure_operation("build_snapshot_items")
    def build_items(self, items_in: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """
        Snapshot every selection of every guest.

        Args:
            items_in: ``[{person_name, programs: [{program_id, duration_minutes, qty}],
                packages: [{package_id, qty}]}]``

        Returns:
            The same guest list with each selection carrying its snapshot fields.

        Raises:
            CatalogItemNotFoundException: an id does not exist
            CatalogItemInactiveException: a record is soft-deleted
            DurationOptionNotFoundException: a program lacks the requested duration
        """
        program_ids = [p["program_id"] for item in items_in for p in item.get("programs") or []]
        package_ids = [p["package_id"] for item in items_in for p in item.get("packages") or []]

        programs = self.resolve_programs(program_ids)
        packages = self.resolve_packages(package_ids)

        snapshots: List[Dict[str, Any]] = []
        for item in items_in:
            snapshots.append(
                {
                    "person_name": item["person_name"],
                    "programs": [
                        self._program_snapshot(sel, programs) for sel in item.get("programs") or []
                    ],
                    "packages": [
                        self._package_snapshot(sel, packages) for sel in item.get("packages") or []
                    ],
                }
            )

        self.logger.debug(
            "Snapshotted %d program(s) and %d package(s) across %d guest(s)",
            len(program_ids),
            len(package_ids),
            len(snapshots),
        )
        return snapshots

    def _program_snapshot(
        self, selection: Mapping[str, Any], programs: Mapping[str, Program]
    ) -> Dict[str, Any]:
        program_id = selection["program_id"]
        program = programs.get(program_id)
        if program is None:
            raise CatalogItemNotFoundException("program", program_id)
        if not program.is_active:
            raise CatalogItemInactiveException("program", program_id)

        duration = int(selection["duration_minutes"])
        option = program.find_option(duration)
        if option is None:
            raise DurationOptionNotFoundException(
                program_id, duration, program.available_durations
            )

        return {
            "program_id": program_id,
            "qty": int(selection.get("qty") or 1),
            "duration_minutes": duration,
            "name_snapshot": program.name,
            "price_snapshot": _money(option["price"]),
            "duration_snapshot": option["duration_minutes"],
            "currency_snapshot": program.currency or settings.default_currency,
        }

    def _package_snapshot(
        self, selection: Mapping[str, Any], packages: Mapping[str, Package]
    ) -> Dict[str, Any]:
        package_id = selection["package_id"]
        package = packages.get(package_id)
        if package is None:
            raise CatalogItemNotFoundException("package", package_id)
        if not package.is_active:
            raise CatalogItemInactiveException("package", package_id)

        return {
            "package_id": package_id,
            "qty": int(selection.get("qty") or 1),
            "name_snapshot": package.name,
            "price_snapshot": _money(package.package_price),
            "original_price_snapshot": _money(package.original_price or 0),
            "number_of_people_snapshot": package.number_of_people,
            "duration_snapshot": package.duration_minutes,
            "currency_snapshot": package.currency or settings.default_currency,
        }

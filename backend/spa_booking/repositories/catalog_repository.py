# backend/spa_booking/repositories/catalog_repository.py
"""
Catalog repositories for programs and packages.

The booking core only needs ``get_many_by_ids`` (one batched read per
snapshot pass); the listing helpers serve the catalog endpoints.
"""

from typing import List

from sqlalchemy.orm import Session

from ..models.catalog import Package, Program
from .base_repository import BaseRepository


class ProgramRepository(BaseRepository[Program]):
    """Data access for treatment programs."""

    def __init__(self, db: Session):
        super().__init__(db, Program)

    def list_all(self) -> List[Program]:
        return self._execute_query(self._build_query().order_by(Program.name, Program.id))

    def list_active(self) -> List[Program]:
        return self._execute_query(
            self._build_query().filter(Program.is_active.is_(True)).order_by(Program.name, Program.id)
        )


class PackageRepository(BaseRepository[Package]):
    """Data access for bundled packages."""

    def __init__(self, db: Session):
        super().__init__(db, Package)

    def list_all(self) -> List[Package]:
        return self._execute_query(self._build_query().order_by(Package.name, Package.id))

    def list_active(self) -> List[Package]:
        return self._execute_query(
            self._build_query().filter(Package.is_active.is_(True)).order_by(Package.name, Package.id)
        )

# backend/spa_booking/services/catalog_service.py
"""
Catalog Service

CRUD for treatment programs and packages. Deleting is a soft delete:
``is_active`` is cleared so bookings that snapshotted the record keep
pointing at something real, while new selections of it are rejected.
"""

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.catalog import Package, Program
from ..repositories.catalog_repository import PackageRepository, ProgramRepository
from ..utils.time_utils import utc_now
from .base import BaseService


def _program_not_found(program_id: str) -> NotFoundException:
    return NotFoundException(
        f"Program {program_id} not found", code="PROGRAM_NOT_FOUND", details={"id": program_id}
    )


def _package_not_found(package_id: str) -> NotFoundException:
    return NotFoundException(
        f"Package {package_id} not found", code="PACKAGE_NOT_FOUND", details={"id": package_id}
    )


def _duration_options(options: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """JSON-safe options; prices are kept as decimal strings."""
    return sorted(
        (
            {
                "duration_minutes": int(o["duration_minutes"]),
                "price": format(Decimal(str(o["price"])), "f"),
            }
            for o in options
        ),
        key=lambda o: o["duration_minutes"],
    )


class CatalogService(BaseService):
    """Programs and packages offered by the spa."""

    def __init__(
        self,
        db: Session,
        program_repository: Optional[ProgramRepository] = None,
        package_repository: Optional[PackageRepository] = None,
    ):
        super().__init__(db)
        self.program_repository = program_repository or ProgramRepository(db)
        self.package_repository = package_repository or PackageRepository(db)

    # Programs

    def list_programs(self, active_only: bool = False) -> List[Program]:
        if active_only:
            return self.program_repository.list_active()
        return self.program_repository.list_all()

    def get_program(self, program_id: str) -> Program:
        program = self.program_repository.get_by_id(program_id)
        if program is None:
            raise _program_not_found(program_id)
        return program

    @BaseService.measure_operation("create_program")
    def create_program(self, data: Mapping[str, Any]) -> Program:
        payload = dict(data)
        payload["duration_options"] = _duration_options(payload.get("duration_options") or [])
        now = utc_now()
        with self.transaction():
            program = self.program_repository.create(**payload, created_at=now, updated_at=now)
        self.logger.info("Created program %s (%s)", program.id, program.name)
        return program

    @BaseService.measure_operation("update_program")
    def update_program(self, program_id: str, changes: Mapping[str, Any]) -> Program:
        updates = {k: v for k, v in changes.items() if v is not None}
        if "duration_options" in updates:
            updates["duration_options"] = _duration_options(updates["duration_options"])
        with self.transaction():
            program = self.get_program(program_id)
            if updates:
                program = self.program_repository.update(program, **updates, updated_at=utc_now())
        return program

    def delete_program(self, program_id: str) -> Program:
        """Soft delete."""
        program = self.update_program(program_id, {"is_active": False})
        self.logger.info("Deactivated program %s", program_id)
        return program

    # Packages

    def list_packages(self, active_only: bool = False) -> List[Package]:
        if active_only:
            return self.package_repository.list_active()
        return self.package_repository.list_all()

    def get_package(self, package_id: str) -> Package:
        package = self.package_repository.get_by_id(package_id)
        if package is None:
            raise _package_not_found(package_id)
        return package

    @BaseService.measure_operation("create_package")
    def create_package(self, data: Mapping[str, Any]) -> Package:
        now = utc_now()
        with self.transaction():
            package = self.package_repository.create(**dict(data), created_at=now, updated_at=now)
        self.logger.info("Created package %s (%s)", package.id, package.name)
        return package

    @BaseService.measure_operation("update_package")
    def update_package(self, package_id: str, changes: Mapping[str, Any]) -> Package:
        updates = {k: v for k, v in changes.items() if v is not None}
        with self.transaction():
            package = self.get_package(package_id)
            if updates:
                package = self.package_repository.update(package, **updates, updated_at=utc_now())
        return package

    def delete_package(self, package_id: str) -> Package:
        """Soft delete."""
        package = self.update_package(package_id, {"is_active": False})
        self.logger.info("Deactivated package %s", package_id)
        return package

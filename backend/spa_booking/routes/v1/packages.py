# backend/spa_booking/routes/v1/packages.py
"""
Package routes - API v1

    GET / - All packages ordered by name
    GET /active - Active packages ordered by name
    GET /{package_id} - One package
    POST / - Create a package
    PATCH /{package_id} - Partial update
    DELETE /{package_id} - Soft delete (is_active = false)
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Response, status
from fastapi.params import Path

from ...api.dependencies import get_catalog_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...schemas.catalog import PackageCreate, PackageResponse, PackageUpdate
from ...services.catalog_service import CatalogService
from .bookings import handle_domain_exception

router = APIRouter(tags=["packages-v1"])


@router.get("", response_model=List[PackageResponse])
async def list_packages(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[PackageResponse]:
    packages = await asyncio.to_thread(catalog_service.list_packages)
    return [PackageResponse.model_validate(p) for p in packages]


@router.get("/active", response_model=List[PackageResponse])
async def list_active_packages(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[PackageResponse]:
    packages = await asyncio.to_thread(catalog_service.list_packages, True)
    return [PackageResponse.model_validate(p) for p in packages]


@router.get("/{package_id}", response_model=PackageResponse, responses={404: {"description": "Package not found"}})
async def get_package(
    package_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(catalog_service.get_package, package_id)
        return PackageResponse.model_validate(package)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    package_data: PackageCreate,
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(catalog_service.create_package, package_data.model_dump())
        return PackageResponse.model_validate(package)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{package_id}", response_model=PackageResponse, responses={404: {"description": "Package not found"}})
async def update_package(
    update_data: PackageUpdate,
    package_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(
            catalog_service.update_package, package_id, update_data.model_dump(exclude_unset=True)
        )
        return PackageResponse.model_validate(package)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_package(
    package_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        await asyncio.to_thread(catalog_service.delete_package, package_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# backend/spa_booking/routes/v1/programs.py
"""
Treatment program routes - API v1

    GET / - All programs ordered by name
    GET /active - Active programs ordered by name
    GET /{program_id} - One program
    POST / - Create a program
    PATCH /{program_id} - Partial update
    DELETE /{program_id} - Soft delete (is_active = false)
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Response, status
from fastapi.params import Path

from ...api.dependencies import get_catalog_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...schemas.catalog import ProgramCreate, ProgramResponse, ProgramUpdate
from ...services.catalog_service import CatalogService
from .bookings import handle_domain_exception

router = APIRouter(tags=["programs-v1"])


@router.get("", response_model=List[ProgramResponse])
async def list_programs(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[ProgramResponse]:
    programs = await asyncio.to_thread(catalog_service.list_programs)
    return [ProgramResponse.model_validate(p) for p in programs]


@router.get("/active", response_model=List[ProgramResponse])
async def list_active_programs(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[ProgramResponse]:
    programs = await asyncio.to_thread(catalog_service.list_programs, True)
    return [ProgramResponse.model_validate(p) for p in programs]


@router.get("/{program_id}", response_model=ProgramResponse, responses={404: {"description": "Program not found"}})
async def get_program(
    program_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> ProgramResponse:
    try:
        program = await asyncio.to_thread(catalog_service.get_program, program_id)
        return ProgramResponse.model_validate(program)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=ProgramResponse, status_code=status.HTTP_201_CREATED)
async def create_program(
    program_data: ProgramCreate,
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> ProgramResponse:
    try:
        program = await asyncio.to_thread(catalog_service.create_program, program_data.model_dump())
        return ProgramResponse.model_validate(program)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{program_id}", response_model=ProgramResponse, responses={404: {"description": "Program not found"}})
async def update_program(
    update_data: ProgramUpdate,
    program_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> ProgramResponse:
    try:
        program = await asyncio.to_thread(
            catalog_service.update_program, program_id, update_data.model_dump(exclude_unset=True)
        )
        return ProgramResponse.model_validate(program)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_program(
    program_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        await asyncio.to_thread(catalog_service.delete_program, program_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

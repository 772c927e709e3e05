# backend/spa_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events.publisher import EventPublisher, get_event_publisher
from ...services.booking_service import BookingService
from ...services.catalog_service import CatalogService
from .database import get_db


def get_event_publisher_dep() -> EventPublisher:
    return get_event_publisher()


def get_booking_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher_dep),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        event_publisher: Publisher for lifecycle events

    Returns:
        BookingService instance
    """
    return BookingService(db, event_publisher=event_publisher)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)

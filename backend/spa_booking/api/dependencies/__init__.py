"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_actor_id
from .database import get_db
from .services import get_booking_service, get_catalog_service, get_event_publisher_dep

__all__ = [
    # Auth
    "get_actor_id",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_catalog_service",
    "get_event_publisher_dep",
]

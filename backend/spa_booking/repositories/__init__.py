# backend/spa_booking/repositories/__init__.py
"""
Repository layer for the spa booking API.

Repositories own every SQLAlchemy query; services own transactions.
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .catalog_repository import PackageRepository, ProgramRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "PackageRepository",
    "ProgramRepository",
]

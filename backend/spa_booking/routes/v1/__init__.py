# backend/spa_booking/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import bookings, packages, programs

__all__ = [
    "bookings",
    "packages",
    "programs",
]

# backend/spa_booking/models/__init__.py
from .booking import Booking, BookingStatus
from .catalog import Package, Program

__all__ = ["Booking", "BookingStatus", "Package", "Program"]

# backend/spa_booking/core/constants.py
"""Application-wide constants."""

BRAND_NAME = "Deflora Spa"
DEFAULT_CURRENCY = "THB"

API_TITLE = f"{BRAND_NAME} Booking API"
API_DESCRIPTION = "Bookings, treatment programs and packages for the spa front desk."
API_VERSION = "1.0.0"

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

MAX_NOTE_LENGTH = 2000

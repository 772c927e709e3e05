# backend/spa_booking/routes/__init__.py
"""HTTP route modules."""

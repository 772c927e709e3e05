# backend/tests/conftest.py
"""
Pytest configuration.

Tests run against an in-memory SQLite store shared through a single
connection (StaticPool), so the service layer, the repositories and the
TestClient all see the same data. The schema is rebuilt for every test.
"""

import os

# Must be set BEFORE any spa_booking imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("BOOKING_TXN_RETRY_BACKOFF_SECONDS", "0")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from spa_booking.api.dependencies.database import get_db
from spa_booking.api.dependencies.services import get_event_publisher_dep
from spa_booking.database import Base, SessionLocal, engine
from spa_booking.events.publisher import EventPublisher
from spa_booking.main import app
from spa_booking.models.booking import Booking, BookingStatus, normalize_search_key
from spa_booking.models.catalog import Package, Program
from spa_booking.utils.time_utils import truncate_to_millis

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db() -> Iterator[Session]:
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def publisher() -> EventPublisher:
    return EventPublisher()


@pytest.fixture
def recorded_events(publisher: EventPublisher) -> List[Any]:
    """Every event published during the test, in order."""
    events: List[Any] = []
    for name in ("BookingCreated", "BookingConfirmed", "BookingCanceled"):
        publisher.subscribe(name, events.append)
    return events


@pytest.fixture
def client(db: Session, publisher: EventPublisher) -> Iterator[TestClient]:
    """Create a test client bound to the test session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher_dep] = lambda: publisher

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def catalog(db: Session) -> Dict[str, Any]:
    """
    A small catalog:

    - thai: program, 60 min @ 500 / 90 min @ 750
    - couple: package @ 1200 (was 1500) for 2 people, 120 min
    - retired: inactive program
    """
    now = BASE_TIME
    thai = Program(
        name="Thai Massage",
        description="Traditional stretching massage",
        duration_options=[
            {"duration_minutes": 60, "price": "500"},
            {"duration_minutes": 90, "price": "750"},
        ],
        currency="THB",
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    retired = Program(
        name="Hot Stone",
        duration_options=[{"duration_minutes": 60, "price": "900"}],
        currency="THB",
        is_active=False,
        created_at=now,
        updated_at=now,
    )
    couple = Package(
        name="Couple Retreat",
        original_price=Decimal("1500"),
        package_price=Decimal("1200"),
        number_of_people=2,
        duration_minutes=120,
        currency="THB",
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add_all([thai, retired, couple])
    db.commit()
    return {"thai": thai, "retired": retired, "couple": couple}


@pytest.fixture
def booking_payload(catalog: Dict[str, Any]):
    """Create-booking body: one guest with a 60 min Thai massage (500) and the couple package (1200)."""

    def _build(**overrides: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "arrival_at": "2026-04-01T10:00:00+07:00",
            "contact": {"name": "Alice Smith", "email": "alice@example.com", "phone": "+66 81 234 5678"},
            "items": [
                {
                    "person_name": "Alice",
                    "programs": [
                        {"program_id": catalog["thai"].id, "duration_minutes": 60, "qty": 1}
                    ],
                    "packages": [{"package_id": catalog["couple"].id}],
                }
            ],
            "note": "Window room please",
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def seed_booking(db: Session):
    """Factory inserting booking rows directly, bypassing the service layer."""

    def _seed(
        *,
        name: str = "Guest",
        status: BookingStatus = BookingStatus.PENDING,
        created_at: Optional[datetime] = None,
        arrival_at: Optional[datetime] = None,
        subtotal: Decimal = Decimal("500"),
    ) -> Booking:
        created = truncate_to_millis(created_at or BASE_TIME)
        booking = Booking(
            status=status.value,
            arrival_at=arrival_at or created + timedelta(days=7),
            contact_name=name,
            contact_email=f"{name.lower().replace(' ', '.')}@example.com",
            contact_phone=None,
            search_key=normalize_search_key(name),
            items=[
                {
                    "person_name": name,
                    "programs": [
                        {
                            "program_id": "01HZX3Y5R8K2M4N6P7Q9S0T1VW",
                            "qty": 1,
                            "duration_minutes": 60,
                            "name_snapshot": "Thai Massage",
                            "price_snapshot": str(subtotal),
                            "duration_snapshot": 60,
                            "currency_snapshot": "THB",
                        }
                    ],
                    "packages": [],
                }
            ],
            party_size=1,
            note="",
            subtotal=subtotal,
            grand_total=subtotal,
            created_at=created,
            updated_at=created,
        )
        db.add(booking)
        db.commit()
        return booking

    return _seed

"""Error envelope rendering tests."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from spa_booking.core.config import settings
from spa_booking.core.exceptions import BookingNotFoundException
from spa_booking.errors import register_error_handlers


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/missing")
    async def missing():
        raise BookingNotFoundException("B1")

    return app


class TestErrorMediaType:
    def test_defaults_to_plain_json(self):
        response = TestClient(_app()).get("/missing")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["code"] == "BOOKING_NOT_FOUND"

    def test_problem_json_when_enabled(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "problem_json_media_type", True)
        response = TestClient(_app()).get("/missing")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["kind"] == "client"
        assert body["instance"] == "/missing"

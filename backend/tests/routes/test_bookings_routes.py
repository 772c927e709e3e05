"""
Booking route tests via TestClient.

Routes only translate HTTP to service calls; these tests pin the wire
format: status codes, the problem envelope and the listing shape.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from spa_booking.events import BookingCreated
from spa_booking.models.booking import BookingStatus
from spa_booking.utils.cursor_codec import encode_page_token

BASE = "/api/v1/bookings"
MISSING_ID = "01HZX3Y5R8K2M4N6P7Q9S0T1VW"


@pytest.fixture
def created(client, booking_payload):
    response = client.post(BASE, json=booking_payload(), headers={"X-Actor-Id": "front-desk"})
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    def test_create_returns_priced_booking(self, recorded_events, created):
        assert created["status"] == "pending"
        assert Decimal(created["totals"]["subtotal"]) == Decimal("1700")
        assert Decimal(created["totals"]["grand_total"]) == Decimal("1700")
        assert created["created_by"] == "front-desk"
        assert created["party_size"] == 1
        assert created["note"] == "Window room please"
        assert created["contact"]["email"] == "alice@example.com"
        assert created["arrival_at"].startswith("2026-04-01T03:00:00")
        program = created["items"][0]["programs"][0]
        assert program["name_snapshot"] == "Thai Massage"
        assert Decimal(program["price_snapshot"]) == Decimal("500")
        assert isinstance(recorded_events[0], BookingCreated)

    def test_anonymous_create_has_no_creator(self, client, booking_payload):
        response = client.post(BASE, json=booking_payload())
        assert response.status_code == 201
        assert response.json()["created_by"] is None

    def test_client_totals_are_rejected(self, client, booking_payload):
        response = client.post(BASE, json=booking_payload(totals={"subtotal": 1}))
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_guest_without_selection_is_rejected(self, client, booking_payload):
        response = client.post(BASE, json=booking_payload(items=[{"person_name": "Solo"}]))
        assert response.status_code == 422

    def test_note_length_is_capped(self, client, booking_payload):
        response = client.post(BASE, json=booking_payload(note="x" * 2001))
        assert response.status_code == 422

    def test_unknown_program_is_client_error(self, client, booking_payload):
        payload = booking_payload(
            items=[
                {
                    "person_name": "Alice",
                    "programs": [{"program_id": MISSING_ID, "duration_minutes": 60}],
                }
            ]
        )
        response = client.post(BASE, json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "PROGRAM_NOT_FOUND"
        assert body["kind"] == "client"
        assert MISSING_ID in body["detail"]

    def test_inactive_program_is_client_error(self, client, booking_payload, catalog):
        payload = booking_payload(
            items=[
                {
                    "person_name": "Alice",
                    "programs": [{"program_id": catalog["retired"].id, "duration_minutes": 60}],
                }
            ]
        )
        response = client.post(BASE, json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == "PROGRAM_INACTIVE"


class TestLifecycleRoutes:
    def test_confirm_cancel_update(self, client, created):
        booking_id = created["id"]

        confirm = client.post(f"{BASE}/{booking_id}/confirm")
        assert confirm.status_code == 200
        assert confirm.json()["status"] == "confirmed"

        cancel = client.post(f"{BASE}/{booking_id}/cancel")
        assert cancel.status_code == 200
        assert cancel.json()["status"] == "canceled"

        again = client.post(f"{BASE}/{booking_id}/cancel")
        assert again.status_code == 200
        assert again.json()["updated_at"] == cancel.json()["updated_at"]

        update = client.patch(f"{BASE}/{booking_id}", json={"note": "late"})
        assert update.status_code == 400
        assert update.json()["code"] == "BOOKING_CANCELED"

        reconfirm = client.post(f"{BASE}/{booking_id}/confirm")
        assert reconfirm.status_code == 400
        assert reconfirm.json()["code"] == "INVALID_STATUS_TRANSITION"
        assert reconfirm.json()["errors"] == {"from": "canceled", "to": "confirmed"}

    def test_get_and_not_found(self, client, created):
        assert client.get(f"{BASE}/{created['id']}").json()["id"] == created["id"]
        missing = client.get(f"{BASE}/{MISSING_ID}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "BOOKING_NOT_FOUND"

    def test_malformed_id_is_rejected(self, client, db):
        assert client.get(f"{BASE}/not-a-ulid").status_code == 422

    def test_patch_replaces_items(self, client, created, catalog):
        response = client.patch(
            f"{BASE}/{created['id']}",
            json={
                "items": [
                    {
                        "person_name": "Alice",
                        "programs": [
                            {"program_id": catalog["thai"].id, "duration_minutes": 90, "qty": 2}
                        ],
                    }
                ],
                "contact": {"phone": "+66 2 000 0000"},
            },
        )
        assert response.status_code == 200, response.text
        body = response.json()
        assert Decimal(body["totals"]["subtotal"]) == Decimal("1500")
        assert body["contact"]["phone"] == "+66 2 000 0000"
        assert body["contact"]["name"] == "Alice Smith"


class TestListing:
    @pytest.fixture
    def five(self, seed_booking):
        t0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        return [
            seed_booking(name=name, created_at=t0 + timedelta(minutes=i))
            for i, name in enumerate(["Ann", "Ben", "Cat", "Dan", "Eve"])
        ]

    def test_pages_over_five_records(self, client, five):
        expected = [b.id for b in reversed(five)]
        seen = []
        token = None
        pages = []
        while True:
            params = {"page_size": 2, "sort_by": "created_at", "sort_dir": "desc"}
            if token:
                params["page_token"] = token
            body = client.get(BASE, params=params).json()
            pages.append((len(body["items"]), body["has_more"]))
            seen.extend(item["id"] for item in body["items"])
            token = body["next_page_token"]
            if not body["has_more"]:
                break

        assert pages == [(2, True), (2, True), (1, False)]
        assert seen == expected
        assert token is None

    def test_meta_and_notice(self, client, five):
        body = client.get(BASE, params={"q": "a", "from": "2024-01-01T00:00:00Z"}).json()
        assert body["meta"]["applied_range"] == "text_prefix"
        assert body["meta"]["order_by"] == ["search_key", "created_at", "id"]
        assert len(body["meta"]["notices"]) == 1
        assert [item["contact"]["name"] for item in body["items"]] == ["Ann"]

    def test_repeated_status_params(self, client, seed_booking):
        seed_booking(name="P", status=BookingStatus.PENDING)
        seed_booking(name="C", status=BookingStatus.CONFIRMED)
        seed_booking(name="X", status=BookingStatus.CANCELED)
        response = client.get(BASE, params=[("status", "pending"), ("status", "canceled")])
        names = sorted(item["contact"]["name"] for item in response.json()["items"])
        assert names == ["P", "X"]
        assert response.json()["meta"]["status_filter"] == ["pending", "canceled"]

    def test_mismatched_token_is_client_error(self, client, five):
        first = client.get(BASE, params={"page_size": 2}).json()
        response = client.get(
            BASE,
            params={
                "page_size": 2,
                "from": "2024-01-01T00:00:00Z",
                "sort_by": "name",
                "page_token": first["next_page_token"],
            },
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_PAGE_TOKEN"
        assert (body["errors"]["expected"], body["errors"]["received"]) == (3, 2)

    def test_unknown_sort_field(self, client, db):
        response = client.get(BASE, params={"sort_by": "contact_email"})
        assert response.status_code == 400
        assert response.json()["code"] == "UNSUPPORTED_SORT_FIELD"

    def test_garbage_token(self, client, db):
        response = client.get(BASE, params={"page_token": "***"})
        assert response.status_code == 400
        assert response.json()["kind"] == "client"

    def test_out_of_range_token_timestamp_is_client_error(self, client, five):
        token = encode_page_token([10**20, MISSING_ID], 1, "none")
        response = client.get(BASE, params={"page_size": 2, "page_token": token})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_PAGE_TOKEN"
        assert body["errors"]["reason"] == "malformed"

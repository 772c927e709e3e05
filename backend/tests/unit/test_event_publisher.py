"""Event publisher tests."""

from datetime import datetime, timezone
import logging
from unittest.mock import MagicMock

from spa_booking.events import BookingCanceled, BookingConfirmed, EventPublisher

WHEN = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _canceled():
    return BookingCanceled(
        booking_id="B1", contact_email="a@example.com", previous_status="pending", canceled_at=WHEN
    )


class TestEventPublisher:
    def test_dispatches_by_event_class_name(self):
        publisher = EventPublisher()
        on_cancel = MagicMock()
        on_confirm = MagicMock()
        publisher.subscribe("BookingCanceled", on_cancel)
        publisher.subscribe("BookingConfirmed", on_confirm)

        event = _canceled()
        publisher.publish(event)

        on_cancel.assert_called_once_with(event)
        on_confirm.assert_not_called()

    def test_failing_handler_is_logged_and_isolated(self, caplog):
        publisher = EventPublisher()
        after = MagicMock()
        publisher.subscribe("BookingCanceled", MagicMock(side_effect=RuntimeError("smtp down")))
        publisher.subscribe("BookingCanceled", after)

        with caplog.at_level(logging.ERROR):
            publisher.publish(_canceled())

        after.assert_called_once()
        assert "BookingCanceled" in caplog.text

    def test_unsubscribe(self):
        publisher = EventPublisher()
        handler = MagicMock()
        publisher.subscribe("BookingConfirmed", handler)
        publisher.unsubscribe("BookingConfirmed", handler)
        publisher.publish(
            BookingConfirmed(
                booking_id="B1", contact_email="a@example.com", arrival_at=WHEN, confirmed_at=WHEN
            )
        )
        handler.assert_not_called()

    def test_to_dict(self):
        assert _canceled().to_dict()["previous_status"] == "pending"

# tests/notifications/test_builders.py
"""
Тесты построителей уведомлений.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.common.constants import BROADCAST_RECIPIENT
from src.notifications.builders import build_notification, render_box
from src.shared.events import (
    ScheduleUpdateEvent,
    TicketCreatedMessage,
    TicketValidatedMessage,
    UnrecognizedMessage,
)
from src.shared.models.enums import (
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    ScheduleEventType,
    Severity,
    TripStatus,
)

WHEN = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestRenderBox:
    def test_layout(self) -> None:
        text = render_box("TITLE", [("Trip", "trip-1"), ("Fare", 3.5), ("At", WHEN), ("Reason", None)])
        lines = text.splitlines()
        assert lines[0] == lines[2] == lines[-1]
        assert lines[0].startswith("+-") and lines[0].endswith("-+")
        assert lines[1].startswith("| TITLE")
        assert "| Fare: 3.50" in text
        assert "At: 2026-03-01 12:00 UTC" in text
        assert "Reason: -" in text
        assert len({len(line) for line in lines}) == 1

    def test_deterministic(self) -> None:
        rows = [("A", 1), ("B", "x")]
        assert render_box("T", rows) == render_box("T", rows)


class TestBuildNotification:
    def test_schedule_broadcast(self) -> None:
        event = ScheduleUpdateEvent(
            disruption_id="d-1",
            severity=Severity.HIGH,
            event_type=ScheduleEventType.DELAY,
            trip_id="trip-1",
            route_number="42A",
            previous_status=TripStatus.SCHEDULED,
            new_status=TripStatus.DELAYED,
            delay_minutes=45,
            reason="Traffic",
        )
        notification = build_notification(event, NotificationChannel.SMS)

        assert notification.passenger_id == BROADCAST_RECIPIENT
        assert notification.notification_type == NotificationType.SCHEDULE_DISRUPTION
        assert notification.channel == NotificationChannel.SMS
        assert notification.status == NotificationStatus.PENDING
        assert notification.subject == "Schedule update: route 42A (DELAY)"
        assert "Delay: 45 min" in notification.message
        assert "SCHEDULED -> DELAYED" in notification.message
        assert notification.metadata["disruptionId"] == "d-1"
        assert notification.metadata["severity"] == "HIGH"

    def test_schedule_addressed(self) -> None:
        event = ScheduleUpdateEvent(
            disruption_id="d-1", severity=Severity.LOW, trip_id="trip-1", passenger_id="passenger-1"
        )
        notification = build_notification(event)
        assert notification.passenger_id == "passenger-1"
        assert notification.subject == "Schedule update: route - (SCHEDULE_CHANGE)"

    def test_schedule_from_other_producer(self) -> None:
        event = ScheduleUpdateEvent(disruption_id="d-9", severity="CRITICAL", event_type="STRIKE")
        notification = build_notification(event)

        assert notification.passenger_id == BROADCAST_RECIPIENT
        assert notification.subject == "Schedule update: route - (STRIKE)"
        assert "Severity: CRITICAL" in notification.message
        assert "Trip: -" in notification.message
        assert notification.metadata["severity"] == "CRITICAL"
        assert "tripId" not in notification.metadata

    def test_ticket_validated(self) -> None:
        message = TicketValidatedMessage(
            validation_id="val-1",
            ticket_id="ticket-1",
            passenger_id="passenger-1",
            validated_at=WHEN,
            validated_by="inspector-7",
        )
        notification = build_notification(message)
        assert notification.notification_type == NotificationType.TICKET_VALIDATED
        assert notification.subject == "Ticket ticket-1 validated"
        assert notification.metadata == {"validationId": "val-1", "ticketId": "ticket-1"}

    def test_ticket_created(self) -> None:
        message = TicketCreatedMessage(
            ticket_id="ticket-1",
            passenger_id="passenger-1",
            trip_id="trip-1",
            qr_code="QR-abc",
            purchase_time=WHEN,
            fare=3.5,
        )
        notification = build_notification(message)
        assert notification.notification_type == NotificationType.TICKET_PURCHASED
        assert notification.passenger_id == "passenger-1"
        assert "QR: QR-abc" in notification.message

    def test_same_message_same_text(self) -> None:
        message = TicketCreatedMessage(
            ticket_id="t", passenger_id="p", trip_id="trip", qr_code="QR", purchase_time=WHEN
        )
        assert build_notification(message).message == build_notification(message).message

    def test_unrecognized_rejected(self) -> None:
        with pytest.raises(TypeError):
            build_notification(UnrecognizedMessage(payload={"x": 1}))

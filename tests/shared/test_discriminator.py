# tests/shared/test_discriminator.py
"""
Тесты классификатора входящих сообщений.
"""

from __future__ import annotations

import json

import pytest

from src.shared.events import (
    MalformedMessageError,
    ScheduleUpdateEvent,
    TicketCreatedMessage,
    TicketValidatedMessage,
    UnknownMessageFormatError,
    UnrecognizedMessage,
    classify,
    classify_strict,
    decode_payload,
)
from src.shared.models.enums import ScheduleEventType, Severity, TripStatus


def schedule_payload(**extra) -> dict:
    return {
        "eventId": "evt-1",
        "disruptionId": "evt-1",
        "severity": "HIGH",
        "eventType": "CANCELLATION",
        "tripId": "trip-1",
        "routeNumber": "42A",
        "previousStatus": "SCHEDULED",
        "newStatus": "CANCELLED",
        "delayMinutes": 0,
        "timestamp": "2026-03-01T12:00:00Z",
        **extra,
    }


def validated_payload(**extra) -> dict:
    return {
        "validationId": "val-1",
        "ticketId": "ticket-1",
        "passengerId": "passenger-1",
        "validatedAt": "2026-03-01T12:05:00Z",
        **extra,
    }


def created_payload(**extra) -> dict:
    return {
        "ticketId": "ticket-1",
        "passengerId": "passenger-1",
        "tripId": "trip-1",
        "qrCode": "QR-abc",
        "purchaseTime": "2026-03-01T11:00:00Z",
        "fare": 3.5,
        **extra,
    }


class TestClassify:
    """Распознавание по маркерным полям."""

    def test_schedule_update(self) -> None:
        message = classify(schedule_payload())
        assert isinstance(message, ScheduleUpdateEvent)
        assert message.severity == Severity.HIGH
        assert message.trip_id == "trip-1"

    def test_ticket_validated(self) -> None:
        assert isinstance(classify(validated_payload()), TicketValidatedMessage)

    def test_ticket_created(self) -> None:
        message = classify(created_payload())
        assert isinstance(message, TicketCreatedMessage)
        assert message.qr_code == "QR-abc"

    def test_schedule_wins_over_ticket_created(self) -> None:
        """disruptionId + severity побеждают, даже если есть qrCode и purchaseTime."""
        payload = schedule_payload(qrCode="QR-abc", purchaseTime="2026-03-01T11:00:00Z")
        assert isinstance(classify(payload), ScheduleUpdateEvent)

    def test_schedule_wins_over_ticket_validated(self) -> None:
        payload = schedule_payload(validationId="val-1", validatedAt="2026-03-01T12:05:00Z")
        assert isinstance(classify(payload), ScheduleUpdateEvent)

    def test_validated_wins_over_created(self) -> None:
        payload = {**created_payload(), **validated_payload()}
        assert isinstance(classify(payload), TicketValidatedMessage)

    def test_one_marker_is_not_enough(self) -> None:
        payload = {"disruptionId": "d-1", "tripId": "trip-1"}
        assert isinstance(classify(payload), UnrecognizedMessage)

    def test_null_marker_counts_as_absent(self) -> None:
        payload = created_payload(qrCode=None)
        assert isinstance(classify(payload), UnrecognizedMessage)

    def test_unrecognized_keeps_payload(self) -> None:
        message = classify({"foo": 1, "bar": 2})
        assert isinstance(message, UnrecognizedMessage)
        assert message.keys() == ["bar", "foo"]

    def test_unknown_severity_is_still_schedule(self) -> None:
        payload = {
            "disruptionId": "d-1",
            "severity": "CRITICAL",
            "tripId": "t-1",
            "qrCode": "QR-abc",
            "purchaseTime": "2026-03-01T11:00:00Z",
        }
        message = classify(payload)
        assert isinstance(message, ScheduleUpdateEvent)
        assert message.severity == "CRITICAL"

    @pytest.mark.parametrize("severity", ["high", "Severe", ""])
    def test_any_severity_value_is_accepted(self, severity: str) -> None:
        message = classify(schedule_payload(severity=severity))
        assert isinstance(message, ScheduleUpdateEvent)
        assert message.severity == severity

    def test_schedule_without_trip(self) -> None:
        payload = {"disruptionId": 42, "severity": "HIGH", "eventType": "STRIKE", "newStatus": "SUSPENDED"}
        message = classify(payload)
        assert isinstance(message, ScheduleUpdateEvent)
        assert message.trip_id is None
        assert message.disruption_id == "42"
        assert message.severity == Severity.HIGH
        assert message.event_type == "STRIKE"
        assert message.new_status == "SUSPENDED"

    def test_known_values_stay_enums(self) -> None:
        message = classify(schedule_payload())
        assert message.event_type is ScheduleEventType.CANCELLATION
        assert message.new_status is TripStatus.CANCELLED

    def test_markers_with_incompatible_fields_are_malformed(self) -> None:
        with pytest.raises(MalformedMessageError):
            classify(schedule_payload(delayMinutes="soon"))


class TestClassifyStrict:
    def test_unknown_raises(self) -> None:
        with pytest.raises(UnknownMessageFormatError):
            classify_strict({"hello": "world"})

    def test_known_passes_through(self) -> None:
        assert isinstance(classify_strict(created_payload()), TicketCreatedMessage)


class TestDecodePayload:
    def test_bytes(self) -> None:
        body = json.dumps(created_payload()).encode("utf-8")
        assert decode_payload(body)["qrCode"] == "QR-abc"

    def test_not_json(self) -> None:
        with pytest.raises(MalformedMessageError):
            decode_payload(b"not json at all")

    def test_not_object(self) -> None:
        with pytest.raises(MalformedMessageError):
            decode_payload(b"[1, 2, 3]")

    def test_invalid_utf8(self) -> None:
        with pytest.raises(MalformedMessageError):
            decode_payload(b"\xff\xfe\xfa")

# tests/services/test_schedule_publisher.py
"""
Тесты публикаторов событий расписания и сообщений о билетах.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.infra.event_bus import EventBusError
from src.services.ticketing_service.publisher import TicketEventPublisher
from src.services.transport_service.publisher import ScheduleEventPublisher
from src.shared.models.enums import ScheduleEventType, TripStatus
from src.shared.models.ticket import Ticket
from src.shared.models.transport import Trip


class TestScheduleEventPublisher:
    @pytest.mark.asyncio
    async def test_publish(self, mock_event_bus: AsyncMock, sample_trip: Trip) -> None:
        publisher = ScheduleEventPublisher(mock_event_bus, topic="schedule-updates")
        trip = sample_trip.model_copy(update={"status": TripStatus.CANCELLED})

        result = await publisher.publish(trip, TripStatus.SCHEDULED)

        assert result.success and not result.skipped
        topic, payload = mock_event_bus.publish.await_args.args
        assert topic == "schedule-updates"
        assert payload["eventType"] == "CANCELLATION"
        assert payload["routeNumber"] == "42A"
        assert mock_event_bus.publish.await_args.kwargs["message_id"] == payload["eventId"] == result.message_id

    @pytest.mark.asyncio
    async def test_skipped_when_status_unchanged(self, mock_event_bus: AsyncMock, sample_trip: Trip) -> None:
        result = await ScheduleEventPublisher(mock_event_bus).publish(sample_trip, TripStatus.SCHEDULED)
        assert result.success and result.skipped
        mock_event_bus.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bus_error_is_soft(self, mock_event_bus: AsyncMock, sample_trip: Trip) -> None:
        mock_event_bus.publish.side_effect = EventBusError("Нет соединения с RabbitMQ")
        trip = sample_trip.model_copy(update={"status": TripStatus.DELAYED})
        result = await ScheduleEventPublisher(mock_event_bus).publish(trip, TripStatus.SCHEDULED)
        assert result.success is False
        assert "RabbitMQ" in result.error_message

    @pytest.mark.asyncio
    async def test_unexpected_error_is_soft(self, mock_event_bus: AsyncMock, sample_trip: Trip) -> None:
        mock_event_bus.publish.side_effect = TypeError("not serializable")
        trip = sample_trip.model_copy(update={"status": TripStatus.DELAYED})
        result = await ScheduleEventPublisher(mock_event_bus).publish(
            trip, TripStatus.SCHEDULED, ScheduleEventType.ROUTE_UPDATE
        )
        assert result.success is False


class TestTicketEventPublisher:
    @pytest.fixture
    def ticket(self, now: datetime) -> Ticket:
        return Ticket(
            ticket_id="ticket-1",
            passenger_id="passenger-1",
            trip_id="trip-1",
            route_id="route-1",
            route_number="42A",
            fare=3.5,
            qr_code="QR-abc",
            purchased_at=now,
            valid_until=now + timedelta(hours=24),
        )

    @pytest.mark.asyncio
    async def test_created(self, mock_event_bus: AsyncMock, ticket: Ticket) -> None:
        result = await TicketEventPublisher(mock_event_bus, created_topic="tc").publish_created(ticket)
        assert result.success
        topic, payload = mock_event_bus.publish.await_args.args
        assert topic == "tc"
        assert {"qrCode", "purchaseTime"} <= payload.keys()

    @pytest.mark.asyncio
    async def test_validated(self, mock_event_bus: AsyncMock, ticket: Ticket) -> None:
        await TicketEventPublisher(mock_event_bus).publish_validated(ticket)
        topic, payload = mock_event_bus.publish.await_args.args
        assert topic == "ticket-validated"
        assert {"validationId", "validatedAt"} <= payload.keys()

    @pytest.mark.asyncio
    async def test_failure_is_soft(self, mock_event_bus: AsyncMock, ticket: Ticket) -> None:
        mock_event_bus.publish.side_effect = EventBusError("down")
        result = await TicketEventPublisher(mock_event_bus).publish_created(ticket)
        assert result.success is False
        assert result.error_message == "down"

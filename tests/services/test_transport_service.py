# tests/services/test_transport_service.py
"""
Тесты сервиса маршрутов и рейсов: переходы статуса, события расписания, места.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.infra.event_bus import EventBusError
from src.services.transport_service.publisher import ScheduleEventPublisher
from src.services.transport_service.repository import RouteRepository, TripRepository
from src.services.transport_service.service import TransportService
from src.shared.errors import DomainError, ErrorCode, NotFoundError
from src.shared.models.enums import ScheduleEventType, TripStatus
from src.shared.models.transport import (
    Route,
    RouteCreateRequest,
    Trip,
    TripCreateRequest,
    TripStatusUpdate,
    TripUpdateRequest,
)
from tests.fakes import FakeCollection


@pytest_asyncio.fixture
async def service(mock_event_bus: AsyncMock, sample_route: Route, sample_trip: Trip) -> TransportService:
    routes = RouteRepository(FakeCollection("routes"))
    trips = TripRepository(FakeCollection("trips"))
    await routes.create(sample_route)
    await trips.create(sample_trip)
    return TransportService(routes, trips, ScheduleEventPublisher(mock_event_bus))


def published(mock_event_bus: AsyncMock) -> list[dict]:
    return [call.args[1] for call in mock_event_bus.publish.await_args_list]


class TestRoutesAndTrips:
    @pytest.mark.asyncio
    async def test_create_route(self, service: TransportService) -> None:
        route = await service.create_route(
            RouteCreateRequest(
                route_number="7",
                route_name="Ring",
                start_location="A",
                end_location="A",
                distance=12.0,
                estimated_duration=50,
                fare=2.0,
            )
        )
        assert (await service.get_route(route.route_id)).route_name == "Ring"

    @pytest.mark.asyncio
    async def test_create_trip_copies_route(self, service: TransportService, now: datetime) -> None:
        trip = await service.create_trip(
            TripCreateRequest(
                route_id="route-1",
                vehicle_id="BUS-9",
                driver_name="Oleg",
                departure_time=now,
                arrival_time=now + timedelta(minutes=40),
                total_seats=30,
            )
        )
        assert trip.route_number == "42A"
        assert trip.fare == 3.5
        assert trip.available_seats == 30
        assert trip.status == TripStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_create_trip_unknown_route(self, service: TransportService, now: datetime) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await service.create_trip(
                TripCreateRequest(
                    route_id="nope",
                    vehicle_id="BUS-9",
                    driver_name="Oleg",
                    departure_time=now,
                    arrival_time=now + timedelta(minutes=40),
                    total_seats=30,
                )
            )
        assert exc_info.value.code == ErrorCode.ROUTE_NOT_FOUND

    def test_arrival_before_departure(self, now: datetime) -> None:
        with pytest.raises(ValueError):
            TripCreateRequest(
                route_id="route-1",
                vehicle_id="BUS-9",
                driver_name="Oleg",
                departure_time=now,
                arrival_time=now,
                total_seats=30,
            )

    @pytest.mark.asyncio
    async def test_list_trips_filters(self, service: TransportService) -> None:
        assert len(await service.list_trips(route_id="route-1")) == 1
        assert await service.list_trips(status=TripStatus.DELAYED) == []


class TestUpdateTrip:
    """Смена статуса и события расписания."""

    @pytest.mark.asyncio
    async def test_delay_publishes_event(self, service: TransportService, mock_event_bus: AsyncMock) -> None:
        trip = await service.update_trip_status(
            "trip-1",
            TripStatusUpdate(status=TripStatus.DELAYED, delay_minutes=15, delay_reason="Traffic"),
        )
        assert trip.status == TripStatus.DELAYED
        assert trip.delay_minutes == 15

        [event] = published(mock_event_bus)
        assert mock_event_bus.publish.await_args.args[0] == "schedule-updates"
        assert event["eventType"] == "DELAY"
        assert event["severity"] == "MEDIUM"
        assert event["previousStatus"] == "SCHEDULED"
        assert event["newStatus"] == "DELAYED"
        assert event["reason"] == "Traffic"

    @pytest.mark.asyncio
    async def test_cancellation(self, service: TransportService, mock_event_bus: AsyncMock) -> None:
        await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.CANCELLED))
        [event] = published(mock_event_bus)
        assert event["eventType"] == "CANCELLATION"
        assert event["severity"] == "HIGH"

    @pytest.mark.asyncio
    async def test_no_status_change_publishes_nothing(
        self, service: TransportService, mock_event_bus: AsyncMock
    ) -> None:
        trip = await service.update_trip("trip-1", TripUpdateRequest(driver_name="Boris"))
        assert trip.driver_name == "Boris"
        assert trip.status == TripStatus.SCHEDULED
        mock_event_bus.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_illegal_transition_writes_nothing(
        self, service: TransportService, mock_event_bus: AsyncMock
    ) -> None:
        await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.CANCELLED))
        mock_event_bus.publish.reset_mock()

        with pytest.raises(DomainError) as exc_info:
            await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.IN_PROGRESS))
        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION
        assert (await service.get_trip("trip-1")).status == TripStatus.CANCELLED
        mock_event_bus.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_actual_times_are_stamped(self, service: TransportService) -> None:
        started = await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.IN_PROGRESS))
        assert started.actual_departure_time is not None
        finished = await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.COMPLETED))
        assert finished.actual_arrival_time is not None
        assert finished.actual_departure_time == started.actual_departure_time

    @pytest.mark.asyncio
    async def test_resume_clears_delay(self, service: TransportService, mock_event_bus: AsyncMock) -> None:
        await service.update_trip_status(
            "trip-1",
            TripStatusUpdate(status=TripStatus.DELAYED, delay_minutes=15, delay_reason="Traffic"),
        )
        resumed = await service.update_trip_status(
            "trip-1",
            TripStatusUpdate(status=TripStatus.IN_PROGRESS, delay_minutes=None, delay_reason=None),
        )
        assert resumed.delay_minutes == 0
        assert resumed.delay_reason is None

        stored = await service.get_trip("trip-1")
        assert stored.delay_minutes == 0
        assert stored.delay_reason is None

        event = published(mock_event_bus)[-1]
        assert event["eventType"] == "SCHEDULE_CHANGE"
        assert event["delayMinutes"] == 0
        assert event.get("reason") is None

    @pytest.mark.asyncio
    async def test_null_for_required_field_is_ignored(self, service: TransportService) -> None:
        trip = await service.update_trip("trip-1", TripUpdateRequest(driver_name=None, vehicle_id="BUS-9"))
        assert trip.driver_name == "Anna"
        assert trip.vehicle_id == "BUS-9"

    @pytest.mark.asyncio
    async def test_explicit_event_type(self, service: TransportService, mock_event_bus: AsyncMock) -> None:
        await service.update_trip(
            "trip-1",
            TripUpdateRequest(status=TripStatus.IN_PROGRESS),
            event_type=ScheduleEventType.ROUTE_UPDATE,
        )
        [event] = published(mock_event_bus)
        assert event["eventType"] == "ROUTE_UPDATE"

    @pytest.mark.asyncio
    async def test_publish_failure_keeps_update(
        self, service: TransportService, mock_event_bus: AsyncMock
    ) -> None:
        mock_event_bus.publish.side_effect = EventBusError("broker down")
        trip = await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.DELAYED))
        assert trip.status == TripStatus.DELAYED
        assert (await service.get_trip("trip-1")).status == TripStatus.DELAYED

    @pytest.mark.asyncio
    async def test_concurrent_change_detected(self, service: TransportService) -> None:
        """Условная запись не проходит, если статус успел измениться."""
        service.trips.update_fields = AsyncMock(return_value=None)
        with pytest.raises(DomainError) as exc_info:
            await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.DELAYED))
        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION

    @pytest.mark.asyncio
    async def test_unknown_trip(self, service: TransportService) -> None:
        with pytest.raises(NotFoundError):
            await service.update_trip_status("missing", TripStatusUpdate(status=TripStatus.DELAYED))


class TestSeats:
    @pytest.mark.asyncio
    async def test_reserve_and_release(self, service: TransportService) -> None:
        assert (await service.reserve_seat("trip-1")).available_seats == 9
        assert (await service.release_seat("trip-1")).available_seats == 10

    @pytest.mark.asyncio
    async def test_no_seats(self, service: TransportService, sample_trip: Trip) -> None:
        full = sample_trip.model_copy(update={"trip_id": "trip-full", "available_seats": 0})
        await service.trips.create(full)
        with pytest.raises(DomainError) as exc_info:
            await service.reserve_seat("trip-full")
        assert exc_info.value.code == ErrorCode.NO_SEATS

    @pytest.mark.asyncio
    async def test_not_scheduled(self, service: TransportService) -> None:
        await service.update_trip_status("trip-1", TripStatusUpdate(status=TripStatus.CANCELLED))
        with pytest.raises(DomainError) as exc_info:
            await service.reserve_seat("trip-1")
        assert exc_info.value.code == ErrorCode.INVALID_TRIP_STATUS

    @pytest.mark.asyncio
    async def test_last_seat_once(self, service: TransportService, sample_trip: Trip) -> None:
        last = sample_trip.model_copy(update={"trip_id": "trip-last", "available_seats": 1})
        await service.trips.create(last)
        await service.reserve_seat("trip-last")
        with pytest.raises(DomainError):
            await service.reserve_seat("trip-last")
        assert (await service.get_trip("trip-last")).available_seats == 0

    @pytest.mark.asyncio
    async def test_release_never_exceeds_capacity(self, service: TransportService) -> None:
        await service.reserve_seat("trip-1")
        for _ in range(40):
            await service.release_seat("trip-1")
        assert (await service.get_trip("trip-1")).available_seats == 40

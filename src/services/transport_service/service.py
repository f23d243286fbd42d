# src/services/transport_service/service.py
"""
Сервис маршрутов и рейсов.

update_trip — единственный путь изменения рейса и единственный источник
событий расписания: переход проверяется до записи, событие
публикуется после записи.
"""

from __future__ import annotations

from typing import Any

from pydantic.alias_generators import to_camel

from src.common.logger import log_info, log_warning
from src.services.transport_service.publisher import ScheduleEventPublisher
from src.services.transport_service.repository import RouteRepository, TripRepository
from src.shared.errors import DomainError, ErrorCode, NotFoundError
from src.shared.models.common import utc_now
from src.shared.models.enums import RouteStatus, ScheduleEventType, TripStatus
from src.shared.models.transport import (
    Route,
    RouteCreateRequest,
    Trip,
    TripCreateRequest,
    TripStatusUpdate,
    TripUpdateRequest,
)
from src.shared.state_machine import TripStateMachine

# Поля рейса, которые можно сбросить явным null, и значение после сброса
CLEARABLE_TRIP_FIELDS: dict[str, Any] = {
    "delay_reason": None,
    "delay_minutes": 0,
    "actual_departure_time": None,
    "actual_arrival_time": None,
}


class TransportService:
    def __init__(
        self,
        routes: RouteRepository,
        trips: TripRepository,
        publisher: ScheduleEventPublisher,
    ) -> None:
        self.routes = routes
        self.trips = trips
        self.publisher = publisher

    # =========================================================================
    # МАРШРУТЫ
    # =========================================================================

    async def create_route(self, request: RouteCreateRequest) -> Route:
        route = Route(**request.model_dump())
        await self.routes.create(route)
        await log_info(f"Создан маршрут {route.route_number} ({route.route_id})")
        return route

    async def get_route(self, route_id: str) -> Route:
        route = await self.routes.get_by_id(route_id)
        if route is None:
            raise NotFoundError(ErrorCode.ROUTE_NOT_FOUND, f"Маршрут {route_id} не найден")
        return route

    async def list_routes(self, status: RouteStatus | None = None) -> list[Route]:
        return await self.routes.list(status)

    # =========================================================================
    # РЕЙСЫ
    # =========================================================================

    async def create_trip(self, request: TripCreateRequest) -> Trip:
        route = await self.get_route(request.route_id)
        trip = Trip(
            route_id=route.route_id,
            route_number=route.route_number,
            vehicle_id=request.vehicle_id,
            driver_name=request.driver_name,
            departure_time=request.departure_time,
            arrival_time=request.arrival_time,
            total_seats=request.total_seats,
            available_seats=request.total_seats,
            fare=route.fare,
            status=TripStatus.SCHEDULED,
        )
        await self.trips.create(trip)
        await log_info(f"Создан рейс {trip.trip_id} по маршруту {route.route_number}")
        return trip

    async def get_trip(self, trip_id: str) -> Trip:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise NotFoundError(ErrorCode.TRIP_NOT_FOUND, f"Рейс {trip_id} не найден")
        return trip

    async def list_trips(self, route_id: str | None = None, status: TripStatus | None = None) -> list[Trip]:
        return await self.trips.list(route_id, status)

    async def update_trip(
        self,
        trip_id: str,
        request: TripUpdateRequest,
        event_type: ScheduleEventType | None = None,
    ) -> Trip:
        """
        Обновляет рейс и публикует событие расписания при смене статуса.

        Raises:
            NotFoundError(TRIP_NOT_FOUND)
            DomainError(INVALID_STATUS_TRANSITION): переход недопустим или статус
                изменился параллельно
        """
        current = await self.get_trip(trip_id)
        changes = request.model_dump(exclude_unset=True)
        new_status = changes.get("status") or current.status

        TripStateMachine.validate_transition(current.status, new_status)

        fields = self._to_document_fields(changes)
        fields["status"] = new_status.value
        now = utc_now()
        if new_status == TripStatus.IN_PROGRESS and current.actual_departure_time is None:
            fields.setdefault("actualDepartureTime", now)
        if new_status == TripStatus.COMPLETED and current.actual_arrival_time is None:
            fields.setdefault("actualArrivalTime", now)

        updated = await self.trips.update_fields(trip_id, current.status, fields)
        if updated is None:
            raise DomainError(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"Рейс {trip_id} был изменён параллельно, повторите запрос",
            )

        result = await self.publisher.publish(updated, current.status, event_type)
        if not result.success:
            await log_warning(
                f"Рейс {trip_id} обновлён, но событие расписания потеряно: {result.error_message}"
            )
        return updated

    async def update_trip_status(self, trip_id: str, request: TripStatusUpdate) -> Trip:
        return await self.update_trip(
            trip_id,
            TripUpdateRequest.model_validate(request.model_dump(exclude_unset=True)),
        )

    # =========================================================================
    # МЕСТА
    # =========================================================================

    async def reserve_seat(self, trip_id: str) -> Trip:
        """
        Атомарно занимает одно место.

        Raises:
            NotFoundError(TRIP_NOT_FOUND)
            DomainError(INVALID_TRIP_STATUS | NO_SEATS)
        """
        trip = await self.trips.reserve_seat(trip_id)
        if trip is not None:
            return trip

        current = await self.get_trip(trip_id)
        if current.status != TripStatus.SCHEDULED:
            raise DomainError(ErrorCode.INVALID_TRIP_STATUS, f"Рейс {trip_id} в статусе {current.status}")
        raise DomainError(ErrorCode.NO_SEATS, f"На рейсе {trip_id} нет свободных мест")

    async def release_seat(self, trip_id: str) -> Trip:
        current = await self.get_trip(trip_id)
        trip = await self.trips.release_seat(trip_id, current.total_seats)
        if trip is None:
            await log_warning(f"Рейс {trip_id}: все места уже свободны, возврат места пропущен")
            return current
        return trip

    @staticmethod
    def _to_document_fields(changes: dict[str, Any]) -> dict[str, Any]:
        """
        snake_case поля запроса -> camelCase поля документа.

        Явный null сбрасывает поле, если рейс допускает сброс
        (см. CLEARABLE_TRIP_FIELDS); для остальных полей null игнорируется.
        """
        partial = TripUpdateRequest.model_validate(changes)
        present = {name for name, value in changes.items() if value is not None}
        fields = partial.model_dump(mode="json", by_alias=True, include=present)
        for name, reset in CLEARABLE_TRIP_FIELDS.items():
            if name in changes and changes[name] is None:
                fields[to_camel(name)] = reset
        return fields

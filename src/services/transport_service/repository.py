# src/services/transport_service/repository.py
"""
Репозитории маршрутов и рейсов (коллекции routes, trips).
"""

from __future__ import annotations

from typing import Any

from src.infra.document_store import Collection
from src.shared.models.common import utc_now
from src.shared.models.enums import RouteStatus, TripStatus
from src.shared.models.transport import Route, Trip


class RouteRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("routes")

    async def create(self, route: Route) -> Route:
        await self.collection.insert_one(route.route_id, route.to_document())
        return route

    async def get_by_id(self, route_id: str) -> Route | None:
        doc = await self.collection.find_one({"routeId": route_id})
        return Route.model_validate(doc) if doc else None

    async def list(self, status: RouteStatus | None = None) -> list[Route]:
        query = {"status": status} if status else {}
        docs = await self.collection.find(query, sort=[("routeNumber", 1)])
        return [Route.model_validate(d) for d in docs]


class TripRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("trips")

    async def create(self, trip: Trip) -> Trip:
        await self.collection.insert_one(trip.trip_id, trip.to_document())
        return trip

    async def get_by_id(self, trip_id: str) -> Trip | None:
        doc = await self.collection.find_one({"tripId": trip_id})
        return Trip.model_validate(doc) if doc else None

    async def list(self, route_id: str | None = None, status: TripStatus | None = None) -> list[Trip]:
        query: dict[str, Any] = {}
        if route_id:
            query["routeId"] = route_id
        if status:
            query["status"] = status
        docs = await self.collection.find(query, sort=[("departureTime", 1)])
        return [Trip.model_validate(d) for d in docs]

    async def update_fields(
        self,
        trip_id: str,
        expected_status: TripStatus,
        fields: dict[str, Any],
    ) -> Trip | None:
        """
        Обновляет поля рейса, если его статус всё ещё expected_status.

        Args:
            fields: camelCase поля документа

        Returns:
            Рейс после обновления или None, если статус успел измениться
        """
        doc = await self.collection.update_one(
            {"tripId": trip_id, "status": expected_status},
            {"$set": {**fields, "updatedAt": utc_now()}},
        )
        return Trip.model_validate(doc) if doc else None

    async def reserve_seat(self, trip_id: str) -> Trip | None:
        """Атомарно занимает место: только SCHEDULED и availableSeats > 0."""
        doc = await self.collection.update_one(
            {"tripId": trip_id, "status": TripStatus.SCHEDULED, "availableSeats": {"$gt": 0}},
            {"$inc": {"availableSeats": -1}, "$set": {"updatedAt": utc_now()}},
        )
        return Trip.model_validate(doc) if doc else None

    async def release_seat(self, trip_id: str, total_seats: int) -> Trip | None:
        """Возвращает место, не превышая вместимость."""
        doc = await self.collection.update_one(
            {"tripId": trip_id, "availableSeats": {"$lt": total_seats}},
            {"$inc": {"availableSeats": 1}, "$set": {"updatedAt": utc_now()}},
        )
        return Trip.model_validate(doc) if doc else None

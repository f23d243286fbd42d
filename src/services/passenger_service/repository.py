# src/services/passenger_service/repository.py
"""
Репозиторий пассажиров (коллекция passengers).
"""

from __future__ import annotations

from src.infra.document_store import Collection
from src.shared.models.common import utc_now
from src.shared.models.enums import PassengerStatus
from src.shared.models.passenger import Passenger


class PassengerRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("passengers")

    async def create(self, passenger: Passenger) -> Passenger:
        await self.collection.insert_one(passenger.passenger_id, passenger.to_document())
        return passenger

    async def get_by_id(self, passenger_id: str) -> Passenger | None:
        doc = await self.collection.find_one({"passengerId": passenger_id})
        return Passenger.model_validate(doc) if doc else None

    async def find_by_username(self, username: str) -> Passenger | None:
        doc = await self.collection.find_one({"username": username})
        return Passenger.model_validate(doc) if doc else None

    async def find_by_email(self, email: str) -> Passenger | None:
        doc = await self.collection.find_one({"email": email})
        return Passenger.model_validate(doc) if doc else None

    async def list(self, status: PassengerStatus | None = None) -> list[Passenger]:
        query = {"status": status} if status else {}
        docs = await self.collection.find(query, sort=[("createdAt", 1)])
        return [Passenger.model_validate(d) for d in docs]

    async def update_status(self, passenger_id: str, status: PassengerStatus) -> Passenger | None:
        doc = await self.collection.update_one(
            {"passengerId": passenger_id},
            {"$set": {"status": status.value, "updatedAt": utc_now()}},
        )
        return Passenger.model_validate(doc) if doc else None

# src/services/ticketing_service/repository.py
"""
Репозиторий билетов (коллекция tickets).

Все переходы статуса — условные атомарные записи: None в ответе
означает, что билет уже не в ожидаемом состоянии.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from src.infra.document_store import Collection
from src.shared.models.common import utc_now
from src.shared.models.enums import TicketStatus
from src.shared.models.ticket import Ticket


class TicketRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("tickets")

    async def create(self, ticket: Ticket) -> Ticket:
        await self.collection.insert_one(ticket.ticket_id, ticket.to_document())
        return ticket

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        doc = await self.collection.find_one({"ticketId": ticket_id})
        return Ticket.model_validate(doc) if doc else None

    async def list(self, passenger_id: str | None = None, status: TicketStatus | None = None) -> list[Ticket]:
        query: dict[str, Any] = {}
        if passenger_id:
            query["passengerId"] = passenger_id
        if status:
            query["status"] = status
        docs = await self.collection.find(query, sort=[("purchasedAt", -1)])
        return [Ticket.model_validate(d) for d in docs]

    async def mark_paid(self, ticket_id: str, payment_id: str) -> Ticket | None:
        """CREATED -> PAID."""
        doc = await self.collection.update_one(
            {"ticketId": ticket_id, "status": TicketStatus.CREATED},
            {"$set": {"status": TicketStatus.PAID, "paymentId": payment_id, "updatedAt": utc_now()}},
        )
        return Ticket.model_validate(doc) if doc else None

    async def mark_validated(
        self,
        ticket_id: str,
        now: datetime,
        validated_by: str,
        location: str | None = None,
    ) -> Ticket | None:
        """PAID -> VALIDATED, только пока validUntil не истёк."""
        doc = await self.collection.update_one(
            {"ticketId": ticket_id, "status": TicketStatus.PAID, "validUntil": {"$gte": now}},
            {
                "$set": {
                    "status": TicketStatus.VALIDATED,
                    "validatedAt": now,
                    "validatedBy": validated_by,
                    "validationLocation": location,
                    "updatedAt": now,
                }
            },
        )
        return Ticket.model_validate(doc) if doc else None

    async def mark_expired(self, ticket_id: str, now: datetime) -> Ticket | None:
        """CREATED|PAID -> EXPIRED для одного билета с истёкшим validUntil."""
        doc = await self.collection.update_one(
            {
                "ticketId": ticket_id,
                "status": {"$in": [TicketStatus.CREATED, TicketStatus.PAID]},
                "validUntil": {"$lt": now},
            },
            {"$set": {"status": TicketStatus.EXPIRED, "updatedAt": now}},
        )
        return Ticket.model_validate(doc) if doc else None

    async def expire_stale(self, now: datetime) -> int:
        """Массово переводит просроченные CREATED|PAID билеты в EXPIRED."""
        return await self.collection.update_many(
            {
                "status": {"$in": [TicketStatus.CREATED, TicketStatus.PAID]},
                "validUntil": {"$lt": now},
            },
            {"$set": {"status": TicketStatus.EXPIRED, "updatedAt": now}},
        )

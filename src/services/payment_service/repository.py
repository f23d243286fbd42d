# src/services/payment_service/repository.py
"""
Репозиторий платежей (коллекция payments).
"""

from __future__ import annotations

from typing import Any

from src.infra.document_store import Collection
from src.shared.models.common import utc_now
from src.shared.models.enums import PaymentStatus
from src.shared.models.payment import Payment


class PaymentRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("payments")

    async def create(self, payment: Payment) -> Payment:
        await self.collection.insert_one(payment.payment_id, payment.to_document())
        return payment

    async def get_by_id(self, payment_id: str) -> Payment | None:
        doc = await self.collection.find_one({"paymentId": payment_id})
        return Payment.model_validate(doc) if doc else None

    async def list(self, passenger_id: str | None = None, ticket_id: str | None = None) -> list[Payment]:
        query: dict[str, Any] = {}
        if passenger_id:
            query["passengerId"] = passenger_id
        if ticket_id:
            query["ticketId"] = ticket_id
        docs = await self.collection.find(query, sort=[("createdAt", -1)])
        return [Payment.model_validate(d) for d in docs]

    async def transition(
        self,
        payment_id: str,
        expected: PaymentStatus,
        target: PaymentStatus,
        **fields: Any,
    ) -> Payment | None:
        """
        Условный переход expected -> target.

        Args:
            fields: Дополнительные camelCase поля (transactionReference, failureReason)

        Returns:
            Платёж после записи или None, если статус уже не expected
        """
        doc = await self.collection.update_one(
            {"paymentId": payment_id, "status": expected},
            {"$set": {**fields, "status": target, "updatedAt": utc_now()}},
        )
        return Payment.model_validate(doc) if doc else None

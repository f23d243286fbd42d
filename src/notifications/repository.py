# src/notifications/repository.py
"""
Репозиторий уведомлений (коллекция notifications).
"""

from __future__ import annotations

from datetime import datetime

from src.infra.document_store import Collection
from src.shared.models.common import utc_now
from src.shared.models.enums import NotificationStatus
from src.shared.models.notification import Notification


class NotificationRepository:
    def __init__(self, collection: Collection | None = None) -> None:
        self.collection = collection or Collection("notifications")

    async def create(self, notification: Notification) -> Notification:
        await self.collection.insert_one(notification.notification_id, notification.to_document())
        return notification

    async def get_by_id(self, notification_id: str) -> Notification | None:
        doc = await self.collection.find_one({"notificationId": notification_id})
        return Notification.model_validate(doc) if doc else None

    async def list(self, passenger_id: str | None = None, limit: int | None = None) -> list[Notification]:
        query = {"passengerId": passenger_id} if passenger_id else {}
        docs = await self.collection.find(query, sort=[("createdAt", -1)], limit=limit)
        return [Notification.model_validate(d) for d in docs]

    async def update_status(
        self,
        notification_id: str,
        status: NotificationStatus,
        sent_at: datetime | None = None,
        error_message: str | None = None,
    ) -> Notification | None:
        fields: dict[str, object] = {"status": status, "updatedAt": utc_now()}
        if sent_at is not None:
            fields["sentAt"] = sent_at
        if error_message is not None:
            fields["errorMessage"] = error_message
        doc = await self.collection.update_one({"notificationId": notification_id}, {"$set": fields})
        return Notification.model_validate(doc) if doc else None

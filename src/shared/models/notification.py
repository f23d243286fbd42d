# src/shared/models/notification.py
"""
DTO уведомлений.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.common import CamelModel, new_id, utc_now
from src.shared.models.enums import NotificationChannel, NotificationStatus, NotificationType


class Notification(CamelModel):
    """Уведомление (документ коллекции notifications)."""

    notification_id: str = Field(default_factory=new_id)
    passenger_id: str
    notification_type: NotificationType
    channel: NotificationChannel = NotificationChannel.EMAIL
    subject: str
    message: str
    status: NotificationStatus = NotificationStatus.PENDING
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    sent_at: datetime | None = None
    updated_at: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

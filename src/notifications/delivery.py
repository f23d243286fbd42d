# src/notifications/delivery.py
"""
Отправка уведомлений: консольный канал и сохранение в хранилище.

PENDING -> FAILED, если сохранить не удалось (errorMessage из ошибки);
PENDING -> DELIVERED после сохранения, затем попытка записать статус;
PENDING -> SENT, если хранилище отключено.
"""

from __future__ import annotations

from src.common.logger import log_error, log_info, log_warning
from src.notifications.repository import NotificationRepository
from src.shared.models.common import utc_now
from src.shared.models.enums import NotificationStatus
from src.shared.models.notification import Notification
from src.shared.state_machine import NotificationStateMachine


def advance(notification: Notification, target: NotificationStatus, **fields) -> Notification:
    """Копия уведомления в статусе target; недопустимый переход отклоняется."""
    NotificationStateMachine.validate_transition(notification.status, target)
    return notification.model_copy(update={**fields, "status": target})


class NotificationSender:
    def __init__(
        self,
        repository: NotificationRepository | None,
        console_enabled: bool = True,
        store_enabled: bool = True,
    ) -> None:
        if store_enabled and repository is None:
            raise ValueError("Для сохранения уведомлений нужен репозиторий")
        self.repository = repository
        self.console_enabled = console_enabled
        self.store_enabled = store_enabled

    async def send(self, notification: Notification) -> Notification:
        """
        Доставляет уведомление и возвращает его с итоговым статусом.
        Ошибки хранилища не выбрасываются, а отражаются в статусе.
        """
        if self.console_enabled:
            await log_info(
                f"[{notification.channel}] -> {notification.passenger_id}: {notification.subject}\n"
                f"{notification.message}"
            )

        if not self.store_enabled:
            return advance(notification, NotificationStatus.SENT, sent_at=utc_now())

        try:
            await self.repository.create(notification)
        except Exception as e:
            await log_error(f"Уведомление {notification.notification_id} не сохранено: {e}")
            return advance(notification, NotificationStatus.FAILED, error_message=str(e), updated_at=utc_now())

        now = utc_now()
        delivered = advance(notification, NotificationStatus.DELIVERED, sent_at=now, updated_at=now)
        try:
            await self.repository.update_status(
                notification.notification_id,
                NotificationStatus.DELIVERED,
                sent_at=now,
            )
        except Exception as e:
            await log_warning(
                f"Статус уведомления {notification.notification_id} не обновлён (остался PENDING в хранилище): {e}"
            )
        return delivered

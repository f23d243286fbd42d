# src/notifications/consumer.py
"""
Потребитель сообщений шины для сервиса уведомлений.

Одна группа потребителей на три топика. Каждый опрос — одна пачка,
записи обрабатываются строго последовательно:
RECEIVED -> CLASSIFIED -> RENDERED -> DELIVERED | FAILED.
Каждая запись подтверждается после обработки, каким бы ни был итог:
нераспознанное сообщение не переотправляется.
"""

from __future__ import annotations

from src.common.logger import log_debug, log_error, log_warning
from src.infra.event_bus import BusRecord, EventBus
from src.notifications.builders import build_notification
from src.notifications.delivery import NotificationSender
from src.shared.events.discriminator import (
    MessageClassificationError,
    classify_strict,
    decode_payload,
)
from src.shared.models.enums import NotificationChannel
from src.shared.models.notification import Notification
from src.worker.base import BaseWorker


class NotificationConsumer(BaseWorker):
    def __init__(
        self,
        event_bus: EventBus,
        sender: NotificationSender,
        group: str,
        topics: list[str],
        channel: NotificationChannel = NotificationChannel.EMAIL,
        max_records: int = 100,
        interval: float = 1.0,
    ) -> None:
        super().__init__(interval=interval)
        self.event_bus = event_bus
        self.sender = sender
        self.group = group
        self.topics = topics
        self.channel = channel
        self.max_records = max_records

    @property
    def name(self) -> str:
        return "NotificationConsumer"

    async def setup(self) -> None:
        await self.event_bus.declare_consumer_group(self.group, self.topics)

    async def run_once(self) -> int:
        records = await self.event_bus.poll(self.group, self.max_records)
        for record in records:
            await self.process_record(record)
        return len(records)

    async def process_record(self, record: BusRecord) -> Notification | None:
        """
        Обрабатывает одну запись. Никогда не выбрасывает исключений.

        Returns:
            Уведомление с итоговым статусом или None, если запись отброшена
        """
        try:
            return await self.handle(record)
        except MessageClassificationError as e:
            await log_warning(f"Сообщение из {record.topic} отброшено: {e}")
            return None
        except Exception as e:
            await log_error(f"Ошибка обработки сообщения из {record.topic}: {e}", exc_info=True)
            return None
        finally:
            await self._ack(record)

    async def handle(self, record: BusRecord) -> Notification:
        payload = decode_payload(record.body)
        message = classify_strict(payload)
        await log_debug(f"Сообщение из {record.topic} распознано как {type(message).__name__}")

        notification = build_notification(message, self.channel)
        return await self.sender.send(notification)

    async def _ack(self, record: BusRecord) -> None:
        try:
            await record.ack()
        except Exception as e:
            await log_error(f"Не удалось подтвердить сообщение из {record.topic}: {e}")

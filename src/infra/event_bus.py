# src/infra/event_bus.py
"""
Шина событий на базе RabbitMQ.

Логический топик (schedule-updates, ticket-created, ...) — это routing key
в durable topic exchange. Группа потребителей — одна durable очередь,
привязанная ко всем топикам группы; позиция группы сдвигается ack-ом.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import aio_pika
from aio_pika import DeliveryMode, ExchangeType, Message
from aio_pika.abc import (
    AbstractChannel,
    AbstractExchange,
    AbstractIncomingMessage,
    AbstractQueue,
    AbstractRobustConnection,
)
from aio_pika.exceptions import AMQPException
from pydantic_core import to_jsonable_python

from src.common.logger import log_debug, log_error, log_info
from src.common.constants import TypeMsg


class EventBusError(Exception):
    """Публикация или чтение из шины не удались."""


@dataclass
class BusRecord:
    """Запись, полученная из шины."""
    topic: str
    body: bytes
    message: AbstractIncomingMessage | None = None

    def text(self) -> str:
        return self.body.decode("utf-8")

    async def ack(self) -> None:
        """Подтверждает обработку (сдвигает позицию группы)."""
        if self.message is not None:
            await self.message.ack()


class EventBus:
    """
    Шина событий на базе RabbitMQ.

    Реализует:
    - Публикацию JSON-сообщений в топик
    - Группы потребителей с опросом (poll) пачками
    - Автоматическое переподключение (connect_robust)
    """

    _instance: EventBus | None = None

    def __new__(cls) -> EventBus:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._connection: AbstractRobustConnection | None = None
        self._channel: AbstractChannel | None = None
        self._exchange: AbstractExchange | None = None
        self._exchange_name = "transit.events"
        self._groups: dict[str, AbstractQueue] = {}

    @property
    def is_connected(self) -> bool:
        """Проверяет, активно ли соединение."""
        return self._connection is not None and not self._connection.is_closed

    async def connect(
        self,
        url: str,
        exchange_name: str | None = None,
        prefetch_count: int = 50,
    ) -> None:
        """
        Подключается к RabbitMQ и объявляет exchange.

        Args:
            url: URL RabbitMQ
            exchange_name: Имя exchange
            prefetch_count: Количество сообщений для prefetch
        """
        if self.is_connected:
            return

        if exchange_name:
            self._exchange_name = exchange_name

        await log_info("Подключение к RabbitMQ...", type_msg=TypeMsg.INFO)

        self._connection = await aio_pika.connect_robust(url)
        self._channel = await self._connection.channel()
        await self._channel.set_qos(prefetch_count=prefetch_count)

        self._exchange = await self._channel.declare_exchange(
            self._exchange_name,
            ExchangeType.TOPIC,
            durable=True,
        )

        await log_info("Подключение к RabbitMQ установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с RabbitMQ."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            self._channel = None
            self._exchange = None
            self._groups = {}
            await log_info("Соединение с RabbitMQ закрыто", type_msg=TypeMsg.INFO)

    # =========================================================================
    # ПУБЛИКАЦИЯ
    # =========================================================================

    async def publish(self, topic: str, payload: dict[str, Any], message_id: str | None = None) -> None:
        """
        Публикует JSON-сообщение в топик.

        Raises:
            EventBusError: нет соединения или брокер отклонил сообщение
        """
        if not self.is_connected or self._exchange is None:
            raise EventBusError("Нет соединения с RabbitMQ")

        body = json.dumps(to_jsonable_python(payload), ensure_ascii=False).encode("utf-8")
        message = Message(
            body=body,
            content_type="application/json",
            delivery_mode=DeliveryMode.PERSISTENT,
            message_id=message_id or str(uuid4()),
            timestamp=datetime.now(timezone.utc),
        )

        try:
            await self._exchange.publish(message, routing_key=topic)
        except (AMQPException, ConnectionError, OSError) as e:
            raise EventBusError(f"Ошибка публикации в {topic}: {e}") from e

        await log_debug(f"Сообщение опубликовано в {topic}")

    # =========================================================================
    # ГРУППЫ ПОТРЕБИТЕЛЕЙ
    # =========================================================================

    async def declare_consumer_group(self, group: str, topics: list[str]) -> None:
        """Объявляет durable очередь группы и привязывает её ко всем топикам."""
        if not self.is_connected or self._channel is None or self._exchange is None:
            raise EventBusError("Нет соединения с RabbitMQ")

        if group in self._groups:
            return

        queue = await self._channel.declare_queue(group, durable=True)
        for topic in topics:
            await queue.bind(self._exchange, routing_key=topic)
        self._groups[group] = queue

        await log_info(f"Группа {group} подписана на топики: {', '.join(topics)}", type_msg=TypeMsg.INFO)

    async def poll(self, group: str, max_records: int = 100) -> list[BusRecord]:
        """
        Забирает до max_records сообщений группы без ожидания.

        Сообщения остаются неподтверждёнными до вызова BusRecord.ack().
        """
        queue = self._groups.get(group)
        if queue is None:
            raise EventBusError(f"Группа {group} не объявлена")

        records: list[BusRecord] = []
        try:
            while len(records) < max_records:
                message = await queue.get(no_ack=False, fail=False)
                if message is None:
                    break
                records.append(BusRecord(topic=message.routing_key or "", body=message.body, message=message))
        except (AMQPException, ConnectionError, OSError) as e:
            raise EventBusError(f"Ошибка чтения группы {group}: {e}") from e

        return records

    async def health_check(self) -> bool:
        """Проверяет здоровье подключения к RabbitMQ."""
        return self.is_connected


def get_event_bus() -> EventBus:
    """Возвращает глобальный экземпляр EventBus."""
    return EventBus()


async def init_event_bus() -> None:
    """Инициализирует подключение к RabbitMQ по настройкам."""
    from src.config import settings

    event_bus = get_event_bus()
    await event_bus.connect(
        url=settings.rabbitmq.url,
        exchange_name=settings.rabbitmq.RABBITMQ_EXCHANGE,
        prefetch_count=settings.rabbitmq.RABBITMQ_PREFETCH_COUNT,
    )
    await log_info(
        f"RabbitMQ подключён: {settings.rabbitmq.RABBITMQ_HOST}:{settings.rabbitmq.RABBITMQ_PORT}",
        type_msg=TypeMsg.INFO,
    )


async def close_event_bus() -> None:
    """Закрывает подключение к RabbitMQ."""
    try:
        await get_event_bus().disconnect()
    except (AMQPException, ConnectionError, OSError) as e:
        await log_error(f"Ошибка при закрытии RabbitMQ: {e}")
        return
    await log_info("RabbitMQ отключён", type_msg=TypeMsg.INFO)

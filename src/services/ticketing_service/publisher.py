# src/services/ticketing_service/publisher.py
"""
Публикация сообщений о билетах (ticket-created, ticket-validated).

Как и события расписания: после записи, без outbox, ошибка шины
возвращается мягким результатом.
"""

from __future__ import annotations

from src.common.logger import log_error, log_info, log_warning
from src.infra.event_bus import EventBus, EventBusError
from src.shared.events.base import PublishResult
from src.shared.events.ticket_events import TicketCreatedMessage, TicketValidatedMessage
from src.shared.models.ticket import Ticket


class TicketEventPublisher:
    def __init__(
        self,
        event_bus: EventBus,
        created_topic: str = "ticket-created",
        validated_topic: str = "ticket-validated",
    ) -> None:
        self.event_bus = event_bus
        self.created_topic = created_topic
        self.validated_topic = validated_topic

    async def publish_created(self, ticket: Ticket) -> PublishResult:
        return await self._send(self.created_topic, ticket, TicketCreatedMessage)

    async def publish_validated(self, ticket: Ticket) -> PublishResult:
        return await self._send(self.validated_topic, ticket, TicketValidatedMessage)

    async def _send(self, topic: str, ticket: Ticket, message_cls: type[TicketCreatedMessage] | type[TicketValidatedMessage]) -> PublishResult:
        try:
            message = message_cls.from_ticket(ticket)
            await self.event_bus.publish(topic, message.to_payload())
        except EventBusError as e:
            await log_warning(f"Сообщение {topic} по билету {ticket.ticket_id} не опубликовано: {e}")
            return PublishResult(success=False, error_message=str(e))
        except Exception as e:
            await log_error(f"Ошибка подготовки сообщения {topic} по билету {ticket.ticket_id}: {e}", exc_info=True)
            return PublishResult(success=False, error_message=str(e))

        await log_info(f"Сообщение {topic} опубликовано: билет {ticket.ticket_id}")
        return PublishResult(success=True)

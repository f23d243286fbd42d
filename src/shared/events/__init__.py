# src/shared/events/__init__.py
"""
Сообщения шины событий.

- schedule_events: изменения расписания рейсов (schedule-updates)
- ticket_events: выпуск и валидация билетов (ticket-created, ticket-validated)
- discriminator: распознавание входящих сообщений без явного тега типа
"""

from src.shared.events.base import BusMessage, PublishResult
from src.shared.events.discriminator import (
    InboundMessage,
    MalformedMessageError,
    MessageClassificationError,
    UnknownMessageFormatError,
    UnrecognizedMessage,
    classify,
    classify_strict,
    decode_payload,
)
from src.shared.events.schedule_events import (
    ScheduleUpdateEvent,
    compute_severity,
    select_event_type,
)
from src.shared.events.ticket_events import TicketCreatedMessage, TicketValidatedMessage

__all__ = [
    "BusMessage",
    "PublishResult",
    "InboundMessage",
    "MalformedMessageError",
    "MessageClassificationError",
    "UnknownMessageFormatError",
    "UnrecognizedMessage",
    "classify",
    "classify_strict",
    "decode_payload",
    "ScheduleUpdateEvent",
    "compute_severity",
    "select_event_type",
    "TicketCreatedMessage",
    "TicketValidatedMessage",
]

# src/shared/events/discriminator.py
"""
Классификатор входящих сообщений шины.

Тип сообщения определяется по наличию маркерных полей, правила
проверяются строго по порядку, побеждает первое совпадение:

1. disruptionId + severity     -> ScheduleUpdateEvent
2. validationId + validatedAt   -> TicketValidatedMessage
3. qrCode + purchaseTime        -> TicketCreatedMessage

Если ни одно правило не подошло, возвращается UnrecognizedMessage.
Значения маркеров не проверяются: событие расписания с незнакомым
severity всё равно остаётся событием расписания. Сообщение, у которого
маркеры совпали, но остальные поля несовместимы по типу,
считается повреждённым (MalformedMessageError).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

from pydantic import ValidationError

from src.shared.events.base import BusMessage
from src.shared.events.schedule_events import ScheduleUpdateEvent
from src.shared.events.ticket_events import TicketCreatedMessage, TicketValidatedMessage


class MessageClassificationError(Exception):
    """Сообщение невозможно обработать; повторная доставка не поможет."""


class UnknownMessageFormatError(MessageClassificationError):
    """Ни одно правило классификации не подошло."""


class MalformedMessageError(MessageClassificationError):
    """Сообщение не является JSON-объектом или его поля некорректны."""


@dataclass(frozen=True)
class UnrecognizedMessage:
    """Явный вариант «не распознано»."""
    payload: dict[str, Any] = field(default_factory=dict)

    def keys(self) -> list[str]:
        return sorted(self.payload)


InboundMessage = Union[ScheduleUpdateEvent, TicketValidatedMessage, TicketCreatedMessage, UnrecognizedMessage]

Predicate = Callable[[Mapping[str, Any]], bool]


def has_fields(*names: str) -> Predicate:
    """Предикат: все поля присутствуют и не равны null."""
    def predicate(payload: Mapping[str, Any]) -> bool:
        return all(payload.get(name) is not None for name in names)
    return predicate


# Порядок важен: правило расписания проверяется первым
CLASSIFICATION_RULES: list[tuple[Predicate, type[BusMessage]]] = [
    (has_fields("disruptionId", "severity"), ScheduleUpdateEvent),
    (has_fields("validationId", "validatedAt"), TicketValidatedMessage),
    (has_fields("qrCode", "purchaseTime"), TicketCreatedMessage),
]


def decode_payload(body: bytes | str) -> dict[str, Any]:
    """Декодирует тело записи (UTF-8 JSON) в словарь."""
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedMessageError(f"Тело сообщения не является JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedMessageError(f"Ожидался JSON-объект, получено: {type(payload).__name__}")
    return payload


def classify(payload: Mapping[str, Any]) -> InboundMessage:
    """
    Определяет тип сообщения по маркерным полям.

    Raises:
        MalformedMessageError: маркеры найдены, но сообщение не валидно
    """
    for predicate, message_cls in CLASSIFICATION_RULES:
        if predicate(payload):
            try:
                return message_cls.from_payload(dict(payload))
            except ValidationError as e:
                raise MalformedMessageError(
                    f"Сообщение похоже на {message_cls.__name__}, но не прошло валидацию: {e}"
                ) from e
    return UnrecognizedMessage(payload=dict(payload))


def classify_strict(payload: Mapping[str, Any]) -> BusMessage:
    """Как classify, но UnrecognizedMessage превращается в UnknownMessageFormatError."""
    message = classify(payload)
    if isinstance(message, UnrecognizedMessage):
        raise UnknownMessageFormatError(f"Неизвестный формат сообщения, поля: {message.keys()}")
    return message

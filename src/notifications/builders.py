# src/notifications/builders.py
"""
Построители уведомлений по распознанным сообщениям шины.

Каждый построитель рендерит фиксированный шаблон в рамке из ASCII
и возвращает Notification в статусе PENDING. Текст зависит только
от полей сообщения.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from src.common.constants import BROADCAST_RECIPIENT
from src.shared.events.discriminator import InboundMessage
from src.shared.events.schedule_events import ScheduleUpdateEvent
from src.shared.events.ticket_events import TicketCreatedMessage, TicketValidatedMessage
from src.shared.models.enums import NotificationChannel, NotificationStatus, NotificationType
from src.shared.models.notification import Notification

Row = tuple[str, object]


def _fmt(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M UTC")
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _metadata(**values: object) -> dict[str, str]:
    """Метаданные уведомления: только заданные значения, строками."""
    return {key: str(value) for key, value in values.items() if value is not None}


def render_box(title: str, rows: Iterable[Row]) -> str:
    """
    Рамка вида:

        +------------------+
        | TITLE            |
        +------------------+
        | Label: value     |
        +------------------+
    """
    lines = [title] + [f"{label}: {_fmt(value)}" for label, value in rows]
    width = max(len(line) for line in lines)
    border = "+" + "-" * (width + 2) + "+"

    out = [border, f"| {title.ljust(width)} |", border]
    out.extend(f"| {line.ljust(width)} |" for line in lines[1:])
    out.append(border)
    return "\n".join(out)


def build_schedule_notification(
    event: ScheduleUpdateEvent,
    channel: NotificationChannel = NotificationChannel.EMAIL,
) -> Notification:
    """Уведомление о нарушении расписания. Без passengerId — рассылка всем."""
    route = event.route_number or event.route_id or "-"
    rows: list[Row] = [
        ("Route", route),
        ("Trip", event.trip_id),
        ("Event", event.event_type),
        ("Severity", event.severity),
        ("Status", f"{_fmt(event.previous_status)} -> {_fmt(event.new_status)}"),
    ]
    if event.delay_minutes:
        rows.append(("Delay", f"{event.delay_minutes} min"))
    if event.departure_time:
        rows.append(("Departure", event.departure_time))
    if event.reason:
        rows.append(("Reason", event.reason))

    return Notification(
        passenger_id=event.passenger_id or BROADCAST_RECIPIENT,
        notification_type=NotificationType.SCHEDULE_DISRUPTION,
        channel=channel,
        subject=f"Schedule update: route {route} ({event.event_type})",
        message=render_box("SCHEDULE UPDATE", rows),
        status=NotificationStatus.PENDING,
        metadata=_metadata(
            eventId=event.event_id,
            disruptionId=event.disruption_id,
            tripId=event.trip_id,
            severity=event.severity,
        ),
    )


def build_ticket_validated_notification(
    message: TicketValidatedMessage,
    channel: NotificationChannel = NotificationChannel.EMAIL,
) -> Notification:
    rows: list[Row] = [
        ("Ticket", message.ticket_id),
        ("Route", message.route_number),
        ("Validated at", message.validated_at),
        ("Validated by", message.validated_by),
        ("Location", message.location),
    ]
    return Notification(
        passenger_id=message.passenger_id,
        notification_type=NotificationType.TICKET_VALIDATED,
        channel=channel,
        subject=f"Ticket {message.ticket_id} validated",
        message=render_box("TICKET VALIDATED", rows),
        status=NotificationStatus.PENDING,
        metadata={"validationId": message.validation_id, "ticketId": message.ticket_id},
    )


def build_ticket_created_notification(
    message: TicketCreatedMessage,
    channel: NotificationChannel = NotificationChannel.EMAIL,
) -> Notification:
    rows: list[Row] = [
        ("Ticket", message.ticket_id),
        ("Route", message.route_number),
        ("Trip", message.trip_id),
        ("Fare", message.fare),
        ("Purchased", message.purchase_time),
        ("Valid until", message.valid_until),
        ("QR", message.qr_code),
    ]
    return Notification(
        passenger_id=message.passenger_id,
        notification_type=NotificationType.TICKET_PURCHASED,
        channel=channel,
        subject=f"Ticket {message.ticket_id} purchased",
        message=render_box("TICKET PURCHASED", rows),
        status=NotificationStatus.PENDING,
        metadata={"ticketId": message.ticket_id, "tripId": message.trip_id},
    )


def build_notification(
    message: InboundMessage,
    channel: NotificationChannel = NotificationChannel.EMAIL,
) -> Notification:
    """
    Выбирает построитель по варианту сообщения.

    Raises:
        TypeError: вариант не поддерживается (в т.ч. UnrecognizedMessage)
    """
    if isinstance(message, ScheduleUpdateEvent):
        return build_schedule_notification(message, channel)
    if isinstance(message, TicketValidatedMessage):
        return build_ticket_validated_notification(message, channel)
    if isinstance(message, TicketCreatedMessage):
        return build_ticket_created_notification(message, channel)
    raise TypeError(f"Нет построителя для {type(message).__name__}")

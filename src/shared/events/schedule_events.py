# src/shared/events/schedule_events.py
"""
События расписания (топик schedule-updates).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, ValidationInfo, field_validator, model_validator

from src.shared.events.base import BusMessage
from src.shared.models.common import new_id, utc_now
from src.shared.models.enums import InvalidEnumValue, ScheduleEventType, Severity, TripStatus, parse_enum
from src.shared.models.transport import Trip

# Задержка, начиная с которой нарушение считается серьёзным
HIGH_DELAY_THRESHOLD_MINUTES = 30

_LENIENT_ENUMS = {
    "severity": Severity,
    "event_type": ScheduleEventType,
    "previous_status": TripStatus,
    "new_status": TripStatus,
}


def select_event_type(new_status: TripStatus) -> ScheduleEventType:
    """DELAY для DELAYED, CANCELLATION для CANCELLED, иначе SCHEDULE_CHANGE."""
    if new_status == TripStatus.DELAYED:
        return ScheduleEventType.DELAY
    if new_status == TripStatus.CANCELLED:
        return ScheduleEventType.CANCELLATION
    return ScheduleEventType.SCHEDULE_CHANGE


def compute_severity(event_type: ScheduleEventType, delay_minutes: int) -> Severity:
    if event_type == ScheduleEventType.CANCELLATION:
        return Severity.HIGH
    if event_type == ScheduleEventType.DELAY:
        return Severity.HIGH if delay_minutes >= HIGH_DELAY_THRESHOLD_MINUTES else Severity.MEDIUM
    return Severity.LOW


class ScheduleUpdateEvent(BusMessage):
    """
    Неизменяемый факт изменения состояния рейса.

    disruptionId и severity — маркерные поля, по которым потребитель
    узнаёт событие расписания; disruptionId совпадает с eventId.

    Сообщения других производителей принимаются как есть: значение
    severity, eventType или статуса вне перечисления остаётся строкой,
    tripId может отсутствовать.
    """

    event_id: str = Field(default_factory=new_id)
    disruption_id: str
    severity: Severity | str
    event_type: ScheduleEventType | str = ScheduleEventType.SCHEDULE_CHANGE
    trip_id: str | None = None
    route_id: str | None = None
    route_number: str | None = None
    previous_status: TripStatus | str | None = None
    new_status: TripStatus | str | None = None
    delay_minutes: int = 0
    reason: str | None = None
    departure_time: datetime | None = None
    passenger_id: str | None = None  # адресное уведомление; иначе рассылка всем
    timestamp: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def default_disruption_id(cls, data):
        # Собственные события сервиса транспорта строятся без disruptionId
        if isinstance(data, dict) and not data.get("disruption_id") and not data.get("disruptionId"):
            event_id = data.get("event_id") or data.get("eventId") or new_id()
            data = {**data, "event_id": event_id, "disruption_id": event_id}
        return data

    @field_validator("event_id", "disruption_id", mode="before")
    @classmethod
    def id_as_text(cls, value):
        return value if value is None or isinstance(value, str) else str(value)

    @field_validator("severity", "event_type", "previous_status", "new_status", mode="before")
    @classmethod
    def known_or_raw(cls, value, info: ValidationInfo):
        if not isinstance(value, str):
            return value
        try:
            return parse_enum(_LENIENT_ENUMS[info.field_name], value)
        except InvalidEnumValue:
            return value

    @classmethod
    def from_trip(
        cls,
        trip: Trip,
        previous_status: TripStatus,
        event_type: ScheduleEventType | None = None,
    ) -> "ScheduleUpdateEvent":
        """
        Строит событие по состоянию рейса после обновления.

        Args:
            trip: Рейс после записи в хранилище
            previous_status: Статус до обновления
            event_type: Явный тип (например ROUTE_UPDATE); иначе выбирается по новому статусу
        """
        resolved_type = event_type or select_event_type(trip.status)
        return cls(
            severity=compute_severity(resolved_type, trip.delay_minutes),
            event_type=resolved_type,
            trip_id=trip.trip_id,
            route_id=trip.route_id,
            route_number=trip.route_number,
            previous_status=previous_status,
            new_status=trip.status,
            delay_minutes=trip.delay_minutes,
            reason=trip.delay_reason,
            departure_time=trip.departure_time,
        )

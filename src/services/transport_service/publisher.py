# src/services/transport_service/publisher.py
"""
Публикация событий расписания.

Модель доставки — at-most-once: событие публикуется после того, как
изменение рейса уже записано, и ошибка шины не откатывает изменение.
Outbox не используется, поэтому сбой публикации означает пропущенное
уведомление; он возвращается вызывающему как мягкий результат.
"""

from __future__ import annotations

from src.common.logger import log_debug, log_error, log_info, log_warning
from src.infra.event_bus import EventBus, EventBusError
from src.shared.events.base import PublishResult
from src.shared.events.schedule_events import ScheduleUpdateEvent
from src.shared.models.enums import ScheduleEventType, TripStatus
from src.shared.models.transport import Trip


class ScheduleEventPublisher:
    def __init__(self, event_bus: EventBus, topic: str = "schedule-updates") -> None:
        self.event_bus = event_bus
        self.topic = topic

    async def publish(
        self,
        trip: Trip,
        previous_status: TripStatus,
        event_type: ScheduleEventType | None = None,
    ) -> PublishResult:
        """
        Публикует событие об изменении рейса. Никогда не выбрасывает исключений.

        Args:
            trip: Рейс после записи в хранилище
            previous_status: Статус до обновления
            event_type: Явный тип события; по умолчанию выбирается по новому статусу

        Returns:
            PublishResult; skipped=True, если статус не изменился
        """
        if previous_status == trip.status:
            await log_debug(f"Рейс {trip.trip_id}: статус не изменился ({trip.status}), событие не публикуется")
            return PublishResult(success=True, skipped=True)

        try:
            event = ScheduleUpdateEvent.from_trip(trip, previous_status, event_type)
            await self.event_bus.publish(self.topic, event.to_payload(), message_id=event.event_id)
        except EventBusError as e:
            await log_warning(f"Событие расписания для рейса {trip.trip_id} не опубликовано: {e}")
            return PublishResult(success=False, error_message=str(e))
        except Exception as e:
            await log_error(f"Ошибка подготовки события расписания для рейса {trip.trip_id}: {e}", exc_info=True)
            return PublishResult(success=False, error_message=str(e))

        await log_info(
            f"Событие {event.event_type} опубликовано: рейс {trip.trip_id} "
            f"{previous_status} -> {trip.status} (severity={event.severity})"
        )
        return PublishResult(success=True, message_id=event.event_id)

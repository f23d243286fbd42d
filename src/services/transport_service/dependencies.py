# src/services/transport_service/dependencies.py
"""
Dependency Injection для Transport Service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.infra.database import DatabaseManager
    from src.infra.event_bus import EventBus
    from src.services.transport_service.service import TransportService


_db: "DatabaseManager | None" = None
_event_bus: "EventBus | None" = None
_transport_service: "TransportService | None" = None


async def init_dependencies(db: "DatabaseManager", event_bus: "EventBus") -> None:
    """Инициализировать зависимости при старте приложения."""
    global _db, _event_bus
    _db = db
    _event_bus = event_bus


def get_db() -> "DatabaseManager":
    if _db is None:
        raise RuntimeError("База данных не инициализирована. Вызовите init_dependencies()")
    return _db


def get_event_bus() -> "EventBus":
    if _event_bus is None:
        raise RuntimeError("Шина событий не инициализирована. Вызовите init_dependencies()")
    return _event_bus


def get_transport_service() -> "TransportService":
    """Получить сервис маршрутов и рейсов."""
    global _transport_service

    if _transport_service is None:
        from src.config import settings
        from src.infra.document_store import Collection
        from src.services.transport_service.publisher import ScheduleEventPublisher
        from src.services.transport_service.repository import RouteRepository, TripRepository
        from src.services.transport_service.service import TransportService

        db = get_db()
        _transport_service = TransportService(
            routes=RouteRepository(Collection("routes", db)),
            trips=TripRepository(Collection("trips", db)),
            publisher=ScheduleEventPublisher(get_event_bus(), settings.rabbitmq.TOPIC_SCHEDULE_UPDATES),
        )

    return _transport_service


async def cleanup_dependencies() -> None:
    """Очистить ресурсы при остановке приложения."""
    global _db, _event_bus, _transport_service
    _transport_service = None
    _event_bus = None
    _db = None

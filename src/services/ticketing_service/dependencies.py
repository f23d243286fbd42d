# src/services/ticketing_service/dependencies.py
"""
Dependency Injection для Ticketing Service.

HTTP-клиенты соседних сервисов живут столько же, сколько приложение.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.infra.database import DatabaseManager
    from src.infra.event_bus import EventBus
    from src.services.ticketing_service.clients import PassengerClient, TransportClient
    from src.services.ticketing_service.service import TicketingService


_db: "DatabaseManager | None" = None
_event_bus: "EventBus | None" = None
_passenger_client: "PassengerClient | None" = None
_transport_client: "TransportClient | None" = None
_ticketing_service: "TicketingService | None" = None


async def init_dependencies(db: "DatabaseManager", event_bus: "EventBus") -> None:
    """Инициализировать зависимости при старте приложения."""
    global _db, _event_bus, _passenger_client, _transport_client
    from src.config import settings
    from src.services.ticketing_service.clients import PassengerClient, TransportClient

    _db = db
    _event_bus = event_bus
    timeout = settings.ticketing.HTTP_CLIENT_TIMEOUT
    _passenger_client = PassengerClient(settings.deployment.passenger_service_url, timeout)
    _transport_client = TransportClient(settings.deployment.transport_service_url, timeout)


def get_db() -> "DatabaseManager":
    if _db is None:
        raise RuntimeError("База данных не инициализирована. Вызовите init_dependencies()")
    return _db


def get_event_bus() -> "EventBus":
    if _event_bus is None:
        raise RuntimeError("Шина событий не инициализирована. Вызовите init_dependencies()")
    return _event_bus


def get_ticketing_service() -> "TicketingService":
    """Получить сервис билетов."""
    global _ticketing_service

    if _ticketing_service is None:
        from src.config import settings
        from src.infra.document_store import Collection
        from src.services.ticketing_service.publisher import TicketEventPublisher
        from src.services.ticketing_service.repository import TicketRepository
        from src.services.ticketing_service.service import TicketingService

        if _passenger_client is None or _transport_client is None:
            raise RuntimeError("HTTP-клиенты не инициализированы. Вызовите init_dependencies()")

        _ticketing_service = TicketingService(
            repository=TicketRepository(Collection("tickets", get_db())),
            passenger_client=_passenger_client,
            transport_client=_transport_client,
            publisher=TicketEventPublisher(
                get_event_bus(),
                created_topic=settings.rabbitmq.TOPIC_TICKET_CREATED,
                validated_topic=settings.rabbitmq.TOPIC_TICKET_VALIDATED,
            ),
            validity_hours=settings.ticketing.TICKET_VALIDITY_HOURS,
        )

    return _ticketing_service


async def cleanup_dependencies() -> None:
    """Очистить ресурсы при остановке приложения."""
    global _db, _event_bus, _passenger_client, _transport_client, _ticketing_service

    if _passenger_client is not None:
        await _passenger_client.close()
    if _transport_client is not None:
        await _transport_client.close()

    _ticketing_service = None
    _passenger_client = None
    _transport_client = None
    _event_bus = None
    _db = None

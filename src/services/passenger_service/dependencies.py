# src/services/passenger_service/dependencies.py
"""
Dependency Injection для Passenger Service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.infra.database import DatabaseManager
    from src.services.passenger_service.service import PassengerService


_db: "DatabaseManager | None" = None
_passenger_service: "PassengerService | None" = None


async def init_dependencies(db: "DatabaseManager") -> None:
    """Инициализировать зависимости при старте приложения."""
    global _db
    _db = db


def get_db() -> "DatabaseManager":
    if _db is None:
        raise RuntimeError("База данных не инициализирована. Вызовите init_dependencies()")
    return _db


def get_passenger_service() -> "PassengerService":
    """Получить сервис пассажиров."""
    global _passenger_service

    if _passenger_service is None:
        from src.infra.document_store import Collection
        from src.services.passenger_service.repository import PassengerRepository
        from src.services.passenger_service.service import PassengerService

        _passenger_service = PassengerService(PassengerRepository(Collection("passengers", get_db())))

    return _passenger_service


async def cleanup_dependencies() -> None:
    """Очистить ресурсы при остановке приложения."""
    global _db, _passenger_service
    _passenger_service = None
    _db = None

# src/services/payment_service/dependencies.py
"""
Dependency Injection для Payment Service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.infra.database import DatabaseManager
    from src.infra.redis_client import RedisClient
    from src.services.payment_service.service import PaymentService


_db: "DatabaseManager | None" = None
_redis: "RedisClient | None" = None
_payment_service: "PaymentService | None" = None


async def init_dependencies(db: "DatabaseManager", redis: "RedisClient | None" = None) -> None:
    """Инициализировать зависимости при старте приложения."""
    global _db, _redis
    _db = db
    _redis = redis


def get_db() -> "DatabaseManager":
    if _db is None:
        raise RuntimeError("База данных не инициализирована. Вызовите init_dependencies()")
    return _db


def get_payment_service() -> "PaymentService":
    """Получить симулятор платежей."""
    global _payment_service

    if _payment_service is None:
        from src.config import settings
        from src.infra.document_store import Collection
        from src.services.payment_service.repository import PaymentRepository
        from src.services.payment_service.service import PaymentService

        cfg = settings.payments
        _payment_service = PaymentService(
            repository=PaymentRepository(Collection("payments", get_db())),
            cache=_redis,
            success_rate=cfg.PAYMENT_SUCCESS_RATE,
            processing_delay=cfg.PAYMENT_PROCESSING_DELAY,
            currency=cfg.PAYMENT_CURRENCY,
            cache_ttl=cfg.PAYMENT_CACHE_TTL,
        )

    return _payment_service


async def cleanup_dependencies() -> None:
    """Очистить ресурсы при остановке приложения."""
    global _db, _redis, _payment_service
    _payment_service = None
    _redis = None
    _db = None

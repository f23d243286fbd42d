# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: PostgreSQL (документные коллекции), Redis, RabbitMQ.
"""

from src.infra.database import DatabaseManager, get_db
from src.infra.document_store import Collection
from src.infra.redis_client import RedisClient, get_redis
from src.infra.event_bus import BusRecord, EventBus, EventBusError, get_event_bus

__all__ = [
    "DatabaseManager",
    "get_db",
    "Collection",
    "RedisClient",
    "get_redis",
    "BusRecord",
    "EventBus",
    "EventBusError",
    "get_event_bus",
]

# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("RABBITMQ_PASSWORD", "guest")

from src.shared.models.enums import PassengerStatus, TripStatus  # noqa: E402
from src.shared.models.passenger import Passenger  # noqa: E402
from src.shared.models.transport import Route, Trip  # noqa: E402
from tests.fakes import FakeCollection  # noqa: E402


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.poll = AsyncMock(return_value=[])
    event_bus.declare_consumer_group = AsyncMock(return_value=None)
    event_bus.health_check = AsyncMock(return_value=True)
    event_bus.is_connected = True
    return event_bus


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента Redis."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.get_model = AsyncMock(return_value=None)
    redis.set_model = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def fake_collection_factory():
    """Фабрика in-memory коллекций."""
    def factory(name: str = "test") -> FakeCollection:
        return FakeCollection(name)
    return factory


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_passenger() -> Passenger:
    return Passenger(
        passenger_id="passenger-1",
        username="jdoe",
        email="jdoe@example.com",
        first_name="John",
        last_name="Doe",
        status=PassengerStatus.ACTIVE,
    )


@pytest.fixture
def sample_route() -> Route:
    return Route(
        route_id="route-1",
        route_number="42A",
        route_name="Central - Airport",
        start_location="Central Station",
        end_location="Airport",
        distance=18.5,
        estimated_duration=40,
        fare=3.5,
    )


@pytest.fixture
def sample_trip(now: datetime) -> Trip:
    return Trip(
        trip_id="trip-1",
        route_id="route-1",
        route_number="42A",
        vehicle_id="BUS-7",
        driver_name="Anna",
        departure_time=now + timedelta(hours=1),
        arrival_time=now + timedelta(hours=2),
        total_seats=40,
        available_seats=10,
        fare=3.5,
        status=TripStatus.SCHEDULED,
    )


@pytest.fixture
def trip_data(sample_trip: Trip) -> dict[str, Any]:
    """Документ рейса в camelCase, как его отдаёт Transport Service."""
    return sample_trip.to_document()

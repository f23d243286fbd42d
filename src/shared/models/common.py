# src/shared/models/common.py
"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Текущее время в UTC (aware)."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class CamelModel(BaseModel):
    """
    База для моделей, которые ходят по сети и хранятся в документах.
    Поля snake_case в коде, camelCase в JSON.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict:
        """Представление для хранилища и шины (camelCase, JSON-типы)."""
        return self.model_dump(mode="json", by_alias=True)


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded
    version: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)

# src/shared/events/base.py
"""
Базовый класс сообщений шины.

Сообщения не несут явного тега типа: потребитель распознаёт их
по набору полей (см. discriminator.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ConfigDict

from src.shared.models.common import CamelModel


class BusMessage(CamelModel):
    """
    Базовый класс для всех сообщений шины.

    Сообщения иммутабельны и сериализуются в JSON с camelCase ключами.
    """

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Словарь для публикации (без полей со значением None)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_payload(cls: type[MessageT], payload: dict[str, Any]) -> MessageT:
        return cls.model_validate(payload)


MessageT = TypeVar("MessageT", bound=BusMessage)


@dataclass(frozen=True)
class PublishResult:
    """
    Итог публикации после фиксации изменения состояния.

    Ошибка публикации не откатывает изменение: вызывающий код
    только логирует предупреждение.
    """
    success: bool
    error_message: str | None = None
    skipped: bool = False
    message_id: str | None = None

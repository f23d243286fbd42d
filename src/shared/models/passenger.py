# src/shared/models/passenger.py
"""
DTO пассажира.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.common import CamelModel, new_id, utc_now
from src.shared.models.enums import PassengerStatus


class Passenger(CamelModel):
    """Пассажир (документ коллекции passengers)."""

    passenger_id: str = Field(default_factory=new_id)
    username: str
    email: str
    first_name: str
    last_name: str
    phone_number: str | None = None
    status: PassengerStatus = PassengerStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == PassengerStatus.ACTIVE


class PassengerRegisterRequest(CamelModel):
    """Запрос на регистрацию пассажира."""

    username: str = Field(min_length=3, max_length=64)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=254)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: str | None = Field(default=None, max_length=32)


class PassengerStatusUpdate(CamelModel):
    status: PassengerStatus

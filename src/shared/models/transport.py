# src/shared/models/transport.py
"""
DTO маршрутов и рейсов.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from src.shared.models.common import CamelModel, new_id, utc_now
from src.shared.models.enums import RouteStatus, TripStatus


class Route(CamelModel):
    """Маршрут (документ коллекции routes)."""

    route_id: str = Field(default_factory=new_id)
    route_number: str
    route_name: str
    start_location: str
    end_location: str
    distance: float = Field(ge=0)  # км
    estimated_duration: int = Field(ge=0)  # минуты
    fare: float = Field(ge=0)
    status: RouteStatus = RouteStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RouteCreateRequest(CamelModel):
    route_number: str = Field(min_length=1, max_length=20)
    route_name: str = Field(min_length=1, max_length=200)
    start_location: str = Field(min_length=1)
    end_location: str = Field(min_length=1)
    distance: float = Field(ge=0)
    estimated_duration: int = Field(ge=0)
    fare: float = Field(ge=0)
    status: RouteStatus = RouteStatus.ACTIVE


class Trip(CamelModel):
    """
    Рейс (документ коллекции trips).

    Статус меняется только через TransportService.update_trip,
    который проверяет переход и публикует событие расписания.
    """

    trip_id: str = Field(default_factory=new_id)
    route_id: str
    route_number: str
    vehicle_id: str
    driver_name: str
    departure_time: datetime
    arrival_time: datetime
    actual_departure_time: datetime | None = None
    actual_arrival_time: datetime | None = None
    total_seats: int = Field(ge=0)
    available_seats: int = Field(ge=0)
    fare: float = Field(ge=0)
    status: TripStatus = TripStatus.SCHEDULED
    delay_reason: str | None = None
    delay_minutes: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TripCreateRequest(CamelModel):
    route_id: str
    vehicle_id: str = Field(min_length=1)
    driver_name: str = Field(min_length=1)
    departure_time: datetime
    arrival_time: datetime
    total_seats: int = Field(gt=0, le=1000)

    @model_validator(mode="after")
    def check_times(self) -> "TripCreateRequest":
        if self.arrival_time <= self.departure_time:
            raise ValueError("arrivalTime должен быть позже departureTime")
        return self


class TripUpdateRequest(CamelModel):
    """Частичное обновление рейса. Передаются только изменяемые поля."""

    status: TripStatus | None = None
    delay_reason: str | None = None
    delay_minutes: int | None = Field(default=None, ge=0)
    driver_name: str | None = None
    vehicle_id: str | None = None
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    actual_departure_time: datetime | None = None
    actual_arrival_time: datetime | None = None


class TripStatusUpdate(CamelModel):
    status: TripStatus
    delay_reason: str | None = None
    delay_minutes: int | None = Field(default=None, ge=0)

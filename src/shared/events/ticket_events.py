# src/shared/events/ticket_events.py
"""
Сообщения сервиса билетов (топики ticket-created, ticket-validated).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.events.base import BusMessage
from src.shared.models.common import new_id, utc_now
from src.shared.models.ticket import Ticket


class TicketCreatedMessage(BusMessage):
    """Билет выпущен. Маркерные поля: qrCode + purchaseTime."""

    ticket_id: str
    passenger_id: str
    trip_id: str
    route_id: str | None = None
    route_number: str | None = None
    fare: float = 0.0
    qr_code: str
    purchase_time: datetime
    valid_until: datetime | None = None

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketCreatedMessage":
        return cls(
            ticket_id=ticket.ticket_id,
            passenger_id=ticket.passenger_id,
            trip_id=ticket.trip_id,
            route_id=ticket.route_id,
            route_number=ticket.route_number,
            fare=ticket.fare,
            qr_code=ticket.qr_code,
            purchase_time=ticket.purchased_at,
            valid_until=ticket.valid_until,
        )


class TicketValidatedMessage(BusMessage):
    """Билет прошёл валидацию. Маркерные поля: validationId + validatedAt."""

    validation_id: str = Field(default_factory=new_id)
    ticket_id: str
    passenger_id: str
    trip_id: str | None = None
    route_number: str | None = None
    validated_at: datetime = Field(default_factory=utc_now)
    validated_by: str | None = None
    location: str | None = None

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketValidatedMessage":
        return cls(
            ticket_id=ticket.ticket_id,
            passenger_id=ticket.passenger_id,
            trip_id=ticket.trip_id,
            route_number=ticket.route_number,
            validated_at=ticket.validated_at or utc_now(),
            validated_by=ticket.validated_by,
            location=ticket.validation_location,
        )

# src/shared/models/ticket.py
"""
DTO билета.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.common import CamelModel, new_id, utc_now
from src.shared.models.enums import TicketStatus


class Ticket(CamelModel):
    """Билет (документ коллекции tickets)."""

    ticket_id: str = Field(default_factory=new_id)
    passenger_id: str
    trip_id: str
    route_id: str
    route_number: str
    fare: float = Field(ge=0)
    status: TicketStatus = TicketStatus.CREATED
    qr_code: str
    purchased_at: datetime = Field(default_factory=utc_now)
    valid_until: datetime
    validated_at: datetime | None = None
    validated_by: str | None = None
    validation_location: str | None = None
    payment_id: str | None = None
    updated_at: datetime = Field(default_factory=utc_now)

    def is_elapsed(self, now: datetime) -> bool:
        return now > self.valid_until


class TicketPurchaseRequest(CamelModel):
    passenger_id: str = Field(min_length=1)
    trip_id: str = Field(min_length=1)


class ConfirmPaymentRequest(CamelModel):
    payment_id: str = Field(min_length=1)


class ValidateTicketRequest(CamelModel):
    validated_by: str = Field(min_length=1)
    location: str | None = None


class ExpirySweepResult(CamelModel):
    expired_count: int
    swept_at: datetime

# src/shared/models/payment.py
"""
DTO платежей (симулятор платёжного шлюза).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.common import CamelModel, new_id, utc_now
from src.shared.models.enums import PaymentMethod, PaymentStatus


class Payment(CamelModel):
    """Платёж (документ коллекции payments), 1:1 с билетом."""

    payment_id: str = Field(default_factory=new_id)
    ticket_id: str
    passenger_id: str
    amount: float = Field(gt=0)
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CARD
    transaction_reference: str | None = None  # только при SUCCESS
    failure_reason: str | None = None  # только при FAILED
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PaymentRequest(CamelModel):
    """Запрос на оплату билета."""

    ticket_id: str = Field(min_length=1)
    passenger_id: str = Field(min_length=1)
    amount: float = Field(gt=0)
    payment_method: PaymentMethod = PaymentMethod.CARD


# Ответ API совпадает с документом платежа
PaymentResponse = Payment

# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели для межсервисного взаимодействия.
"""

from src.shared.models.common import CamelModel, HealthStatus, new_id, utc_now
from src.shared.models.enums import (
    InvalidEnumValue,
    NotificationChannel,
    NotificationStatus,
    NotificationType,
    PassengerStatus,
    PaymentMethod,
    PaymentStatus,
    RouteStatus,
    ScheduleEventType,
    Severity,
    TicketStatus,
    TripStatus,
    parse_enum,
)
from src.shared.models.notification import Notification
from src.shared.models.passenger import Passenger
from src.shared.models.payment import Payment
from src.shared.models.ticket import Ticket
from src.shared.models.transport import Route, Trip

__all__ = [
    # Common
    "CamelModel",
    "HealthStatus",
    "new_id",
    "utc_now",
    # Enums
    "InvalidEnumValue",
    "NotificationChannel",
    "NotificationStatus",
    "NotificationType",
    "PassengerStatus",
    "PaymentMethod",
    "PaymentStatus",
    "RouteStatus",
    "ScheduleEventType",
    "Severity",
    "TicketStatus",
    "TripStatus",
    "parse_enum",
    # Entities
    "Notification",
    "Passenger",
    "Payment",
    "Ticket",
    "Route",
    "Trip",
]

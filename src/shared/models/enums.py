# src/shared/models/enums.py
"""
Перечисления домена.

Значение каждого элемента совпадает с его именем: именно эта строка
хранится в документах и передаётся по шине.
"""

from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)


class InvalidEnumValue(ValueError):
    """Строка не соответствует ни одному элементу перечисления."""

    def __init__(self, enum_cls: type[Enum], value: Any) -> None:
        allowed = ", ".join(m.value for m in enum_cls)
        super().__init__(f"Недопустимое значение {value!r} для {enum_cls.__name__} (допустимо: {allowed})")
        self.enum_cls = enum_cls
        self.value = value


def parse_enum(enum_cls: type[E], value: Any) -> E:
    """
    Превращает строку в элемент перечисления.

    Сравнение строгое (с учётом регистра); при несовпадении
    выбрасывается InvalidEnumValue, значение по умолчанию не подставляется.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    raise InvalidEnumValue(enum_cls, value)


class PassengerStatus(str, Enum):
    """Статусы пассажира."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"

    def __str__(self) -> str:
        return self.value


class RouteStatus(str, Enum):
    """Статусы маршрута."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"

    def __str__(self) -> str:
        return self.value


class TripStatus(str, Enum):
    """Статусы рейса."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    DELAYED = "DELAYED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def __str__(self) -> str:
        return self.value


class TicketStatus(str, Enum):
    """Статусы билета."""
    CREATED = "CREATED"
    PAID = "PAID"
    VALIDATED = "VALIDATED"
    EXPIRED = "EXPIRED"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(str, Enum):
    """Статусы платежа."""
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    def __str__(self) -> str:
        return self.value


class PaymentMethod(str, Enum):
    """Способы оплаты."""
    CARD = "CARD"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    WALLET = "WALLET"
    CASH = "CASH"

    def __str__(self) -> str:
        return self.value


class NotificationStatus(str, Enum):
    """Статусы уведомления."""
    PENDING = "PENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


class NotificationType(str, Enum):
    """Типы уведомлений."""
    SCHEDULE_DISRUPTION = "SCHEDULE_DISRUPTION"
    TICKET_PURCHASED = "TICKET_PURCHASED"
    TICKET_VALIDATED = "TICKET_VALIDATED"

    def __str__(self) -> str:
        return self.value


class NotificationChannel(str, Enum):
    """Каналы доставки уведомлений."""
    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"
    CONSOLE = "CONSOLE"

    def __str__(self) -> str:
        return self.value


class ScheduleEventType(str, Enum):
    """Типы событий расписания."""
    DELAY = "DELAY"
    CANCELLATION = "CANCELLATION"
    SCHEDULE_CHANGE = "SCHEDULE_CHANGE"
    ROUTE_UPDATE = "ROUTE_UPDATE"

    def __str__(self) -> str:
        return self.value


class Severity(str, Enum):
    """Серьёзность нарушения расписания."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    def __str__(self) -> str:
        return self.value

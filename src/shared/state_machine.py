# src/shared/state_machine.py
"""
Допустимые переходы статусов рейса, билета, платежа и уведомления.

Чистые функции без I/O. Вызывающий код обязан проверить переход
до записи в хранилище и до публикации события.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from src.shared.errors import DomainError, ErrorCode
from src.shared.models.enums import (
    NotificationStatus,
    PaymentStatus,
    TicketStatus,
    TripStatus,
)


class StatusMachine:
    """
    База машины состояний.

    Наследник задаёт перечисление статусов, таблицу рёбер,
    допустимость перехода в тот же статус и код ошибки отказа.
    """

    STATUS_ENUM: ClassVar[type[Enum]]
    ALLOWED_TRANSITIONS: ClassVar[dict]
    ALLOW_SAME_STATE: ClassVar[bool] = False
    REJECTION_CODE: ClassVar[ErrorCode] = ErrorCode.INVALID_STATUS_TRANSITION

    @classmethod
    def _coerce(cls, status: Enum | str) -> Enum | None:
        try:
            return cls.STATUS_ENUM(status)
        except ValueError:
            return None

    @classmethod
    def can_transition(cls, current: Enum | str, target: Enum | str) -> bool:
        """True, если переход current -> target допустим. Неизвестный статус — всегда False."""
        curr = cls._coerce(current)
        new = cls._coerce(target)
        if curr is None or new is None:
            return False
        if curr == new:
            return cls.ALLOW_SAME_STATE
        return new in cls.ALLOWED_TRANSITIONS.get(curr, frozenset())

    @classmethod
    def validate_transition(cls, current: Enum | str, target: Enum | str) -> None:
        """Выбрасывает DomainError с кодом машины, если переход недопустим."""
        if not cls.can_transition(current, target):
            raise DomainError(
                cls.REJECTION_CODE,
                f"Недопустимый переход статуса {cls.STATUS_ENUM.__name__}: {current} -> {target}",
            )

    @classmethod
    def is_terminal(cls, status: Enum | str) -> bool:
        curr = cls._coerce(status)
        return curr is not None and not cls.ALLOWED_TRANSITIONS.get(curr)

    @classmethod
    def allowed_from(cls, status: Enum | str) -> frozenset:
        curr = cls._coerce(status)
        return cls.ALLOWED_TRANSITIONS.get(curr, frozenset()) if curr is not None else frozenset()


class TripStateMachine(StatusMachine):
    """Переход в тот же статус допустим (идемпотентные повторы)."""

    STATUS_ENUM = TripStatus
    ALLOW_SAME_STATE = True
    REJECTION_CODE = ErrorCode.INVALID_STATUS_TRANSITION
    ALLOWED_TRANSITIONS = {
        TripStatus.SCHEDULED: frozenset({TripStatus.IN_PROGRESS, TripStatus.DELAYED, TripStatus.CANCELLED}),
        TripStatus.IN_PROGRESS: frozenset({TripStatus.COMPLETED, TripStatus.DELAYED, TripStatus.CANCELLED}),
        TripStatus.DELAYED: frozenset({TripStatus.IN_PROGRESS, TripStatus.CANCELLED}),
        TripStatus.COMPLETED: frozenset(),
        TripStatus.CANCELLED: frozenset(),
    }

    @classmethod
    def is_valid_transition(cls, current: TripStatus | str, target: TripStatus | str) -> bool:
        return cls.can_transition(current, target)


class TicketStateMachine(StatusMachine):
    """
    CREATED -> PAID -> VALIDATED, CREATED|PAID -> EXPIRED.
    Повторный переход в тот же статус запрещён: вторая оплата отклоняется.
    """

    STATUS_ENUM = TicketStatus
    REJECTION_CODE = ErrorCode.INVALID_TICKET_STATUS
    ALLOWED_TRANSITIONS = {
        TicketStatus.CREATED: frozenset({TicketStatus.PAID, TicketStatus.EXPIRED}),
        TicketStatus.PAID: frozenset({TicketStatus.VALIDATED, TicketStatus.EXPIRED}),
        TicketStatus.VALIDATED: frozenset(),
        TicketStatus.EXPIRED: frozenset(),
    }


class PaymentStateMachine(StatusMachine):
    STATUS_ENUM = PaymentStatus
    REJECTION_CODE = ErrorCode.INVALID_PAYMENT_STATUS
    ALLOWED_TRANSITIONS = {
        PaymentStatus.PENDING: frozenset({PaymentStatus.SUCCESS, PaymentStatus.FAILED}),
        PaymentStatus.SUCCESS: frozenset({PaymentStatus.REFUNDED}),
        PaymentStatus.FAILED: frozenset(),
        PaymentStatus.REFUNDED: frozenset(),
    }


class NotificationStateMachine(StatusMachine):
    STATUS_ENUM = NotificationStatus
    ALLOWED_TRANSITIONS = {
        NotificationStatus.PENDING: frozenset(
            {NotificationStatus.SENT, NotificationStatus.FAILED, NotificationStatus.DELIVERED}
        ),
        NotificationStatus.SENT: frozenset({NotificationStatus.DELIVERED, NotificationStatus.FAILED}),
        NotificationStatus.DELIVERED: frozenset(),
        NotificationStatus.FAILED: frozenset(),
    }


def is_valid_transition(current: TripStatus | str, target: TripStatus | str) -> bool:
    """Проверка перехода статуса рейса."""
    return TripStateMachine.is_valid_transition(current, target)

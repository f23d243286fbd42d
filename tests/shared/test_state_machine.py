# tests/shared/test_state_machine.py
"""
Тесты машин состояний рейса, билета, платежа и уведомления.
"""

from __future__ import annotations

import itertools

import pytest

from src.shared.errors import DomainError, ErrorCode
from src.shared.models.enums import NotificationStatus, PaymentStatus, TicketStatus, TripStatus
from src.shared.state_machine import (
    NotificationStateMachine,
    PaymentStateMachine,
    TicketStateMachine,
    TripStateMachine,
    is_valid_transition,
)

TRIP_EDGES = {
    (TripStatus.SCHEDULED, TripStatus.IN_PROGRESS),
    (TripStatus.SCHEDULED, TripStatus.DELAYED),
    (TripStatus.SCHEDULED, TripStatus.CANCELLED),
    (TripStatus.IN_PROGRESS, TripStatus.COMPLETED),
    (TripStatus.IN_PROGRESS, TripStatus.DELAYED),
    (TripStatus.IN_PROGRESS, TripStatus.CANCELLED),
    (TripStatus.DELAYED, TripStatus.IN_PROGRESS),
    (TripStatus.DELAYED, TripStatus.CANCELLED),
}


class TestTripStateMachine:
    """Переходы статуса рейса."""

    @pytest.mark.parametrize("current,target", list(itertools.product(TripStatus, TripStatus)))
    def test_exhaustive_pairs(self, current: TripStatus, target: TripStatus) -> None:
        """Переход допустим тогда и только тогда, когда он в таблице или тот же статус."""
        expected = current == target or (current, target) in TRIP_EDGES
        assert is_valid_transition(current, target) is expected

    def test_examples(self) -> None:
        assert is_valid_transition(TripStatus.SCHEDULED, TripStatus.CANCELLED) is True
        assert is_valid_transition(TripStatus.COMPLETED, TripStatus.IN_PROGRESS) is False
        assert is_valid_transition(TripStatus.DELAYED, TripStatus.DELAYED) is True

    def test_accepts_strings(self) -> None:
        assert TripStateMachine.is_valid_transition("SCHEDULED", "DELAYED") is True

    def test_unknown_status_is_rejected(self) -> None:
        assert is_valid_transition("SCHEDULED", "TELEPORTED") is False
        assert is_valid_transition("scheduled", "DELAYED") is False

    def test_validate_raises_with_code(self) -> None:
        with pytest.raises(DomainError) as exc_info:
            TripStateMachine.validate_transition(TripStatus.CANCELLED, TripStatus.SCHEDULED)
        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION
        assert exc_info.value.status_code == 400

    def test_terminal_statuses(self) -> None:
        assert TripStateMachine.is_terminal(TripStatus.COMPLETED)
        assert TripStateMachine.is_terminal(TripStatus.CANCELLED)
        assert not TripStateMachine.is_terminal(TripStatus.DELAYED)


class TestTicketStateMachine:
    """Переходы статуса билета."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (TicketStatus.CREATED, TicketStatus.PAID),
            (TicketStatus.CREATED, TicketStatus.EXPIRED),
            (TicketStatus.PAID, TicketStatus.VALIDATED),
            (TicketStatus.PAID, TicketStatus.EXPIRED),
        ],
    )
    def test_allowed(self, current: TicketStatus, target: TicketStatus) -> None:
        assert TicketStateMachine.can_transition(current, target)

    @pytest.mark.parametrize("target", list(TicketStatus))
    def test_validated_is_final(self, target: TicketStatus) -> None:
        """Из VALIDATED никуда нельзя, в том числе в VALIDATED."""
        assert not TicketStateMachine.can_transition(TicketStatus.VALIDATED, target)

    @pytest.mark.parametrize("target", list(TicketStatus))
    def test_expired_is_final(self, target: TicketStatus) -> None:
        assert not TicketStateMachine.can_transition(TicketStatus.EXPIRED, target)

    def test_repeat_payment_rejected(self) -> None:
        with pytest.raises(DomainError) as exc_info:
            TicketStateMachine.validate_transition(TicketStatus.PAID, TicketStatus.PAID)
        assert exc_info.value.code == ErrorCode.INVALID_TICKET_STATUS

    def test_skip_payment_rejected(self) -> None:
        assert not TicketStateMachine.can_transition(TicketStatus.CREATED, TicketStatus.VALIDATED)


class TestPaymentStateMachine:
    def test_refund_only_from_success(self) -> None:
        assert PaymentStateMachine.can_transition(PaymentStatus.SUCCESS, PaymentStatus.REFUNDED)
        for status in (PaymentStatus.PENDING, PaymentStatus.FAILED, PaymentStatus.REFUNDED):
            assert not PaymentStateMachine.can_transition(status, PaymentStatus.REFUNDED)

    def test_rejection_code(self) -> None:
        with pytest.raises(DomainError) as exc_info:
            PaymentStateMachine.validate_transition(PaymentStatus.FAILED, PaymentStatus.REFUNDED)
        assert exc_info.value.code == ErrorCode.INVALID_PAYMENT_STATUS


class TestNotificationStateMachine:
    def test_monotonic(self) -> None:
        assert NotificationStateMachine.can_transition(NotificationStatus.PENDING, NotificationStatus.SENT)
        assert NotificationStateMachine.can_transition(NotificationStatus.SENT, NotificationStatus.DELIVERED)
        assert not NotificationStateMachine.can_transition(NotificationStatus.DELIVERED, NotificationStatus.SENT)
        assert not NotificationStateMachine.can_transition(NotificationStatus.FAILED, NotificationStatus.DELIVERED)

    def test_allowed_from(self) -> None:
        assert NotificationStateMachine.allowed_from(NotificationStatus.FAILED) == frozenset()
        assert NotificationStatus.DELIVERED in NotificationStateMachine.allowed_from(NotificationStatus.PENDING)

# src/services/payment_service/service.py
"""
Симулятор платёжного шлюза.

Платёж создаётся PENDING, после искусственной задержки разрешается
в SUCCESS (с вероятностью success_rate) или FAILED с одной из
заготовленных причин. Результат недетерминирован: одна и та же пара
билет/сумма может пройти или не пройти в разных запусках.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable

import redis.asyncio as redis

from src.common.logger import log_info, log_warning
from src.infra.redis_client import RedisClient
from src.services.payment_service.repository import PaymentRepository
from src.shared.errors import DomainError, ErrorCode, NotFoundError
from src.shared.models.enums import PaymentStatus
from src.shared.models.payment import Payment, PaymentRequest
from src.shared.state_machine import PaymentStateMachine

FAILURE_REASONS = (
    "Insufficient funds",
    "Card declined",
    "Payment gateway timeout",
    "Invalid card details",
    "Transaction limit exceeded",
)

CACHE_PREFIX = "payment"


class PaymentService:
    def __init__(
        self,
        repository: PaymentRepository,
        cache: RedisClient | None = None,
        success_rate: float = 0.95,
        processing_delay: float = 2.0,
        currency: str = "USD",
        cache_ttl: int = 3600,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.repository = repository
        self.cache = cache
        self.success_rate = success_rate
        self.processing_delay = processing_delay
        self.currency = currency
        self.cache_ttl = cache_ttl
        self.sleep = sleep
        self.rng = rng or random.Random()

    # =========================================================================
    # ОПЛАТА
    # =========================================================================

    async def process_payment(self, request: PaymentRequest) -> Payment:
        """
        Проводит платёж через симулятор.

        Задержка не отменяется после старта. Разрешённое состояние
        сохраняется до возврата ответа.
        """
        payment = Payment(
            ticket_id=request.ticket_id,
            passenger_id=request.passenger_id,
            amount=request.amount,
            currency=self.currency,
            payment_method=request.payment_method,
            status=PaymentStatus.PENDING,
        )
        await self.repository.create(payment)
        await log_info(
            f"Платёж {payment.payment_id} создан: билет {payment.ticket_id}, "
            f"{payment.amount} {payment.currency} ({payment.payment_method})"
        )

        await self.sleep(self.processing_delay)

        if self.rng.random() < self.success_rate:
            target = PaymentStatus.SUCCESS
            fields = {"transactionReference": f"TXN-{self.rng.getrandbits(48):012X}"}
        else:
            target = PaymentStatus.FAILED
            fields = {"failureReason": self.rng.choice(FAILURE_REASONS)}

        resolved = await self.repository.transition(payment.payment_id, PaymentStatus.PENDING, target, **fields)
        if resolved is None:
            raise DomainError(
                ErrorCode.INVALID_PAYMENT_STATUS,
                f"Платёж {payment.payment_id} изменён до завершения обработки",
            )
        await self._invalidate(payment.payment_id)

        if resolved.status == PaymentStatus.SUCCESS:
            await log_info(f"Платёж {resolved.payment_id} проведён: {resolved.transaction_reference}")
        else:
            await log_warning(f"Платёж {resolved.payment_id} отклонён: {resolved.failure_reason}")
        return resolved

    async def refund(self, payment_id: str) -> Payment:
        """SUCCESS -> REFUNDED; из других статусов возврат невозможен."""
        payment = await self._load(payment_id)
        PaymentStateMachine.validate_transition(payment.status, PaymentStatus.REFUNDED)

        refunded = await self.repository.transition(payment_id, PaymentStatus.SUCCESS, PaymentStatus.REFUNDED)
        if refunded is None:
            raise DomainError(ErrorCode.INVALID_PAYMENT_STATUS, f"Платёж {payment_id} уже не в статусе SUCCESS")
        await self._invalidate(payment_id)

        await log_info(f"Платёж {payment_id} возвращён")
        return refunded

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    async def get_payment(self, payment_id: str) -> Payment:
        """Чтение через кэш; недоступный Redis не мешает чтению из хранилища."""
        key = f"{CACHE_PREFIX}:{payment_id}"

        if self.cache is not None:
            try:
                cached = await self.cache.get_model(key, Payment)
            except (redis.RedisError, RuntimeError) as e:
                await log_warning(f"Кэш платежей недоступен: {e}")
                cached = None
            if cached is not None:
                return cached

        payment = await self._load(payment_id)

        if self.cache is not None:
            try:
                await self.cache.set_model(key, payment, ttl=self.cache_ttl)
            except (redis.RedisError, RuntimeError) as e:
                await log_warning(f"Не удалось закэшировать платёж {payment_id}: {e}")
        return payment

    async def list_payments(self, passenger_id: str | None = None, ticket_id: str | None = None) -> list[Payment]:
        return await self.repository.list(passenger_id, ticket_id)

    async def _load(self, payment_id: str) -> Payment:
        payment = await self.repository.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError(ErrorCode.PAYMENT_NOT_FOUND, f"Платёж {payment_id} не найден")
        return payment

    async def _invalidate(self, payment_id: str) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.delete(f"{CACHE_PREFIX}:{payment_id}")
        except (redis.RedisError, RuntimeError) as e:
            await log_warning(f"Не удалось сбросить кэш платежа {payment_id}: {e}")

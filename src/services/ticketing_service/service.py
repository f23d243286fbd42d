# src/services/ticketing_service/service.py
"""
Координатор жизненного цикла билета.

CREATED -> PAID -> VALIDATED, CREATED|PAID -> EXPIRED после validUntil.
Каждый переход — условная атомарная запись в хранилище; проверка
в TicketStateMachine выполняется до записи и служит источником кода ошибки.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta
from typing import Callable

from src.common.logger import log_error, log_info, log_warning
from src.services.ticketing_service.clients import PassengerClient, TransportClient
from src.services.ticketing_service.publisher import TicketEventPublisher
from src.services.ticketing_service.repository import TicketRepository
from src.shared.errors import DomainError, ErrorCode, NotFoundError
from src.shared.models.common import new_id, utc_now
from src.shared.models.enums import TicketStatus, TripStatus
from src.shared.models.ticket import Ticket, TicketPurchaseRequest, ValidateTicketRequest
from src.shared.state_machine import TicketStateMachine


def make_qr_code(ticket_id: str, passenger_id: str, trip_id: str, purchased_at: datetime) -> str:
    """QR-токен, производный от содержимого билета."""
    content = f"{ticket_id}:{passenger_id}:{trip_id}:{purchased_at.isoformat()}"
    return "QR-" + hashlib.sha256(content.encode("utf-8")).hexdigest()


async def expire_stale_tickets(repository: TicketRepository, now: datetime) -> int:
    """Массовый перевод просроченных CREATED|PAID билетов в EXPIRED."""
    count = await repository.expire_stale(now)
    if count:
        await log_info(f"Просрочено билетов: {count}")
    return count


class TicketingService:
    def __init__(
        self,
        repository: TicketRepository,
        passenger_client: PassengerClient,
        transport_client: TransportClient,
        publisher: TicketEventPublisher,
        validity_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.passenger_client = passenger_client
        self.transport_client = transport_client
        self.publisher = publisher
        self.validity = timedelta(hours=validity_hours)
        self.clock = clock

    # =========================================================================
    # ПОКУПКА
    # =========================================================================

    async def purchase(self, request: TicketPurchaseRequest) -> Ticket:
        """
        Выпускает билет в статусе CREATED.

        Порядок проверок: пассажир существует и ACTIVE, рейс существует,
        есть места, рейс SCHEDULED. Затем место занимается атомарно
        в Transport Service; если резервирование отклонено, билет не
        создаётся и наружу уходит код отказа Transport Service.

        Raises:
            NotFoundError: PASSENGER_NOT_FOUND, TRIP_NOT_FOUND
            DomainError: INACTIVE_PASSENGER, NO_SEATS, INVALID_TRIP_STATUS
            InfrastructureError: соседний сервис или хранилище недоступны
        """
        passenger = await self.passenger_client.get_passenger(request.passenger_id)
        if passenger is None:
            raise NotFoundError(ErrorCode.PASSENGER_NOT_FOUND, f"Пассажир {request.passenger_id} не найден")
        if not passenger.is_active:
            raise DomainError(
                ErrorCode.INACTIVE_PASSENGER,
                f"Пассажир {request.passenger_id} в статусе {passenger.status}",
            )

        trip = await self.transport_client.get_trip(request.trip_id)
        if trip is None:
            raise NotFoundError(ErrorCode.TRIP_NOT_FOUND, f"Рейс {request.trip_id} не найден")
        if trip.available_seats <= 0:
            raise DomainError(ErrorCode.NO_SEATS, f"На рейсе {trip.trip_id} нет свободных мест")
        if trip.status != TripStatus.SCHEDULED:
            raise DomainError(ErrorCode.INVALID_TRIP_STATUS, f"Рейс {trip.trip_id} в статусе {trip.status}")

        await self.transport_client.reserve_seat(trip.trip_id)

        now = self.clock()
        ticket_id = new_id()
        ticket = Ticket(
            ticket_id=ticket_id,
            passenger_id=passenger.passenger_id,
            trip_id=trip.trip_id,
            route_id=trip.route_id,
            route_number=trip.route_number,
            fare=trip.fare,
            status=TicketStatus.CREATED,
            qr_code=make_qr_code(ticket_id, passenger.passenger_id, trip.trip_id, now),
            purchased_at=now,
            valid_until=now + self.validity,
            updated_at=now,
        )

        try:
            await self.repository.create(ticket)
        except Exception:
            await self._release_seat_quietly(trip.trip_id)
            raise

        await log_info(f"Билет {ticket.ticket_id} выпущен: пассажир {ticket.passenger_id}, рейс {ticket.trip_id}")

        result = await self.publisher.publish_created(ticket)
        if not result.success:
            await log_warning(f"Билет {ticket.ticket_id} создан, но сообщение не опубликовано: {result.error_message}")
        return ticket

    async def _release_seat_quietly(self, trip_id: str) -> None:
        try:
            released = await self.transport_client.release_seat(trip_id)
        except Exception as e:
            await log_error(f"Не удалось вернуть место на рейс {trip_id}: {e}", exc_info=True)
            return
        if not released:
            await log_warning(f"Место на рейс {trip_id} не возвращено")

    # =========================================================================
    # ОПЛАТА И ВАЛИДАЦИЯ
    # =========================================================================

    async def confirm_payment(self, ticket_id: str, payment_id: str) -> Ticket:
        """
        CREATED -> PAID.

        Повторное подтверждение уже оплаченного билета отклоняется
        с INVALID_TICKET_STATUS.
        """
        ticket = await self.get_ticket(ticket_id)
        TicketStateMachine.validate_transition(ticket.status, TicketStatus.PAID)

        updated = await self.repository.mark_paid(ticket_id, payment_id)
        if updated is None:
            # Статус изменился между чтением и записью
            current = await self.get_ticket(ticket_id)
            TicketStateMachine.validate_transition(current.status, TicketStatus.PAID)
            raise DomainError(ErrorCode.INVALID_TICKET_STATUS, f"Билет {ticket_id} уже обработан")

        await log_info(f"Билет {ticket_id} оплачен (payment {payment_id})")
        return updated

    async def validate(self, ticket_id: str, request: ValidateTicketRequest) -> Ticket:
        """
        PAID -> VALIDATED, пока validUntil не истёк.

        Просроченный билет переводится в EXPIRED, запрос отклоняется
        с TICKET_EXPIRED.
        """
        now = self.clock()
        ticket = await self.get_ticket(ticket_id)

        if ticket.status == TicketStatus.EXPIRED:
            raise DomainError(ErrorCode.TICKET_EXPIRED, f"Срок действия билета {ticket_id} истёк")
        if ticket.status in (TicketStatus.CREATED, TicketStatus.PAID) and ticket.is_elapsed(now):
            await self._expire(ticket_id, now)
        TicketStateMachine.validate_transition(ticket.status, TicketStatus.VALIDATED)

        updated = await self.repository.mark_validated(ticket_id, now, request.validated_by, request.location)
        if updated is None:
            current = await self.get_ticket(ticket_id)
            if current.status == TicketStatus.PAID and current.is_elapsed(now):
                await self._expire(ticket_id, now)
            if current.status == TicketStatus.EXPIRED:
                raise DomainError(ErrorCode.TICKET_EXPIRED, f"Срок действия билета {ticket_id} истёк")
            raise DomainError(
                ErrorCode.INVALID_TICKET_STATUS,
                f"Билет {ticket_id} в статусе {current.status}, валидация невозможна",
            )

        await log_info(f"Билет {ticket_id} прошёл валидацию ({request.validated_by})")

        result = await self.publisher.publish_validated(updated)
        if not result.success:
            await log_warning(f"Билет {ticket_id} провалидирован, но сообщение не опубликовано: {result.error_message}")
        return updated

    async def _expire(self, ticket_id: str, now: datetime) -> None:
        """Переводит просроченный билет в EXPIRED и всегда отклоняет запрос."""
        expired = await self.repository.mark_expired(ticket_id, now)
        if expired is not None:
            await log_info(f"Билет {ticket_id} просрочен при валидации")
        raise DomainError(ErrorCode.TICKET_EXPIRED, f"Срок действия билета {ticket_id} истёк")

    # =========================================================================
    # ИСТЕЧЕНИЕ СРОКА
    # =========================================================================

    async def expire_stale_tickets(self, now: datetime | None = None) -> int:
        """
        Переводит все CREATED|PAID билеты с истёкшим validUntil в EXPIRED.

        Returns:
            Количество просроченных билетов (повторный запуск вернёт 0)
        """
        return await expire_stale_tickets(self.repository, now or self.clock())

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self.repository.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError(ErrorCode.TICKET_NOT_FOUND, f"Билет {ticket_id} не найден")
        return ticket

    async def list_tickets(self, passenger_id: str | None = None, status: TicketStatus | None = None) -> list[Ticket]:
        return await self.repository.list(passenger_id, status)

# tests/worker/test_expiry_worker.py
"""
Тесты воркера истечения срока билетов.
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.services.ticketing_service.repository import TicketRepository
from src.services.ticketing_service.service import TicketingService
from src.shared.models.common import utc_now
from src.shared.models.enums import TicketStatus
from src.shared.models.ticket import Ticket
from src.worker.expiry import TicketExpiryWorker
from tests.fakes import FakeCollection


def make_ticket(ticket_id: str, status: TicketStatus, hours_left: float) -> Ticket:
    now = utc_now()
    return Ticket(
        ticket_id=ticket_id,
        passenger_id="passenger-1",
        trip_id="trip-1",
        route_id="route-1",
        route_number="42A",
        fare=3.5,
        status=status,
        qr_code=f"QR-{ticket_id}",
        purchased_at=now - timedelta(hours=24),
        valid_until=now + timedelta(hours=hours_left),
    )


@pytest.fixture
def repository() -> TicketRepository:
    return TicketRepository(FakeCollection("tickets"))


class TestTicketExpiryWorker:
    @pytest.mark.asyncio
    async def test_sweep(self, repository: TicketRepository) -> None:
        await repository.create(make_ticket("stale-created", TicketStatus.CREATED, -1))
        await repository.create(make_ticket("stale-paid", TicketStatus.PAID, -2))
        await repository.create(make_ticket("stale-validated", TicketStatus.VALIDATED, -1))
        await repository.create(make_ticket("fresh", TicketStatus.PAID, 5))

        worker = TicketExpiryWorker(repository, interval=60)
        assert await worker.sweep() == 2
        assert await worker.sweep() == 0

        statuses = {t.ticket_id: t.status for t in await repository.list()}
        assert statuses == {
            "stale-created": TicketStatus.EXPIRED,
            "stale-paid": TicketStatus.EXPIRED,
            "stale-validated": TicketStatus.VALIDATED,
            "fresh": TicketStatus.PAID,
        }

    @pytest.mark.asyncio
    async def test_run_once_waits_for_next_interval(self, repository: TicketRepository) -> None:
        await repository.create(make_ticket("stale", TicketStatus.CREATED, -1))
        worker = TicketExpiryWorker(repository)
        assert await worker.run_once() == 0
        assert (await repository.get_by_id("stale")).status == TicketStatus.EXPIRED

    def test_defaults(self, repository: TicketRepository) -> None:
        worker = TicketExpiryWorker(repository)
        assert worker.name == "TicketExpiryWorker"
        assert worker.interval == 300.0

    @pytest.mark.asyncio
    async def test_sweep_shares_service_path(self, repository: TicketRepository) -> None:
        worker = TicketExpiryWorker(repository)
        with patch("src.worker.expiry.expire_stale_tickets", new_callable=AsyncMock, return_value=3) as sweep:
            assert await worker.sweep() == 3
        sweep.assert_awaited_once()
        assert sweep.await_args.args[0] is repository

    @pytest.mark.asyncio
    async def test_worker_and_service_agree(self, repository: TicketRepository) -> None:
        await repository.create(make_ticket("stale", TicketStatus.PAID, -1))
        service = TicketingService(repository, MagicMock(), MagicMock(), MagicMock())
        assert await TicketExpiryWorker(repository).sweep() == 1
        assert await service.expire_stale_tickets() == 0

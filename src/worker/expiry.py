# src/worker/expiry.py
"""
Воркер истечения срока билетов.
"""

from __future__ import annotations

from src.services.ticketing_service.repository import TicketRepository
from src.services.ticketing_service.service import expire_stale_tickets
from src.shared.models.common import utc_now
from src.worker.base import BaseWorker


class TicketExpiryWorker(BaseWorker):
    """
    Периодически переводит CREATED|PAID билеты с истёкшим validUntil в EXPIRED.

    Работает напрямую с коллекцией tickets: для массового обновления
    соседние сервисы не нужны. Проход тот же, что у
    TicketingService.expire_stale_tickets.
    """

    def __init__(self, repository: TicketRepository, interval: float = 300.0) -> None:
        super().__init__(interval=interval)
        self.repository = repository

    @property
    def name(self) -> str:
        return "TicketExpiryWorker"

    async def run_once(self) -> int:
        await self.sweep()
        # Один проход за интервал, даже если что-то просрочено
        return 0

    async def sweep(self) -> int:
        return await expire_stale_tickets(self.repository, utc_now())

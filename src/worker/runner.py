# src/worker/runner.py
"""
Запускалка фоновых воркеров (режим worker).
"""

from __future__ import annotations

import asyncio
from typing import List

from src.worker.base import BaseWorker
from src.worker.expiry import TicketExpiryWorker
from src.infra.database import init_db, close_db, get_db
from src.infra.document_store import Collection
from src.services.ticketing_service.repository import TicketRepository
from src.common.logger import log_info, log_error, setup_logging
from src.common.constants import TypeMsg
from src.config import settings


async def run_workers(init_infra: bool = True) -> None:
    """
    Запускает TicketExpiryWorker.

    Args:
        init_infra: Если True, подключается к БД. В режиме all инфраструктура
                    уже инициализирована в main.py, передаётся False.
    """
    await log_info("Запуск воркеров...", type_msg=TypeMsg.INFO)

    if init_infra:
        await init_db()

    workers: List[BaseWorker] = [
        TicketExpiryWorker(
            TicketRepository(Collection("tickets", get_db())),
            interval=settings.ticketing.EXPIRY_SWEEP_INTERVAL,
        ),
    ]

    try:
        for worker in workers:
            await worker.start()

        await log_info(f"Запущено {len(workers)} воркеров", type_msg=TypeMsg.INFO)

        # Ждём завершения (Ctrl+C)
        while True:
            await asyncio.sleep(1)

    except asyncio.CancelledError:
        await log_info("Получен сигнал остановки", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise
    finally:
        for worker in workers:
            await worker.stop()

        if init_infra:
            await close_db()

        await log_info("Воркеры остановлены", type_msg=TypeMsg.INFO)


def main() -> None:
    """Точка входа."""
    setup_logging()
    try:
        asyncio.run(run_workers())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

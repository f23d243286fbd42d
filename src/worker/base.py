# src/worker/base.py
"""
Базовый класс для воркеров.

Воркер — цикл опроса: run_once() обрабатывает одну порцию работы
и возвращает количество обработанных записей. Пустая порция означает
паузу на interval секунд. Ошибка одной итерации логируется и не
останавливает цикл.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import List

from src.common.logger import log_error, log_info
from src.common.constants import TypeMsg


class BaseWorker(ABC):
    """
    Базовый класс для всех воркеров.
    """

    def __init__(self, interval: float = 1.0) -> None:
        """
        Args:
            interval: Пауза между итерациями без работы (секунды)
        """
        self.interval = interval
        self._running = False
        self._tasks: List[asyncio.Task] = []

    @property
    @abstractmethod
    def name(self) -> str:
        """Имя воркера."""
        pass

    @abstractmethod
    async def run_once(self) -> int:
        """
        Одна итерация.

        Returns:
            Количество обработанных записей
        """
        pass

    async def setup(self) -> None:
        """Подготовка перед запуском цикла (объявление очередей и т.п.)."""

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Запускает воркер в фоновой задаче."""
        if self._running:
            return

        await log_info(f"Воркер {self.name} запускается...", type_msg=TypeMsg.INFO)
        await self.setup()
        self._running = True
        self._tasks.append(asyncio.create_task(self._loop(), name=self.name))
        await log_info(f"Воркер {self.name} запущен", type_msg=TypeMsg.INFO)

    async def stop(self) -> None:
        """Останавливает воркер."""
        if not self._running:
            return

        self._running = False

        # Отменяем все задачи
        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        self._tasks.clear()
        await log_info(f"Воркер {self.name} остановлен", type_msg=TypeMsg.INFO)

    async def _loop(self) -> None:
        while self._running:
            processed = await self._safe_run_once()
            if processed == 0:
                await asyncio.sleep(self.interval)

    async def _safe_run_once(self) -> int:
        try:
            return await self.run_once()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await log_error(f"Ошибка в воркере {self.name}: {e}", exc_info=True)
            return 0

# src/worker/__init__.py
"""
Фоновые воркеры: цикл опроса шины и периодические задачи.
"""

from src.worker.base import BaseWorker
from src.worker.expiry import TicketExpiryWorker

__all__ = ["BaseWorker", "TicketExpiryWorker"]

#!/usr/bin/env python3
# main.py
"""
Главная точка входа платформы продажи билетов.
Запускает один из сервисов, воркер или все компоненты сразу.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import COMPONENT_MODES, TypeMsg


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []

# mode -> (ASGI-приложение, атрибут порта в settings.deployment, название)
SERVICES: dict[str, tuple[str, str, str]] = {
    "passenger_service": (
        "src.services.passenger_service.app:app", "PASSENGER_SERVICE_PORT", "Passenger Service",
    ),
    "transport_service": (
        "src.services.transport_service.app:app", "TRANSPORT_SERVICE_PORT", "Transport Service",
    ),
    "ticketing_service": (
        "src.services.ticketing_service.app:app", "TICKETING_SERVICE_PORT", "Ticketing Service",
    ),
    "payment_service": (
        "src.services.payment_service.app:app", "PAYMENT_SERVICE_PORT", "Payment Service",
    ),
    "notifications": (
        "src.notifications.app:app", "NOTIFICATION_SERVICE_PORT", "Notification Service",
    ),
}


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_service(mode: str) -> None:
    """Запускает HTTP-сервис через uvicorn."""
    import uvicorn

    app_path, port_attr, title = SERVICES[mode]
    port = getattr(settings.deployment, port_attr)
    await log_info(f"Запуск {title} на порту {port}...", type_msg=TypeMsg.INFO)

    config = uvicorn.Config(
        app_path,
        host="0.0.0.0",
        port=port,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)
    await server.serve()


async def run_worker() -> None:
    """Запускает фоновые воркеры (истечение срока билетов)."""
    from src.worker.runner import run_workers

    await run_workers(init_infra=True)


def _runners(mode: str) -> list:
    if mode == "all":
        return [run_service(name) for name in SERVICES] + [run_worker()]
    if mode == "worker":
        return [run_worker()]
    return [run_service(mode)]


async def main(mode: str | None = None) -> None:
    """
    Главная функция.

    Args:
        mode: Режим запуска; по умолчанию берётся из system.COMPONENT_MODE
    """
    global _running_tasks

    setup_logging()
    setup_signal_handlers()

    mode = mode or settings.system.COMPONENT_MODE
    if mode not in COMPONENT_MODES:
        await log_error(f"Неизвестный режим: {mode}")
        return

    await log_info(
        f"{settings.system.PROJECT_NAME} v{settings.system.VERSION} "
        f"({settings.system.ENVIRONMENT}), режим: {mode}",
        type_msg=TypeMsg.INFO,
    )

    _running_tasks = [asyncio.create_task(runner) for runner in _runners(mode)]

    try:
        await asyncio.gather(*_running_tasks)
    except asyncio.CancelledError:
        await log_info("Задача отменена, выполняется graceful shutdown", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise
    finally:
        for task in _running_tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*_running_tasks, return_exceptions=True)
        _running_tasks.clear()
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    """Выводит справку по использованию."""
    lines = [
        f"Transit Ticketing v{settings.system.VERSION}",
        "",
        "Использование:",
        "    python main.py [mode]",
        "",
        "Режимы:",
    ]
    for mode, (_, port_attr, title) in SERVICES.items():
        lines.append(f"    {mode:<20} {title} (:{getattr(settings.deployment, port_attr)})")
    lines.append(f"    {'worker':<20} Истечение срока билетов по расписанию")
    lines.append(f"    {'all':<20} Все сервисы и воркер в одном процессе")
    print("\n".join(lines))


if __name__ == "__main__":
    mode = None

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        if arg not in COMPONENT_MODES:
            print(f"Ошибка: неизвестный режим '{arg}'")
            print_usage()
            sys.exit(1)
        mode = arg

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        pass

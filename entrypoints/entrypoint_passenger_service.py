#!/usr/bin/env python3
# entrypoint_passenger_service.py
"""
Точка входа для запуска компонента passenger_service в Docker контейнере.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import main


if __name__ == "__main__":
    try:
        asyncio.run(main(mode="passenger_service"))
    except KeyboardInterrupt:
        pass

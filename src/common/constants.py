# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Имя корневого логгера проекта
LOGGER_NAME = "transit"

# Получатель широковещательных уведомлений (нет конкретного пассажира)
BROADCAST_RECIPIENT = "ALL"

# Режимы запуска (python main.py <mode>)
COMPONENT_MODES = (
    "passenger_service",
    "transport_service",
    "ticketing_service",
    "payment_service",
    "notifications",
    "worker",
    "all",
)

# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Секретные данные и адреса сервисов переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "transit_ticketing"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = "all"


class DeploymentSettings(BaseModel):
    """Хосты и порты сервисов."""
    PASSENGER_SERVICE_HOST: str = "localhost"
    PASSENGER_SERVICE_PORT: int = 9090
    TRANSPORT_SERVICE_HOST: str = "localhost"
    TRANSPORT_SERVICE_PORT: int = 9091
    TICKETING_SERVICE_HOST: str = "localhost"
    TICKETING_SERVICE_PORT: int = 9092
    PAYMENT_SERVICE_HOST: str = "localhost"
    PAYMENT_SERVICE_PORT: int = 9093
    NOTIFICATION_SERVICE_HOST: str = "localhost"
    NOTIFICATION_SERVICE_PORT: int = 9094

    @property
    def passenger_service_url(self) -> str:
        return f"http://{self.PASSENGER_SERVICE_HOST}:{self.PASSENGER_SERVICE_PORT}"

    @property
    def transport_service_url(self) -> str:
        return f"http://{self.TRANSPORT_SERVICE_HOST}:{self.TRANSPORT_SERVICE_PORT}"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "transit"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 2
    DB_MAX_POOL_SIZE: int = 10
    DB_COMMAND_TIMEOUT: int = 30
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Возвращает DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Настройки Redis."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "transit"
    REDIS_MAX_CONNECTIONS: int = 20

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class RabbitMQSettings(BaseModel):
    """Настройки шины событий (RabbitMQ)."""
    RABBITMQ_HOST: str = "localhost"
    RABBITMQ_PORT: int = 5672
    RABBITMQ_USER: str = "guest"
    RABBITMQ_PASSWORD: str = "guest"
    RABBITMQ_VHOST: str = "/"
    RABBITMQ_EXCHANGE: str = "transit.events"
    RABBITMQ_PREFETCH_COUNT: int = 50
    TOPIC_SCHEDULE_UPDATES: str = "schedule-updates"
    TOPIC_TICKET_VALIDATED: str = "ticket-validated"
    TOPIC_TICKET_CREATED: str = "ticket-created"
    NOTIFICATION_CONSUMER_GROUP: str = "notification-service-group"
    MAX_POLL_RECORDS: int = 100

    @field_validator("RABBITMQ_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        env_pass = os.getenv("RABBITMQ_PASSWORD", "")
        if env_pass:
            return env_pass
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к RabbitMQ."""
        return (
            f"amqp://{self.RABBITMQ_USER}:{self.RABBITMQ_PASSWORD}"
            f"@{self.RABBITMQ_HOST}:{self.RABBITMQ_PORT}{self.RABBITMQ_VHOST}"
        )

    @property
    def notification_topics(self) -> list[str]:
        """Топики, на которые подписана служба уведомлений."""
        return [
            self.TOPIC_SCHEDULE_UPDATES,
            self.TOPIC_TICKET_VALIDATED,
            self.TOPIC_TICKET_CREATED,
        ]


class TicketingSettings(BaseModel):
    """Настройки билетов."""
    TICKET_VALIDITY_HOURS: int = 24
    EXPIRY_SWEEP_INTERVAL: int = 300
    HTTP_CLIENT_TIMEOUT: float = 5.0


class PaymentSettings(BaseModel):
    """Настройки симулятора платежей."""
    PAYMENT_SUCCESS_RATE: float = 0.95
    PAYMENT_PROCESSING_DELAY: float = 2.0
    PAYMENT_CURRENCY: str = "USD"
    PAYMENT_CACHE_TTL: int = 3600

    @field_validator("PAYMENT_SUCCESS_RATE")
    @classmethod
    def check_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("PAYMENT_SUCCESS_RATE должен быть в диапазоне [0, 1]")
        return v


class NotificationSettings(BaseModel):
    """Настройки уведомлений."""
    NOTIFICATION_CONSOLE_ENABLED: bool = True
    NOTIFICATION_STORE_ENABLED: bool = True
    NOTIFICATION_DEFAULT_CHANNEL: str = "EMAIL"
    NOTIFICATION_POLL_INTERVAL: float = 1.0


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    rabbitmq: RabbitMQSettings = Field(default_factory=RabbitMQSettings)
    ticketing: TicketingSettings = Field(default_factory=TicketingSettings)
    payments: PaymentSettings = Field(default_factory=PaymentSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты и адреса переопределяются из переменных окружения.
        """
        config_data = load_config_json()

        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "transit_ticketing"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", data.get("COMPONENT_MODE", "all")),
            ),
            deployment=DeploymentSettings(
                PASSENGER_SERVICE_HOST=os.getenv("PASSENGER_SERVICE_HOST", data.get("PASSENGER_SERVICE_HOST", "localhost")),
                PASSENGER_SERVICE_PORT=int(os.getenv("PASSENGER_SERVICE_PORT", data.get("PASSENGER_SERVICE_PORT", 9090))),
                TRANSPORT_SERVICE_HOST=os.getenv("TRANSPORT_SERVICE_HOST", data.get("TRANSPORT_SERVICE_HOST", "localhost")),
                TRANSPORT_SERVICE_PORT=int(os.getenv("TRANSPORT_SERVICE_PORT", data.get("TRANSPORT_SERVICE_PORT", 9091))),
                TICKETING_SERVICE_HOST=os.getenv("TICKETING_SERVICE_HOST", data.get("TICKETING_SERVICE_HOST", "localhost")),
                TICKETING_SERVICE_PORT=int(os.getenv("TICKETING_SERVICE_PORT", data.get("TICKETING_SERVICE_PORT", 9092))),
                PAYMENT_SERVICE_HOST=os.getenv("PAYMENT_SERVICE_HOST", data.get("PAYMENT_SERVICE_HOST", "localhost")),
                PAYMENT_SERVICE_PORT=int(os.getenv("PAYMENT_SERVICE_PORT", data.get("PAYMENT_SERVICE_PORT", 9093))),
                NOTIFICATION_SERVICE_HOST=os.getenv("NOTIFICATION_SERVICE_HOST", data.get("NOTIFICATION_SERVICE_HOST", "localhost")),
                NOTIFICATION_SERVICE_PORT=int(os.getenv("NOTIFICATION_SERVICE_PORT", data.get("NOTIFICATION_SERVICE_PORT", 9094))),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "INFO")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            database=DatabaseSettings(
                DB_HOST=os.getenv("DB_HOST", data.get("DB_HOST", "localhost")),
                DB_PORT=int(os.getenv("DB_PORT", data.get("DB_PORT", 5432))),
                DB_NAME=os.getenv("DB_NAME", data.get("DB_NAME", "transit")),
                DB_USER=os.getenv("DB_USER", data.get("DB_USER", "postgres")),
                DB_PASSWORD=os.getenv("DB_PASSWORD", data.get("DB_PASSWORD", "")),
                DB_MIN_POOL_SIZE=data.get("DB_MIN_POOL_SIZE", 2),
                DB_MAX_POOL_SIZE=data.get("DB_MAX_POOL_SIZE", 10),
                DB_COMMAND_TIMEOUT=data.get("DB_COMMAND_TIMEOUT", 30),
                DB_RETRY_ATTEMPTS=data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", data.get("REDIS_PORT", 6379))),
                REDIS_DB=data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=data.get("REDIS_NAMESPACE", "transit"),
                REDIS_MAX_CONNECTIONS=data.get("REDIS_MAX_CONNECTIONS", 20),
            ),
            rabbitmq=RabbitMQSettings(
                RABBITMQ_HOST=os.getenv("RABBITMQ_HOST", data.get("RABBITMQ_HOST", "localhost")),
                RABBITMQ_PORT=int(os.getenv("RABBITMQ_PORT", data.get("RABBITMQ_PORT", 5672))),
                RABBITMQ_USER=os.getenv("RABBITMQ_USER", data.get("RABBITMQ_USER", "guest")),
                RABBITMQ_PASSWORD=os.getenv("RABBITMQ_PASSWORD", data.get("RABBITMQ_PASSWORD", "guest")),
                RABBITMQ_VHOST=data.get("RABBITMQ_VHOST", "/"),
                RABBITMQ_EXCHANGE=data.get("RABBITMQ_EXCHANGE", "transit.events"),
                RABBITMQ_PREFETCH_COUNT=data.get("RABBITMQ_PREFETCH_COUNT", 50),
                TOPIC_SCHEDULE_UPDATES=data.get("TOPIC_SCHEDULE_UPDATES", "schedule-updates"),
                TOPIC_TICKET_VALIDATED=data.get("TOPIC_TICKET_VALIDATED", "ticket-validated"),
                TOPIC_TICKET_CREATED=data.get("TOPIC_TICKET_CREATED", "ticket-created"),
                NOTIFICATION_CONSUMER_GROUP=os.getenv(
                    "NOTIFICATION_CONSUMER_GROUP",
                    data.get("NOTIFICATION_CONSUMER_GROUP", "notification-service-group"),
                ),
                MAX_POLL_RECORDS=data.get("MAX_POLL_RECORDS", 100),
            ),
            ticketing=TicketingSettings(
                TICKET_VALIDITY_HOURS=int(os.getenv("TICKET_VALIDITY_HOURS", data.get("TICKET_VALIDITY_HOURS", 24))),
                EXPIRY_SWEEP_INTERVAL=data.get("EXPIRY_SWEEP_INTERVAL", 300),
                HTTP_CLIENT_TIMEOUT=data.get("HTTP_CLIENT_TIMEOUT", 5.0),
            ),
            payments=PaymentSettings(
                PAYMENT_SUCCESS_RATE=float(os.getenv("PAYMENT_SUCCESS_RATE", data.get("PAYMENT_SUCCESS_RATE", 0.95))),
                PAYMENT_PROCESSING_DELAY=float(os.getenv("PAYMENT_PROCESSING_DELAY", data.get("PAYMENT_PROCESSING_DELAY", 2.0))),
                PAYMENT_CURRENCY=data.get("PAYMENT_CURRENCY", "USD"),
                PAYMENT_CACHE_TTL=data.get("PAYMENT_CACHE_TTL", 3600),
            ),
            notifications=NotificationSettings(
                NOTIFICATION_CONSOLE_ENABLED=data.get("NOTIFICATION_CONSOLE_ENABLED", True),
                NOTIFICATION_STORE_ENABLED=data.get("NOTIFICATION_STORE_ENABLED", True),
                NOTIFICATION_DEFAULT_CHANNEL=data.get("NOTIFICATION_DEFAULT_CHANNEL", "EMAIL"),
                NOTIFICATION_POLL_INTERVAL=data.get("NOTIFICATION_POLL_INTERVAL", 1.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()

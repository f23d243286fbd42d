# src/notifications/app.py
"""
FastAPI приложение сервиса уведомлений.

Вместе с приложением стартует NotificationConsumer, читающий
schedule-updates, ticket-validated и ticket-created.

Endpoints:
- GET /notifications - список (passengerId)
- GET /notifications/{id} - уведомление
- GET /health
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query

from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg
from src.config import settings
from src.infra.database import close_db, get_db, init_db
from src.infra.document_store import Collection
from src.infra.event_bus import close_event_bus, get_event_bus, init_event_bus
from src.notifications.consumer import NotificationConsumer
from src.notifications.delivery import NotificationSender
from src.notifications.repository import NotificationRepository
from src.shared.errors import ErrorCode, NotFoundError, register_exception_handlers, success_response
from src.shared.models.common import HealthStatus
from src.shared.models.enums import NotificationChannel, parse_enum

# Глобальные объекты процесса
_repository: NotificationRepository | None = None
_consumer: NotificationConsumer | None = None


def get_notification_repository() -> NotificationRepository:
    if _repository is None:
        raise RuntimeError("Репозиторий уведомлений не инициализирован")
    return _repository


def build_consumer(repository: NotificationRepository) -> NotificationConsumer:
    cfg = settings.notifications
    sender = NotificationSender(
        repository,
        console_enabled=cfg.NOTIFICATION_CONSOLE_ENABLED,
        store_enabled=cfg.NOTIFICATION_STORE_ENABLED,
    )
    return NotificationConsumer(
        event_bus=get_event_bus(),
        sender=sender,
        group=settings.rabbitmq.NOTIFICATION_CONSUMER_GROUP,
        topics=settings.rabbitmq.notification_topics,
        channel=parse_enum(NotificationChannel, cfg.NOTIFICATION_DEFAULT_CHANNEL),
        max_records=settings.rabbitmq.MAX_POLL_RECORDS,
        interval=cfg.NOTIFICATION_POLL_INTERVAL,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _repository, _consumer

    setup_logging()
    await init_db()
    await init_event_bus()

    _repository = NotificationRepository(Collection("notifications", get_db()))
    _consumer = build_consumer(_repository)
    await _consumer.start()
    await log_info("Notifications сервис запущен", type_msg=TypeMsg.INFO)

    yield

    await _consumer.stop()
    _consumer = None
    _repository = None
    await close_event_bus()
    await close_db()


# =============================================================================
# ПРИЛОЖЕНИЕ
# =============================================================================

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    passenger_id: str | None = Query(default=None, alias="passengerId"),
    limit: int = Query(default=100, ge=1, le=1000),
    repository: NotificationRepository = Depends(get_notification_repository),
):
    notifications = await repository.list(passenger_id, limit=limit)
    return success_response([n.to_document() for n in notifications])


@router.get("/{notification_id}")
async def get_notification(
    notification_id: str,
    repository: NotificationRepository = Depends(get_notification_repository),
):
    notification = await repository.get_by_id(notification_id)
    if notification is None:
        raise NotFoundError(ErrorCode.NOTIFICATION_NOT_FOUND, f"Уведомление {notification_id} не найдено")
    return success_response(notification.to_document())


app = FastAPI(
    title="Notification Service",
    description="Уведомления о событиях расписания и билетах (HTTP API + потребитель RabbitMQ)",
    version=settings.system.VERSION,
    lifespan=lifespan,
)
register_exception_handlers(app)
app.include_router(router)


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    db_ok = await get_db().health_check() if get_db().is_connected else False
    bus_ok = await get_event_bus().health_check()
    consumer_ok = _consumer is not None and _consumer.is_running
    return HealthStatus(
        service="notifications",
        status="healthy" if db_ok and bus_ok and consumer_ok else "degraded",
        version=settings.system.VERSION,
        dependencies={
            "postgres": "healthy" if db_ok else "unhealthy",
            "rabbitmq": "healthy" if bus_ok else "unhealthy",
            "consumer": "running" if consumer_ok else "stopped",
        },
    )

# src/services/transport_service/app.py
"""
FastAPI приложение Transport Service.

Endpoints:
- POST/GET /transport/routes - маршруты
- POST/GET /transport/trips - рейсы
- PATCH /transport/trips/{id} - обновление рейса (публикует событие расписания)
- PUT /transport/trips/{id}/status - смена статуса
- POST /transport/trips/{id}/reserve-seat, /release-seat - места
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import setup_logging
from src.config import settings
from src.infra.database import close_db, get_db, init_db
from src.infra.event_bus import close_event_bus, get_event_bus, init_event_bus
from src.services.transport_service.dependencies import cleanup_dependencies, init_dependencies
from src.services.transport_service.routes import router
from src.shared.errors import register_exception_handlers
from src.shared.models.common import HealthStatus


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    await init_event_bus()
    await init_dependencies(get_db(), get_event_bus())
    yield
    await cleanup_dependencies()
    await close_event_bus()
    await close_db()


app = FastAPI(
    title="Transport Service",
    version=settings.system.VERSION,
    lifespan=lifespan,
)
register_exception_handlers(app)
app.include_router(router)


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    db_ok = await get_db().health_check() if get_db().is_connected else False
    bus_ok = await get_event_bus().health_check()
    return HealthStatus(
        service="transport_service",
        status="healthy" if db_ok and bus_ok else "degraded",
        version=settings.system.VERSION,
        dependencies={
            "postgres": "healthy" if db_ok else "unhealthy",
            "rabbitmq": "healthy" if bus_ok else "unhealthy",
        },
    )

# src/services/passenger_service/app.py
"""
FastAPI приложение Passenger Service.

Endpoints:
- POST /passengers/register - регистрация
- GET /passengers - список
- GET /passengers/{id} - пассажир
- PUT /passengers/{id}/status - смена статуса
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import setup_logging
from src.config import settings
from src.infra.database import close_db, get_db, init_db
from src.services.passenger_service.dependencies import cleanup_dependencies, init_dependencies
from src.services.passenger_service.routes import router
from src.shared.errors import register_exception_handlers
from src.shared.models.common import HealthStatus


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    await init_dependencies(get_db())
    yield
    await cleanup_dependencies()
    await close_db()


app = FastAPI(
    title="Passenger Service",
    version=settings.system.VERSION,
    lifespan=lifespan,
)
register_exception_handlers(app)
app.include_router(router)


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    db_ok = await get_db().health_check() if get_db().is_connected else False
    return HealthStatus(
        service="passenger_service",
        status="healthy" if db_ok else "degraded",
        version=settings.system.VERSION,
        dependencies={"postgres": "healthy" if db_ok else "unhealthy"},
    )

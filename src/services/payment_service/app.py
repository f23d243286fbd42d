# src/services/payment_service/app.py
"""
FastAPI приложение Payment Service (симулятор шлюза).

Endpoints:
- POST /payment/payments - провести платёж
- GET /payment/payments - список (passengerId, ticketId)
- GET /payment/payments/{id} - платёж (через кэш Redis)
- POST /payment/payments/{id}/refund - возврат
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.logger import setup_logging
from src.config import settings
from src.infra.database import close_db, get_db, init_db
from src.infra.redis_client import close_redis, get_redis, init_redis
from src.services.payment_service.dependencies import cleanup_dependencies, init_dependencies
from src.services.payment_service.routes import router
from src.shared.errors import register_exception_handlers
from src.shared.models.common import HealthStatus


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    await init_redis()
    await init_dependencies(get_db(), get_redis())
    yield
    await cleanup_dependencies()
    await close_redis()
    await close_db()


app = FastAPI(
    title="Payment Service",
    version=settings.system.VERSION,
    lifespan=lifespan,
)
register_exception_handlers(app)
app.include_router(router)


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    db_ok = await get_db().health_check() if get_db().is_connected else False
    redis_ok = await get_redis().health_check() if get_redis().is_connected else False
    return HealthStatus(
        service="payment_service",
        status="healthy" if db_ok else "degraded",
        version=settings.system.VERSION,
        dependencies={
            "postgres": "healthy" if db_ok else "unhealthy",
            "redis": "healthy" if redis_ok else "unhealthy",
        },
    )

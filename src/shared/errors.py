# src/shared/errors.py
"""
Иерархия доменных ошибок и их отображение в HTTP-ответы.

Сервисы выбрасывают DomainError и наследников; FastAPI-обработчики
превращают их в конверт {"success": false, "error": {...}}.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.logger import log_error, log_warning


class ErrorCode(str, Enum):
    """Машиночитаемые коды ошибок."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PASSENGER_NOT_FOUND = "PASSENGER_NOT_FOUND"
    DUPLICATE_PASSENGER = "DUPLICATE_PASSENGER"
    INACTIVE_PASSENGER = "INACTIVE_PASSENGER"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    TRIP_NOT_FOUND = "TRIP_NOT_FOUND"
    NO_SEATS = "NO_SEATS"
    INVALID_TRIP_STATUS = "INVALID_TRIP_STATUS"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    INVALID_TICKET_STATUS = "INVALID_TICKET_STATUS"
    TICKET_EXPIRED = "TICKET_EXPIRED"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    INVALID_PAYMENT_STATUS = "INVALID_PAYMENT_STATUS"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    def __str__(self) -> str:
        return self.value


class DomainError(Exception):
    """Нарушение бизнес-правила или некорректный ввод (400)."""

    status_code: int = 400

    def __init__(self, code: ErrorCode, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"errorCode": self.code.value, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}, {self.message!r})"


class NotFoundError(DomainError):
    """Сущность не найдена (404)."""

    status_code = 404


class InfrastructureError(DomainError):
    """Хранилище, шина или соседний сервис недоступны (500)."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int | None = None,
    ) -> None:
        super().__init__(code, message, status_code)


# =============================================================================
# КОНВЕРТ ОТВЕТА
# =============================================================================

def success_response(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Формирует успешный ответ {"success": true, "data": ..., "message"?}."""
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def error_body(code: ErrorCode | str, message: str) -> dict[str, Any]:
    return {"success": False, "error": {"errorCode": str(code), "message": message}}


# =============================================================================
# ОБРАБОТЧИКИ ИСКЛЮЧЕНИЙ FASTAPI
# =============================================================================

async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        await log_error(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
    else:
        await log_warning(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorCode.VALIDATION_ERROR, details or "Некорректный запрос"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(f"Необработанная ошибка {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body(ErrorCode.INTERNAL_ERROR, "Внутренняя ошибка сервера"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Регистрирует обработчики доменных, валидационных и прочих ошибок."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

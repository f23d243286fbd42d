# src/services/ticketing_service/clients.py
"""
HTTP-клиенты соседних сервисов (Passenger, Transport).

Ответы приходят в конверте {"success": ..., "data": ...}.
404 означает «сущность отсутствует», любая другая ошибка — недоступность
соседнего сервиса (UPSTREAM_UNAVAILABLE). Исключение — резервирование
места: отказ Transport Service (400) передаётся вызывающему со своим кодом.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.common.logger import log_error, log_warning
from src.shared.errors import DomainError, ErrorCode, InfrastructureError, NotFoundError
from src.shared.models.enums import InvalidEnumValue, parse_enum
from src.shared.models.passenger import Passenger
from src.shared.models.transport import Trip


class BaseClient:
    def __init__(self, base_url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None):
        self.base_url = base_url
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            await log_error(f"{method} {self.base_url}{path} не выполнен: {e}")
            raise InfrastructureError(
                f"Сервис {self.base_url} недоступен",
                code=ErrorCode.UPSTREAM_UNAVAILABLE,
            ) from e

    async def _get_data(self, path: str) -> Any | None:
        """GET и распаковка data; None при 404."""
        response = await self._request("GET", path)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        try:
            return response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            await log_error(f"GET {self.base_url}{path}: ответ без конверта ({e!r})")
            raise InfrastructureError(
                f"Сервис {self.base_url} вернул некорректный ответ",
                code=ErrorCode.UPSTREAM_UNAVAILABLE,
            ) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        raise InfrastructureError(
            f"{response.request.method} {response.request.url} -> {response.status_code}",
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
        )


def rejection_of(response: httpx.Response, default: ErrorCode) -> tuple[ErrorCode, str]:
    """
    Код и текст отказа из тела ответа.

    Понимает конверт {"error": {"errorCode", "message"}} и плоский
    {"errorCode", "message"}; неизвестный код или не-JSON дают default.
    """
    try:
        body = response.json()
    except ValueError:
        return default, response.text or str(response.status_code)
    if not isinstance(body, dict):
        return default, str(body)

    error = body.get("error")
    details = error if isinstance(error, dict) else body
    message = str(details.get("message") or response.status_code)
    try:
        return parse_enum(ErrorCode, details.get("errorCode")), message
    except InvalidEnumValue:
        return default, message


class PassengerClient(BaseClient):
    async def get_passenger(self, passenger_id: str) -> Passenger | None:
        data = await self._get_data(f"/passengers/{passenger_id}")
        return Passenger.model_validate(data) if data is not None else None


class TransportClient(BaseClient):
    async def get_trip(self, trip_id: str) -> Trip | None:
        data = await self._get_data(f"/transport/trips/{trip_id}")
        return Trip.model_validate(data) if data is not None else None

    async def reserve_seat(self, trip_id: str) -> None:
        """
        Атомарно занимает место на рейсе.

        Raises:
            NotFoundError: TRIP_NOT_FOUND
            DomainError: код отказа Transport Service (NO_SEATS, INVALID_TRIP_STATUS, ...)
            InfrastructureError: сервис недоступен
        """
        response = await self._request("POST", f"/transport/trips/{trip_id}/reserve-seat")
        if response.status_code == 404:
            raise NotFoundError(ErrorCode.TRIP_NOT_FOUND, f"Рейс {trip_id} не найден")
        if response.status_code == 400:
            code, message = rejection_of(response, default=ErrorCode.NO_SEATS)
            await log_warning(f"Место на рейсе {trip_id} не зарезервировано: {code} {message}")
            raise DomainError(code, message)
        self._raise_for_status(response)

    async def release_seat(self, trip_id: str) -> bool:
        response = await self._request("POST", f"/transport/trips/{trip_id}/release-seat")
        if response.status_code in (400, 404):
            return False
        self._raise_for_status(response)
        return True

# src/services/passenger_service/service.py
"""
Сервис пассажиров.

Регистрация, просмотр и смена статуса. Учётные данные здесь
не хранятся: аутентификация делегирована внешнему провайдеру.
"""

from __future__ import annotations

from src.common.logger import log_info
from src.infra.document_store import DuplicateKeyError
from src.services.passenger_service.repository import PassengerRepository
from src.shared.errors import DomainError, ErrorCode, NotFoundError
from src.shared.models.enums import PassengerStatus
from src.shared.models.passenger import Passenger, PassengerRegisterRequest


class PassengerService:
    def __init__(self, repository: PassengerRepository) -> None:
        self.repository = repository

    async def register(self, request: PassengerRegisterRequest) -> Passenger:
        """
        Регистрирует пассажира.

        Raises:
            DomainError(DUPLICATE_PASSENGER): username или email уже заняты
        """
        if await self.repository.find_by_username(request.username):
            raise DomainError(ErrorCode.DUPLICATE_PASSENGER, f"Имя пользователя {request.username} уже занято")
        if await self.repository.find_by_email(request.email):
            raise DomainError(ErrorCode.DUPLICATE_PASSENGER, f"Email {request.email} уже зарегистрирован")

        passenger = Passenger(**request.model_dump())
        try:
            await self.repository.create(passenger)
        except DuplicateKeyError as e:
            # Параллельная регистрация с тем же username/email
            raise DomainError(ErrorCode.DUPLICATE_PASSENGER, "Пассажир с такими данными уже существует") from e

        await log_info(f"Зарегистрирован пассажир {passenger.passenger_id} ({passenger.username})")
        return passenger

    async def get_passenger(self, passenger_id: str) -> Passenger:
        passenger = await self.repository.get_by_id(passenger_id)
        if passenger is None:
            raise NotFoundError(ErrorCode.PASSENGER_NOT_FOUND, f"Пассажир {passenger_id} не найден")
        return passenger

    async def list_passengers(self, status: PassengerStatus | None = None) -> list[Passenger]:
        return await self.repository.list(status)

    async def update_status(self, passenger_id: str, status: PassengerStatus) -> Passenger:
        passenger = await self.repository.update_status(passenger_id, status)
        if passenger is None:
            raise NotFoundError(ErrorCode.PASSENGER_NOT_FOUND, f"Пассажир {passenger_id} не найден")
        await log_info(f"Статус пассажира {passenger_id} изменён на {status}")
        return passenger

# src/services/passenger_service/routes.py
from fastapi import APIRouter, Depends, Query

from src.services.passenger_service.dependencies import get_passenger_service
from src.services.passenger_service.service import PassengerService
from src.shared.errors import success_response
from src.shared.models.enums import PassengerStatus
from src.shared.models.passenger import PassengerRegisterRequest, PassengerStatusUpdate

router = APIRouter(prefix="/passengers", tags=["Passengers"])


@router.post("/register", status_code=201)
async def register_passenger(
    request: PassengerRegisterRequest,
    service: PassengerService = Depends(get_passenger_service),
):
    passenger = await service.register(request)
    return success_response(passenger.to_document(), "Passenger registered successfully")


@router.get("")
async def list_passengers(
    status: PassengerStatus | None = Query(default=None),
    service: PassengerService = Depends(get_passenger_service),
):
    passengers = await service.list_passengers(status)
    return success_response([p.to_document() for p in passengers])


@router.get("/{passenger_id}")
async def get_passenger(
    passenger_id: str,
    service: PassengerService = Depends(get_passenger_service),
):
    passenger = await service.get_passenger(passenger_id)
    return success_response(passenger.to_document())


@router.put("/{passenger_id}/status")
async def update_passenger_status(
    passenger_id: str,
    request: PassengerStatusUpdate,
    service: PassengerService = Depends(get_passenger_service),
):
    passenger = await service.update_status(passenger_id, request.status)
    return success_response(passenger.to_document(), "Passenger status updated")

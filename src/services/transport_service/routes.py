# src/services/transport_service/routes.py
from fastapi import APIRouter, Depends, Query

from src.services.transport_service.dependencies import get_transport_service
from src.services.transport_service.service import TransportService
from src.shared.errors import success_response
from src.shared.models.enums import RouteStatus, TripStatus
from src.shared.models.transport import (
    RouteCreateRequest,
    TripCreateRequest,
    TripStatusUpdate,
    TripUpdateRequest,
)

router = APIRouter(prefix="/transport", tags=["Transport"])


# =============================================================================
# ROUTES
# =============================================================================

@router.post("/routes", status_code=201)
async def create_route(
    request: RouteCreateRequest,
    service: TransportService = Depends(get_transport_service),
):
    route = await service.create_route(request)
    return success_response(route.to_document(), "Route created successfully")


@router.get("/routes")
async def list_routes(
    status: RouteStatus | None = Query(default=None),
    service: TransportService = Depends(get_transport_service),
):
    routes = await service.list_routes(status)
    return success_response([r.to_document() for r in routes])


@router.get("/routes/{route_id}")
async def get_route(
    route_id: str,
    service: TransportService = Depends(get_transport_service),
):
    route = await service.get_route(route_id)
    return success_response(route.to_document())


# =============================================================================
# TRIPS
# =============================================================================

@router.post("/trips", status_code=201)
async def create_trip(
    request: TripCreateRequest,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.create_trip(request)
    return success_response(trip.to_document(), "Trip created successfully")


@router.get("/trips")
async def list_trips(
    route_id: str | None = Query(default=None, alias="routeId"),
    status: TripStatus | None = Query(default=None),
    service: TransportService = Depends(get_transport_service),
):
    trips = await service.list_trips(route_id, status)
    return success_response([t.to_document() for t in trips])


@router.get("/trips/{trip_id}")
async def get_trip(
    trip_id: str,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.get_trip(trip_id)
    return success_response(trip.to_document())


@router.patch("/trips/{trip_id}")
async def update_trip(
    trip_id: str,
    request: TripUpdateRequest,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.update_trip(trip_id, request)
    return success_response(trip.to_document(), "Trip updated successfully")


@router.put("/trips/{trip_id}/status")
async def update_trip_status(
    trip_id: str,
    request: TripStatusUpdate,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.update_trip_status(trip_id, request)
    return success_response(trip.to_document(), "Trip status updated")


@router.post("/trips/{trip_id}/reserve-seat")
async def reserve_seat(
    trip_id: str,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.reserve_seat(trip_id)
    return success_response(trip.to_document(), "Seat reserved")


@router.post("/trips/{trip_id}/release-seat")
async def release_seat(
    trip_id: str,
    service: TransportService = Depends(get_transport_service),
):
    trip = await service.release_seat(trip_id)
    return success_response(trip.to_document(), "Seat released")

# tests/services/test_service_routes.py
"""
Тесты HTTP API сервисов через TestClient.

Приложения собираются из роутеров без lifespan: зависимости
подменяются сервисами поверх in-memory коллекций.
"""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.notifications.app import get_notification_repository
from src.notifications.app import router as notifications_router
from src.notifications.repository import NotificationRepository
from src.services.passenger_service.dependencies import get_passenger_service
from src.services.passenger_service.repository import PassengerRepository
from src.services.passenger_service.routes import router as passenger_router
from src.services.passenger_service.service import PassengerService
from src.services.payment_service.dependencies import get_payment_service
from src.services.payment_service.repository import PaymentRepository
from src.services.payment_service.routes import router as payment_router
from src.services.payment_service.service import PaymentService
from src.services.ticketing_service.dependencies import get_ticketing_service
from src.services.ticketing_service.publisher import TicketEventPublisher
from src.services.ticketing_service.repository import TicketRepository
from src.services.ticketing_service.routes import router as ticketing_router
from src.services.ticketing_service.service import TicketingService
from src.services.transport_service.dependencies import get_transport_service
from src.services.transport_service.publisher import ScheduleEventPublisher
from src.services.transport_service.repository import RouteRepository, TripRepository
from src.services.transport_service.routes import router as transport_router
from src.services.transport_service.service import TransportService
from src.shared.errors import DomainError, ErrorCode, register_exception_handlers
from src.shared.models.enums import NotificationType
from src.shared.models.notification import Notification
from tests.fakes import FakeCollection


def build_app(router, dependency, override) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[dependency] = override
    return TestClient(app)


class TestPassengerRoutes:
    @pytest.fixture
    def client(self) -> TestClient:
        service = PassengerService(PassengerRepository(FakeCollection("passengers")))
        return build_app(passenger_router, get_passenger_service, lambda: service)

    def test_register_and_get(self, client: TestClient) -> None:
        response = client.post(
            "/passengers/register",
            json={"username": "jdoe", "email": "jdoe@example.com", "firstName": "John", "lastName": "Doe"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        passenger_id = body["data"]["passengerId"]

        response = client.get(f"/passengers/{passenger_id}")
        assert response.json()["data"]["status"] == "ACTIVE"

    def test_validation_error(self, client: TestClient) -> None:
        response = client.post("/passengers/register", json={"username": "x"})
        assert response.status_code == 400
        assert response.json()["error"]["errorCode"] == "VALIDATION_ERROR"

    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/passengers/missing")
        assert response.status_code == 404
        assert response.json()["error"]["errorCode"] == "PASSENGER_NOT_FOUND"

    def test_invalid_status_value(self, client: TestClient) -> None:
        response = client.put("/passengers/p-1/status", json={"status": "active"})
        assert response.status_code == 400


class TestTransportRoutes:
    @pytest.fixture
    def client(self, mock_event_bus: AsyncMock) -> TestClient:
        service = TransportService(
            RouteRepository(FakeCollection("routes")),
            TripRepository(FakeCollection("trips")),
            ScheduleEventPublisher(mock_event_bus),
        )
        return build_app(transport_router, get_transport_service, lambda: service)

    def create_trip(self, client: TestClient, seats: int = 2) -> str:
        route = client.post(
            "/transport/routes",
            json={
                "routeNumber": "42A",
                "routeName": "Central - Airport",
                "startLocation": "Central",
                "endLocation": "Airport",
                "distance": 18.5,
                "estimatedDuration": 40,
                "fare": 3.5,
            },
        ).json()["data"]
        trip = client.post(
            "/transport/trips",
            json={
                "routeId": route["routeId"],
                "vehicleId": "BUS-7",
                "driverName": "Anna",
                "departureTime": "2026-03-01T13:00:00Z",
                "arrivalTime": "2026-03-01T14:00:00Z",
                "totalSeats": seats,
            },
        )
        assert trip.status_code == 201
        return trip.json()["data"]["tripId"]

    def test_status_flow(self, client: TestClient, mock_event_bus: AsyncMock) -> None:
        trip_id = self.create_trip(client)
        response = client.put(f"/transport/trips/{trip_id}/status", json={"status": "DELAYED", "delayMinutes": 40})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "DELAYED"
        assert mock_event_bus.publish.await_count == 1

        response = client.put(f"/transport/trips/{trip_id}/status", json={"status": "SCHEDULED"})
        assert response.status_code == 400
        assert response.json()["error"]["errorCode"] == "INVALID_STATUS_TRANSITION"

    def test_seats(self, client: TestClient) -> None:
        trip_id = self.create_trip(client, seats=1)
        assert client.post(f"/transport/trips/{trip_id}/reserve-seat").json()["data"]["availableSeats"] == 0
        response = client.post(f"/transport/trips/{trip_id}/reserve-seat")
        assert response.status_code == 400
        assert response.json()["error"]["errorCode"] == "NO_SEATS"

    def test_list_by_route(self, client: TestClient) -> None:
        trip_id = self.create_trip(client)
        route_id = client.get(f"/transport/trips/{trip_id}").json()["data"]["routeId"]
        trips = client.get("/transport/trips", params={"routeId": route_id}).json()["data"]
        assert [t["tripId"] for t in trips] == [trip_id]


class TestTicketingRoutes:
    @pytest.fixture
    def service(self, sample_passenger, sample_trip, mock_event_bus: AsyncMock) -> TicketingService:
        passenger_client = MagicMock()
        passenger_client.get_passenger = AsyncMock(return_value=sample_passenger)
        transport_client = MagicMock()
        transport_client.get_trip = AsyncMock(return_value=sample_trip)
        transport_client.reserve_seat = AsyncMock(return_value=None)
        return TicketingService(
            TicketRepository(FakeCollection("tickets")),
            passenger_client,
            transport_client,
            TicketEventPublisher(mock_event_bus),
        )

    @pytest.fixture
    def client(self, service: TicketingService) -> TestClient:
        return build_app(ticketing_router, get_ticketing_service, lambda: service)

    def test_lifecycle(self, client: TestClient) -> None:
        response = client.post("/ticketing/tickets", json={"passengerId": "passenger-1", "tripId": "trip-1"})
        assert response.status_code == 201
        ticket_id = response.json()["data"]["ticketId"]

        response = client.post(f"/ticketing/tickets/{ticket_id}/confirm-payment", json={"paymentId": "pay-1"})
        assert response.json()["data"]["status"] == "PAID"

        response = client.put(f"/ticketing/tickets/{ticket_id}/validate", json={"validatedBy": "inspector-7"})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "VALIDATED"

        response = client.put(f"/ticketing/tickets/{ticket_id}/validate", json={"validatedBy": "inspector-7"})
        assert response.status_code == 400
        assert response.json()["error"]["errorCode"] == "INVALID_TICKET_STATUS"

    def test_list_by_passenger(self, client: TestClient) -> None:
        client.post("/ticketing/tickets", json={"passengerId": "passenger-1", "tripId": "trip-1"})
        tickets = client.get("/ticketing/tickets", params={"passengerId": "passenger-1"}).json()["data"]
        assert len(tickets) == 1

    def test_expire_sweep(self, client: TestClient) -> None:
        response = client.post("/ticketing/tickets/expire")
        assert response.status_code == 200
        assert response.json()["data"]["expiredCount"] == 0
        assert response.json()["message"] == "0 tickets expired"

    def test_reservation_rejection_code_in_envelope(self, client: TestClient, service: TicketingService) -> None:
        service.transport_client.reserve_seat.side_effect = DomainError(
            ErrorCode.INVALID_TRIP_STATUS, "Рейс в статусе DELAYED"
        )
        response = client.post("/ticketing/tickets", json={"passengerId": "passenger-1", "tripId": "trip-1"})
        assert response.status_code == 400
        assert response.json()["error"]["errorCode"] == "INVALID_TRIP_STATUS"

    def test_unknown_ticket(self, client: TestClient) -> None:
        response = client.get("/ticketing/tickets/missing")
        assert response.status_code == 404
        assert response.json()["error"]["errorCode"] == "TICKET_NOT_FOUND"


class TestPaymentRoutes:
    @pytest.fixture
    def client(self) -> TestClient:
        service = PaymentService(
            PaymentRepository(FakeCollection("payments")),
            success_rate=1.0,
            sleep=AsyncMock(),
            rng=random.Random(1),
        )
        return build_app(payment_router, get_payment_service, lambda: service)

    def test_pay_and_refund(self, client: TestClient) -> None:
        response = client.post(
            "/payment/payments",
            json={"ticketId": "ticket-1", "passengerId": "passenger-1", "amount": 3.5, "paymentMethod": "CREDIT_CARD"},
        )
        assert response.status_code == 201
        payment = response.json()["data"]
        assert payment["status"] == "SUCCESS"
        assert response.json()["message"] == "Payment success"

        response = client.post(f"/payment/payments/{payment['paymentId']}/refund")
        assert response.json()["data"]["status"] == "REFUNDED"

        by_ticket = client.get("/payment/payments", params={"ticketId": "ticket-1"}).json()["data"]
        assert [p["paymentId"] for p in by_ticket] == [payment["paymentId"]]

    def test_negative_amount(self, client: TestClient) -> None:
        response = client.post(
            "/payment/payments",
            json={"ticketId": "ticket-1", "passengerId": "passenger-1", "amount": -1},
        )
        assert response.status_code == 400


class TestNotificationRoutes:
    @pytest.fixture
    def repository(self) -> NotificationRepository:
        return NotificationRepository(FakeCollection("notifications"))

    @pytest.fixture
    def client(self, repository: NotificationRepository) -> TestClient:
        return build_app(notifications_router, get_notification_repository, lambda: repository)

    def test_list_and_get(self, client: TestClient, repository: NotificationRepository) -> None:
        notification = Notification(
            passenger_id="passenger-1",
            notification_type=NotificationType.TICKET_PURCHASED,
            subject="Ticket purchased",
            message="...",
        )
        repository.collection.docs[notification.notification_id] = notification.to_document()

        listed = client.get("/notifications", params={"passengerId": "passenger-1"}).json()["data"]
        assert [n["notificationId"] for n in listed] == [notification.notification_id]
        response = client.get(f"/notifications/{notification.notification_id}")
        assert response.json()["data"]["notificationType"] == "TICKET_PURCHASED"

    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/notifications/missing")
        assert response.status_code == 404
        assert response.json()["error"]["errorCode"] == "NOTIFICATION_NOT_FOUND"

    def test_limit_bounds(self, client: TestClient) -> None:
        assert client.get("/notifications", params={"limit": 0}).status_code == 400

# src/services/ticketing_service/routes.py
from fastapi import APIRouter, Depends, Query

from src.services.ticketing_service.dependencies import get_ticketing_service
from src.services.ticketing_service.service import TicketingService
from src.shared.errors import success_response
from src.shared.models.common import utc_now
from src.shared.models.enums import TicketStatus
from src.shared.models.ticket import (
    ConfirmPaymentRequest,
    ExpirySweepResult,
    TicketPurchaseRequest,
    ValidateTicketRequest,
)

router = APIRouter(prefix="/ticketing/tickets", tags=["Tickets"])


@router.post("", status_code=201)
async def purchase_ticket(
    request: TicketPurchaseRequest,
    service: TicketingService = Depends(get_ticketing_service),
):
    ticket = await service.purchase(request)
    return success_response(ticket.to_document(), "Ticket purchased successfully")


@router.get("")
async def list_tickets(
    passenger_id: str | None = Query(default=None, alias="passengerId"),
    status: TicketStatus | None = Query(default=None),
    service: TicketingService = Depends(get_ticketing_service),
):
    tickets = await service.list_tickets(passenger_id, status)
    return success_response([t.to_document() for t in tickets])


@router.post("/expire")
async def expire_tickets(service: TicketingService = Depends(get_ticketing_service)):
    swept_at = utc_now()
    count = await service.expire_stale_tickets(swept_at)
    result = ExpirySweepResult(expired_count=count, swept_at=swept_at)
    return success_response(result.to_document(), f"{count} tickets expired")


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    service: TicketingService = Depends(get_ticketing_service),
):
    ticket = await service.get_ticket(ticket_id)
    return success_response(ticket.to_document())


@router.post("/{ticket_id}/confirm-payment")
async def confirm_payment(
    ticket_id: str,
    request: ConfirmPaymentRequest,
    service: TicketingService = Depends(get_ticketing_service),
):
    ticket = await service.confirm_payment(ticket_id, request.payment_id)
    return success_response(ticket.to_document(), "Payment confirmed")


@router.put("/{ticket_id}/validate")
async def validate_ticket(
    ticket_id: str,
    request: ValidateTicketRequest,
    service: TicketingService = Depends(get_ticketing_service),
):
    ticket = await service.validate(ticket_id, request)
    return success_response(ticket.to_document(), "Ticket validated")

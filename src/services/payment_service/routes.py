# src/services/payment_service/routes.py
from fastapi import APIRouter, Depends, Query

from src.services.payment_service.dependencies import get_payment_service
from src.services.payment_service.service import PaymentService
from src.shared.errors import success_response
from src.shared.models.payment import PaymentRequest

router = APIRouter(prefix="/payment/payments", tags=["Payments"])


@router.post("", status_code=201)
async def process_payment(
    request: PaymentRequest,
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.process_payment(request)
    return success_response(payment.to_document(), f"Payment {payment.status.value.lower()}")


@router.get("")
async def list_payments(
    passenger_id: str | None = Query(default=None, alias="passengerId"),
    ticket_id: str | None = Query(default=None, alias="ticketId"),
    service: PaymentService = Depends(get_payment_service),
):
    payments = await service.list_payments(passenger_id, ticket_id)
    return success_response([p.to_document() for p in payments])


@router.get("/{payment_id}")
async def get_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.get_payment(payment_id)
    return success_response(payment.to_document())


@router.post("/{payment_id}/refund")
async def refund_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.refund(payment_id)
    return success_response(payment.to_document(), "Payment refunded")

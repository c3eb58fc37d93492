"""FastAPI endpoints for the Vouchers domain: gateway webhook, orders, vouchers."""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from vouchers.api.schemas import (
    CreateOrderRequest,
    DeliveryAttemptResponse,
    ExtendVoucherRequest,
    IssuanceResponse,
    OrderReferenceResponse,
    OrderResponse,
    ResendResponse,
    StatusResponse,
    VoucherResponse,
)
from vouchers.channel.rate_limit import get_rate_limiter
from vouchers.delivery.dispatch import DeliveryRequest, get_dispatcher
from vouchers.order.checkout import PlacePendingOrder
from vouchers.order.order import Order
from vouchers.voucher.issuance import VoucherIssuer
from vouchers.voucher.management import ExtendVoucher, RedeemVoucher, VoidVoucher
from vouchers.voucher.voucher import Voucher
from vouchers.webhook.processor import NotificationProcessor

# ---------------------------------------------------------------------------
# Payment gateway webhook
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/notification")
async def payment_notification(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    """Receive an asynchronous payment notification from the gateway."""
    raw_body = await request.body()
    processor = NotificationProcessor(schedule=background_tasks.add_task)
    result = processor.process(raw_body)
    return JSONResponse(status_code=result.status_code, content=result.body())


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _get_order(external_reference: str) -> Order:
    order = current_domain.repository_for(Order).find_by_external_reference(external_reference)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {external_reference} not found")
    return order


@order_router.post("", status_code=201, response_model=OrderReferenceResponse)
async def create_order(body: CreateOrderRequest) -> OrderReferenceResponse:
    """Create a PENDING order before handing the customer to the gateway."""
    command = PlacePendingOrder(**body.model_dump())
    external_reference = current_domain.process(command, asynchronous=False)
    return OrderReferenceResponse(external_reference=external_reference)


@order_router.get("/{external_reference}", response_model=OrderResponse)
async def get_order(external_reference: str) -> OrderResponse:
    order = _get_order(external_reference)
    return OrderResponse(
        order_id=str(order.id),
        external_reference=order.external_reference,
        payment_status=order.payment_status,
        total_amount=order.total_amount,
        voucher_id=str(order.voucher_id) if order.voucher_id else None,
        transaction_id=order.transaction_id,
        payment_type=order.payment_type,
        transaction_time=order.transaction_time,
    )


@order_router.post("/{external_reference}/voucher", response_model=IssuanceResponse)
async def issue_voucher(external_reference: str, background_tasks: BackgroundTasks) -> IssuanceResponse:
    """Issue the voucher for a paid order that is missing one."""
    order = _get_order(external_reference)
    result = VoucherIssuer().issue(order)
    if not result.success:
        raise HTTPException(status_code=409, detail=result.message)

    if not result.already_created:
        voucher = current_domain.repository_for(Voucher).get(result.voucher_id)
        background_tasks.add_task(get_dispatcher().dispatch, DeliveryRequest.from_order(order, voucher))

    return IssuanceResponse(
        voucher_id=result.voucher_id,
        voucher_code=result.voucher_code,
        already_created=result.already_created,
        message=result.message,
    )


# ---------------------------------------------------------------------------
# Vouchers
# ---------------------------------------------------------------------------
voucher_router = APIRouter(prefix="/vouchers", tags=["vouchers"])


def _get_voucher(code: str) -> Voucher:
    voucher = current_domain.repository_for(Voucher).find_by_code(code)
    if voucher is None:
        raise HTTPException(status_code=404, detail=f"Voucher {code} not found")
    return voucher


@voucher_router.get("/{code}", response_model=VoucherResponse)
async def get_voucher(code: str) -> VoucherResponse:
    voucher = _get_voucher(code)
    return VoucherResponse(
        voucher_id=str(voucher.id),
        code=voucher.code,
        order_id=str(voucher.order_id),
        recipient_name=voucher.recipient_name,
        amount=voucher.amount,
        issued_at=voucher.issued_at.isoformat(),
        expiry_date=voucher.expiry_date.isoformat(),
        is_redeemed=voucher.is_redeemed,
        redeemed_at=voucher.redeemed_at.isoformat() if voucher.redeemed_at else None,
        voided_at=voucher.voided_at.isoformat() if voucher.voided_at else None,
        is_valid=not (voucher.is_redeemed or voucher.is_voided or voucher.is_expired()),
    )


@voucher_router.post("/{code}/redeem", response_model=StatusResponse)
async def redeem_voucher(code: str) -> StatusResponse:
    _get_voucher(code)
    current_domain.process(RedeemVoucher(code=code), asynchronous=False)
    return StatusResponse(status="redeemed")


@voucher_router.post("/{code}/extend", response_model=StatusResponse)
async def extend_voucher(code: str, body: ExtendVoucherRequest) -> StatusResponse:
    _get_voucher(code)
    current_domain.process(ExtendVoucher(code=code, days=body.days), asynchronous=False)
    return StatusResponse(status="extended")


@voucher_router.post("/{code}/void", response_model=StatusResponse)
async def void_voucher(code: str) -> StatusResponse:
    _get_voucher(code)
    current_domain.process(VoidVoucher(code=code), asynchronous=False)
    return StatusResponse(status="voided")


@voucher_router.post("/{code}/resend", response_model=ResendResponse)
async def resend_voucher(code: str, request: Request) -> ResendResponse:
    """Send the voucher again on the order's delivery channels (rate limited per client)."""
    client_address = request.client.host if request.client else "unknown"
    if not get_rate_limiter().allow(client_address):
        raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")

    voucher = _get_voucher(code)
    order = current_domain.repository_for(Order).get(voucher.order_id)
    attempts = get_dispatcher().dispatch(DeliveryRequest.from_order(order, voucher))

    return ResendResponse(
        attempts=[
            DeliveryAttemptResponse(
                channel=a.channel,
                destination=a.destination,
                status=a.status,
                message_id=a.message_id,
                error=a.error,
                url=a.url,
            )
            for a in attempts
        ]
    )

"""Pydantic request/response models for the Vouchers API.

API schemas are separate from Protean commands (anti-corruption pattern).
The gateway's notification body is validated separately by
``vouchers.webhook.payload.NotificationPayload``.
"""

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: str = Field(..., min_length=3, max_length=255, examples=["ayu@example.com"])
    customer_phone: str | None = Field(None, max_length=30, examples=["081234567890"])
    recipient_name: str | None = Field(None, max_length=255)
    recipient_email: str | None = Field(None, max_length=255)
    recipient_phone: str | None = Field(None, max_length=30)
    sender_message: str | None = Field(None, max_length=1000)
    delivery_method: Literal["EMAIL", "WHATSAPP", "BOTH"] = "EMAIL"
    send_to: Literal["PURCHASER", "RECIPIENT"] = "RECIPIENT"
    service_id: str = Field(..., min_length=1)
    service_name: str | None = Field(None, max_length=255)
    service_duration: int | None = Field(None, ge=1, description="Treatment length in minutes")
    total_amount: int = Field(..., ge=0, examples=[750000])


class ExtendVoucherRequest(BaseModel):
    days: int = Field(..., ge=1, le=3650)


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class OrderReferenceResponse(BaseModel):
    external_reference: str


class OrderResponse(BaseModel):
    order_id: str
    external_reference: str
    payment_status: str
    total_amount: int
    voucher_id: str | None = None
    transaction_id: str | None = None
    payment_type: str | None = None
    transaction_time: str | None = None


class IssuanceResponse(BaseModel):
    voucher_id: str | None = None
    voucher_code: str | None = None
    already_created: bool = False
    message: str


class VoucherResponse(BaseModel):
    voucher_id: str
    code: str
    order_id: str
    recipient_name: str
    amount: int
    issued_at: str
    expiry_date: str
    is_redeemed: bool
    redeemed_at: str | None = None
    voided_at: str | None = None
    is_valid: bool


class DeliveryAttemptResponse(BaseModel):
    channel: str
    destination: str | None = None
    status: str
    message_id: str | None = None
    error: str | None = None
    url: str | None = None


class ResendResponse(BaseModel):
    attempts: list[DeliveryAttemptResponse]

"""Best-effort voucher delivery.

The dispatcher resolves where a voucher goes (purchaser or recipient,
email and/or WhatsApp) and calls the matching channel adapters. It never
raises: adapter exceptions, timeouts and "failed" results are logged and
reported back as failed attempts, because by the time it runs the payment
is captured and the voucher already exists.
"""

from dataclasses import asdict, dataclass
from datetime import datetime

import structlog

from vouchers.channel import ChannelType, get_channel
from vouchers.delivery.messages import (
    VoucherEmailTemplate,
    VoucherWhatsAppTemplate,
    format_phone_number,
)
from vouchers.order.order import DeliveryMethod, Order
from vouchers.voucher.voucher import Voucher

logger = structlog.get_logger(__name__)

_METHOD_CHANNELS = {
    DeliveryMethod.EMAIL.value: (ChannelType.EMAIL,),
    DeliveryMethod.WHATSAPP.value: (ChannelType.WHATSAPP,),
    DeliveryMethod.BOTH.value: (ChannelType.EMAIL, ChannelType.WHATSAPP),
}


@dataclass(frozen=True)
class DeliveryRequest:
    order_id: str
    voucher_code: str
    delivery_method: str
    recipient_name: str
    sender_name: str | None
    sender_message: str | None
    email: str | None
    phone: str | None
    service_name: str | None
    service_duration: int | None
    amount: int
    expiry_date: datetime

    @classmethod
    def from_order(cls, order: Order, voucher: Voucher) -> "DeliveryRequest":
        """Build the request, resolving destinations from the order's send-to preference."""
        return cls(
            order_id=str(order.id),
            voucher_code=voucher.code,
            delivery_method=order.delivery_method or DeliveryMethod.EMAIL.value,
            recipient_name=voucher.recipient_name,
            sender_name=voucher.sender_name,
            sender_message=voucher.sender_message,
            email=order.delivery_email(),
            phone=order.delivery_phone(),
            service_name=order.service_name,
            service_duration=order.service_duration,
            amount=voucher.amount,
            expiry_date=voucher.expiry_date,
        )

    def context(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DeliveryAttempt:
    channel: str
    destination: str | None
    status: str  # "sent", "failed" or "skipped"
    message_id: str | None = None
    error: str | None = None
    url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "sent"


class DeliveryDispatcher:
    def __init__(self, email_channel=None, whatsapp_channel=None):
        self._email_channel = email_channel
        self._whatsapp_channel = whatsapp_channel

    @property
    def email_channel(self):
        return self._email_channel or get_channel(ChannelType.EMAIL.value)

    @property
    def whatsapp_channel(self):
        return self._whatsapp_channel or get_channel(ChannelType.WHATSAPP.value)

    def dispatch(self, request: DeliveryRequest) -> list[DeliveryAttempt]:
        """Send the voucher on every channel the order asked for."""
        channels = _METHOD_CHANNELS.get(request.delivery_method)
        if channels is None:
            logger.warning(
                "voucher_delivery_unknown_method",
                order_id=request.order_id,
                delivery_method=request.delivery_method,
            )
            channels = (ChannelType.EMAIL,)

        attempts = []
        for channel in channels:
            if channel == ChannelType.EMAIL:
                attempt = self._attempt(channel, request.email, self._send_email, request)
            else:
                phone = format_phone_number(request.phone) if request.phone else None
                attempt = self._attempt(channel, phone, self._send_whatsapp, request)
            attempts.append(attempt)

        return attempts

    def _attempt(self, channel: ChannelType, destination, send, request: DeliveryRequest) -> DeliveryAttempt:
        log = logger.bind(order_id=request.order_id, voucher_code=request.voucher_code, channel=channel.value)

        if not destination:
            log.info("voucher_delivery_skipped", reason="no destination")
            return DeliveryAttempt(channel=channel.value, destination=None, status="skipped")

        try:
            result = send(destination, request)
        except Exception as exc:
            log.warning("voucher_delivery_failed", destination=destination, error=str(exc), exc_type=type(exc).__name__)
            return DeliveryAttempt(channel=channel.value, destination=destination, status="failed", error=str(exc))

        if result.get("status") != "sent":
            log.warning("voucher_delivery_failed", destination=destination, error=result.get("error"))
            return DeliveryAttempt(
                channel=channel.value,
                destination=destination,
                status="failed",
                error=result.get("error"),
            )

        log.info("voucher_delivered", destination=destination, message_id=result.get("message_id"))
        return DeliveryAttempt(
            channel=channel.value,
            destination=destination,
            status="sent",
            message_id=result.get("message_id"),
            url=result.get("url"),
        )

    def _send_email(self, destination: str, request: DeliveryRequest) -> dict:
        content = VoucherEmailTemplate.render(request.context())
        return self.email_channel.send(to=destination, subject=content["subject"], body=content["body"])

    def _send_whatsapp(self, destination: str, request: DeliveryRequest) -> dict:
        content = VoucherWhatsAppTemplate.render(request.context())
        return self.whatsapp_channel.send(to=destination, body=content["body"])


def get_dispatcher() -> DeliveryDispatcher:
    """Return a dispatcher bound to the registry's configured channels."""
    return DeliveryDispatcher()

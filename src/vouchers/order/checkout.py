"""Pending-order creation: command and handler.

Checkout creates the order in PENDING before the customer is sent to the
gateway. The external reference generated here is what the gateway echoes
back as ``order_id`` in every notification.
"""

import os
import secrets
import string
import time

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from vouchers.domain import vouchers
from vouchers.order.order import DeliveryMethod, Order, SendTo

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_REFERENCE_SUFFIX_LENGTH = 9


def generate_external_reference(prefix: str | None = None) -> str:
    """Return a fresh reference of the form ``PREFIX-<epoch ms>-<random>``."""
    prefix = prefix or os.environ.get("VOUCHER_CODE_PREFIX", "KSP")
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(_REFERENCE_SUFFIX_LENGTH))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


@vouchers.command(part_of="Order")
class PlacePendingOrder:
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    customer_phone = String(max_length=30)
    recipient_name = String(max_length=255)
    recipient_email = String(max_length=255)
    recipient_phone = String(max_length=30)
    sender_message = Text()
    delivery_method = String(max_length=10, default=DeliveryMethod.EMAIL.value)
    send_to = String(max_length=10, default=SendTo.RECIPIENT.value)
    service_id = Identifier()
    service_name = String(max_length=255)
    service_duration = Integer()
    total_amount = Integer(required=True)


@vouchers.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlacePendingOrder)
    def place_pending_order(self, command):
        if command.send_to == SendTo.RECIPIENT.value and not command.recipient_name:
            raise ValidationError({"recipient_name": ["Recipient name is required when sending to the recipient"]})

        order = Order.place(
            external_reference=generate_external_reference(),
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            customer_phone=command.customer_phone,
            recipient_name=command.recipient_name or command.customer_name,
            recipient_email=command.recipient_email,
            recipient_phone=command.recipient_phone,
            sender_message=command.sender_message,
            delivery_method=command.delivery_method,
            send_to=command.send_to,
            service_id=command.service_id,
            service_name=command.service_name,
            service_duration=command.service_duration,
            total_amount=command.total_amount,
        )
        current_domain.repository_for(Order).add(order)
        return order.external_reference

"""Order aggregate: a voucher purchase and its payment lifecycle.

An order is created PENDING when checkout starts, before the gateway has
called back. From then on only payment notifications move it, through the
guarded transition below. Orders are never deleted.

State Machine:
    PENDING → COMPLETED (terminal for the notification pipeline)
    PENDING → FAILED
    FAILED  → COMPLETED / PENDING (a later notification supersedes a failure)
    REFUNDED is terminal; it is set by the refund flow, never by notifications.

Repeated PENDING notifications and anything arriving after a terminal state
are absorbed as no-ops, which is what keeps at-least-once delivery idempotent.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from vouchers.domain import vouchers
from vouchers.order.events import OrderPlaced, PaymentStatusChanged, VoucherLinked


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class DeliveryMethod(Enum):
    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"
    BOTH = "BOTH"


class SendTo(Enum):
    PURCHASER = "PURCHASER"
    RECIPIENT = "RECIPIENT"


class TransitionOutcome(Enum):
    APPLIED = "Applied"
    ALREADY_PROCESSED = "AlreadyProcessed"
    UNCHANGED = "Unchanged"


TERMINAL_STATUSES = frozenset({PaymentStatus.COMPLETED, PaymentStatus.REFUNDED})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@vouchers.aggregate
class Order:
    """A gift voucher purchase, keyed externally by the reference sent to the gateway."""

    external_reference: String(required=True, max_length=64, unique=True)

    # Purchaser
    customer_name: String(required=True, max_length=255)
    customer_email: String(required=True, max_length=255)
    customer_phone: String(max_length=30)

    # Recipient and delivery preference
    recipient_name: String(max_length=255)
    recipient_email: String(max_length=255)
    recipient_phone: String(max_length=30)
    sender_message: Text()
    delivery_method: String(choices=DeliveryMethod, default=DeliveryMethod.EMAIL.value)
    send_to: String(choices=SendTo, default=SendTo.RECIPIENT.value)

    # Commercial
    service_id: Identifier()
    service_name: String(max_length=255)
    service_duration: Integer(min_value=0)  # minutes
    total_amount: Integer(required=True, min_value=0)

    # Payment
    payment_status: String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    voucher_id: Identifier()

    # Gateway audit trail
    transaction_id: String(max_length=255)
    payment_type: String(max_length=50)
    transaction_time: String(max_length=50)

    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def voucher_requires_paid_order(self):
        if self.voucher_id is not None and self.payment_status != PaymentStatus.COMPLETED.value:
            raise ValidationError({"voucher_id": ["A voucher can only belong to a completed order"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        external_reference,
        customer_name,
        customer_email,
        total_amount,
        customer_phone=None,
        recipient_name=None,
        recipient_email=None,
        recipient_phone=None,
        sender_message=None,
        delivery_method=DeliveryMethod.EMAIL.value,
        send_to=SendTo.RECIPIENT.value,
        service_id=None,
        service_name=None,
        service_duration=None,
    ):
        """Create a new order in PENDING status."""
        now = datetime.now(UTC)

        order = cls(
            external_reference=external_reference,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            recipient_phone=recipient_phone,
            sender_message=sender_message,
            delivery_method=delivery_method,
            send_to=send_to,
            service_id=service_id,
            service_name=service_name,
            service_duration=service_duration,
            total_amount=total_amount,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                external_reference=external_reference,
                service_id=service_id,
                total_amount=total_amount,
                placed_at=now,
            )
        )

        return order

    # -------------------------------------------------------------------
    # Payment lifecycle
    # -------------------------------------------------------------------
    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED.value

    def record_payment_status(
        self,
        target_status: PaymentStatus,
        transaction_id=None,
        payment_type=None,
        transaction_time=None,
    ) -> TransitionOutcome:
        """Apply a gateway-reported status, or absorb it as a no-op.

        Returns the outcome instead of raising for replays: a terminal order
        reports ALREADY_PROCESSED, a repeated PENDING reports UNCHANGED.
        """
        current = PaymentStatus(self.payment_status)

        if current in TERMINAL_STATUSES:
            return TransitionOutcome.ALREADY_PROCESSED

        if current == target_status == PaymentStatus.PENDING:
            return TransitionOutcome.UNCHANGED

        if target_status == PaymentStatus.REFUNDED:
            raise ValidationError({"payment_status": ["Refunds are not recorded from payment notifications"]})

        now = datetime.now(UTC)
        self.payment_status = target_status.value
        self.transaction_id = transaction_id or self.transaction_id
        self.payment_type = payment_type or self.payment_type
        self.transaction_time = transaction_time or self.transaction_time
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                external_reference=self.external_reference,
                previous_status=current.value,
                new_status=target_status.value,
                transaction_id=self.transaction_id,
                payment_type=self.payment_type,
                changed_at=now,
            )
        )

        return TransitionOutcome.APPLIED

    def attach_voucher(self, voucher_id) -> None:
        """Link the issued voucher. Allowed once, and only on a completed order."""
        if not self.is_paid:
            raise ValidationError({"voucher_id": ["Cannot attach a voucher to an unpaid order"]})
        if self.voucher_id is not None and str(self.voucher_id) != str(voucher_id):
            raise ValidationError({"voucher_id": ["Order already has a different voucher"]})
        if self.voucher_id is not None:
            return

        now = datetime.now(UTC)
        self.voucher_id = voucher_id
        self.updated_at = now

        self.raise_(
            VoucherLinked(
                order_id=str(self.id),
                voucher_id=str(voucher_id),
                linked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Delivery destinations
    # -------------------------------------------------------------------
    def delivery_email(self):
        """Email address the voucher goes to, per the order's send-to preference."""
        if self.send_to == SendTo.RECIPIENT.value:
            return self.recipient_email
        return self.customer_email

    def delivery_phone(self):
        """Phone number the voucher goes to, per the order's send-to preference."""
        if self.send_to == SendTo.RECIPIENT.value:
            return self.recipient_phone
        return self.customer_phone

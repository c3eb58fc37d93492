"""Order repository: lookup by external reference and guarded writes.

The guarded transition and the voucher link both re-read the order while
holding the in-process store lock, so two notifications racing for the same
order in one process are serialized and only one of them can observe PENDING.
Across processes the aggregate version check rejects the stale write with
``ExpectedVersionError``.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from vouchers.domain import vouchers
from vouchers.order.order import Order, PaymentStatus, TransitionOutcome
from vouchers.utils.locking import store_lock

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    outcome: TransitionOutcome
    previous_status: PaymentStatus
    current_status: PaymentStatus
    order: Order

    @property
    def applied(self) -> bool:
        return self.outcome == TransitionOutcome.APPLIED

    @property
    def became_paid(self) -> bool:
        """True only for the write that moved the order into COMPLETED."""
        return (
            self.applied
            and self.current_status == PaymentStatus.COMPLETED
            and self.previous_status != PaymentStatus.COMPLETED
        )


@vouchers.repository(part_of=Order)
class OrderRepository:
    def find_by_external_reference(self, external_reference: str) -> Order | None:
        """Return the order carrying this gateway reference, or None."""
        if not external_reference:
            return None
        results = self._dao.query.filter(external_reference=external_reference).all().items
        return results[0] if results else None

    def transition(
        self,
        order_id,
        target_status: PaymentStatus,
        transaction_id=None,
        payment_type=None,
        transaction_time=None,
    ) -> TransitionResult:
        """Apply a guarded payment status transition atomically.

        Raises:
            ObjectNotFoundError: if the order does not exist.
            ExpectedVersionError: if another process saved the order between
                this read and this write.
        """
        with store_lock:
            order = self.get(order_id)
            previous = PaymentStatus(order.payment_status)

            outcome = order.record_payment_status(
                target_status,
                transaction_id=transaction_id,
                payment_type=payment_type,
                transaction_time=transaction_time,
            )
            if outcome == TransitionOutcome.APPLIED:
                self.add(order)

        logger.info(
            "order_transition",
            order_id=str(order_id),
            outcome=outcome.value,
            previous_status=previous.value,
            target_status=target_status.value,
        )
        return TransitionResult(
            outcome=outcome,
            previous_status=previous,
            current_status=PaymentStatus(order.payment_status),
            order=order,
        )

    def link_voucher(self, order_id, voucher_id) -> bool:
        """Attach an issued voucher to its order. Returns False if the link is refused."""
        with store_lock:
            order = self.get(order_id)
            if order.voucher_id is not None and str(order.voucher_id) == str(voucher_id):
                return True
            try:
                order.attach_voucher(voucher_id)
            except ValidationError as exc:
                logger.warning(
                    "voucher_link_refused",
                    order_id=str(order_id),
                    voucher_id=str(voucher_id),
                    errors=exc.messages,
                )
                return False
            self.add(order)
        return True

"""Voucher issuance for paid orders.

Issuance is exactly-once per order: an order that already points at a
voucher, or that already owns one in the voucher store, reports success
with ``already_created`` instead of minting a second voucher. Precondition
failures and code exhaustion come back as typed failures. Nothing here
raises for an expected failure; callers log the result and move on.
"""

import os
from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from vouchers.order.order import Order, PaymentStatus
from vouchers.voucher.codes import MAX_CODE_ATTEMPTS, generate_voucher_code
from vouchers.voucher.repository import CodeGenerationExhausted, VoucherAlreadyIssued
from vouchers.voucher.voucher import Voucher

logger = structlog.get_logger(__name__)


class IssuanceError(Enum):
    ORDER_NOT_PAID = "ORDER_NOT_PAID"
    MISSING_SERVICE = "MISSING_SERVICE"
    MISSING_RECIPIENT_NAME = "MISSING_RECIPIENT_NAME"
    MISSING_RECIPIENT_CONTACT = "MISSING_RECIPIENT_CONTACT"
    CODE_GENERATION_EXHAUSTED = "CODE_GENERATION_EXHAUSTED"


@dataclass(frozen=True)
class IssuanceResult:
    success: bool
    message: str
    voucher_id: str | None = None
    voucher_code: str | None = None
    already_created: bool = False
    error: IssuanceError | None = None

    @classmethod
    def failed(cls, error: IssuanceError, message: str) -> "IssuanceResult":
        return cls(success=False, message=message, error=error)


def validity_days() -> int | None:
    """Days from VOUCHER_VALIDITY_DAYS, or None for the one-year default."""
    value = os.environ.get("VOUCHER_VALIDITY_DAYS", "").strip()
    return int(value) if value else None


class VoucherIssuer:
    """Creates the voucher for a paid order and links it back to the order."""

    def __init__(self, generate_code=None, max_attempts: int = MAX_CODE_ATTEMPTS, validity_days: int | None = None):
        self.generate_code = generate_code or generate_voucher_code
        self.max_attempts = max_attempts
        self.validity_days = validity_days

    def issue(self, order: Order) -> IssuanceResult:
        log = logger.bind(order_id=str(order.id), external_reference=order.external_reference)

        if order.voucher_id is not None:
            log.info("voucher_already_created", voucher_id=str(order.voucher_id))
            return IssuanceResult(
                success=True,
                message="Voucher already created",
                voucher_id=str(order.voucher_id),
                voucher_code=self._code_for(order.voucher_id),
                already_created=True,
            )

        failure = self._check_preconditions(order)
        if failure is not None:
            log.error("voucher_issuance_rejected", error=failure.error.value, reason=failure.message)
            return failure

        days = self.validity_days if self.validity_days is not None else validity_days()

        def build(code: str) -> Voucher:
            return Voucher.issue(
                code=code,
                order_id=str(order.id),
                service_id=order.service_id,
                recipient_name=order.recipient_name,
                recipient_email=order.recipient_email or order.customer_email,
                sender_name=order.customer_name,
                sender_message=order.sender_message,
                amount=order.total_amount,
                validity_days=days,
            )

        repo = current_domain.repository_for(Voucher)
        try:
            voucher = repo.add_for_order(
                str(order.id),
                build,
                generate_code=self.generate_code,
                max_attempts=self.max_attempts,
            )
        except VoucherAlreadyIssued as exc:
            existing = exc.voucher
            log.info("voucher_already_created", voucher_id=str(existing.id), code=existing.code)
            self._link(order, existing)
            return IssuanceResult(
                success=True,
                message="Voucher already created",
                voucher_id=str(existing.id),
                voucher_code=existing.code,
                already_created=True,
            )
        except CodeGenerationExhausted as exc:
            log.error("voucher_code_generation_exhausted", attempts=exc.attempts)
            return IssuanceResult.failed(IssuanceError.CODE_GENERATION_EXHAUSTED, str(exc))

        log.info("voucher_issued", voucher_id=str(voucher.id), code=voucher.code)
        self._link(order, voucher)

        return IssuanceResult(
            success=True,
            message="Voucher created",
            voucher_id=str(voucher.id),
            voucher_code=voucher.code,
        )

    def _check_preconditions(self, order: Order) -> IssuanceResult | None:
        if order.payment_status != PaymentStatus.COMPLETED.value:
            return IssuanceResult.failed(IssuanceError.ORDER_NOT_PAID, "Order is not paid")
        if not order.service_id:
            return IssuanceResult.failed(IssuanceError.MISSING_SERVICE, "Order has no service")
        if not order.recipient_name:
            return IssuanceResult.failed(IssuanceError.MISSING_RECIPIENT_NAME, "Order has no recipient name")
        if not (order.recipient_email or order.recipient_phone):
            return IssuanceResult.failed(
                IssuanceError.MISSING_RECIPIENT_CONTACT,
                "Order has no recipient email or phone",
            )
        return None

    def _link(self, order: Order, voucher: Voucher) -> None:
        """Point the order at its voucher. A failed link leaves the voucher in place."""
        try:
            linked = current_domain.repository_for(Order).link_voucher(order.id, voucher.id)
        except Exception:
            logger.exception("voucher_link_failed", order_id=str(order.id), voucher_id=str(voucher.id))
            return
        if not linked:
            logger.error("voucher_link_failed", order_id=str(order.id), voucher_id=str(voucher.id))

    def _code_for(self, voucher_id) -> str | None:
        try:
            return current_domain.repository_for(Voucher).get(voucher_id).code
        except ObjectNotFoundError:
            return None

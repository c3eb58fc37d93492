"""Payment notification processing and its HTTP response contract.

Every notification that is malformed, unauthenticated, unknown or already
absorbed is answered with 200 so the gateway stops retrying it. Only an
unparseable body (400), a missing server key (502) and genuinely unexpected
failures such as a failed status write (500) are reported as errors; the
500 is the one answer that asks the gateway to try again.

    parse ─▶ validate ─▶ verify signature ─▶ find order ─▶ map status
          ─▶ guarded transition ─▶ (became paid) issue voucher ─▶ schedule delivery
"""

import json
from dataclasses import dataclass

import pydantic
import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from vouchers.delivery.dispatch import DeliveryRequest, get_dispatcher
from vouchers.gateway.config import GatewayConfigError, get_gateway_config
from vouchers.gateway.signature import verify_signature
from vouchers.gateway.status import map_transaction_status
from vouchers.order.order import Order, TransitionOutcome
from vouchers.voucher.issuance import VoucherIssuer
from vouchers.voucher.voucher import Voucher
from vouchers.webhook.payload import NotificationPayload

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WebhookResult:
    status_code: int
    status: str
    message: str

    @classmethod
    def ok(cls, message: str) -> "WebhookResult":
        return cls(status_code=200, status="ok", message=message)

    @classmethod
    def error(cls, status_code: int, message: str) -> "WebhookResult":
        return cls(status_code=status_code, status="error", message=message)

    def body(self) -> dict:
        return {"status": self.status, "message": self.message}


def run_now(func, *args, **kwargs):
    func(*args, **kwargs)


class NotificationProcessor:
    """Handles one gateway notification end to end.

    Args:
        issuer: voucher issuer, a default VoucherIssuer if omitted
        dispatcher: delivery dispatcher, the registry-backed one if omitted
        schedule: ``schedule(func, *args)`` used to run delivery after the
            response; FastAPI's ``BackgroundTasks.add_task`` in the route,
            an immediate call otherwise
    """

    def __init__(self, issuer=None, dispatcher=None, schedule=None):
        self.issuer = issuer or VoucherIssuer()
        self.dispatcher = dispatcher or get_dispatcher()
        self.schedule = schedule or run_now

    def process(self, raw_body) -> WebhookResult:
        try:
            return self._process(raw_body)
        except Exception:
            logger.exception("notification_processing_error")
            return WebhookResult.error(500, "Internal server error")

    def _process(self, raw_body) -> WebhookResult:
        try:
            data = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
            logger.error("notification_invalid_json")
            return WebhookResult.error(400, "Invalid JSON")

        try:
            notification = NotificationPayload.model_validate(data)
        except pydantic.ValidationError as exc:
            logger.error("notification_invalid_structure", errors=exc.error_count())
            return WebhookResult.ok("Invalid notification structure")

        log = logger.bind(
            external_reference=notification.order_id,
            transaction_status=notification.transaction_status,
        )
        log.info("notification_received")

        try:
            config = get_gateway_config()
        except GatewayConfigError as exc:
            log.error("gateway_configuration_error", error=str(exc))
            return WebhookResult.error(502, "Server configuration error")

        if not verify_signature(
            notification.order_id,
            notification.status_code,
            notification.gross_amount,
            notification.signature_key,
            config.server_key,
        ):
            log.warning("invalid_signature", security_event=True)
            return WebhookResult.ok("Notification ignored")

        order_repo = current_domain.repository_for(Order)
        order = order_repo.find_by_external_reference(notification.order_id)
        if order is None:
            log.info("notification_for_unknown_order", stale_reference=True)
            return WebhookResult.ok("Notification ignored")

        target_status = map_transaction_status(notification.transaction_status, notification.fraud_status)

        try:
            transition = order_repo.transition(
                order.id,
                target_status,
                transaction_id=notification.transaction_id,
                payment_type=notification.payment_type,
                transaction_time=notification.transaction_time,
            )
        except ExpectedVersionError:
            # Another process wrote the order first; the retry sees its result
            log.warning("order_concurrent_update", order_id=str(order.id))
            return WebhookResult.error(500, "Failed to update order")
        except Exception:
            log.exception("order_status_update_failed", order_id=str(order.id))
            return WebhookResult.error(500, "Failed to update order")

        if transition.outcome == TransitionOutcome.ALREADY_PROCESSED:
            return WebhookResult.ok("Already processed")
        if transition.outcome == TransitionOutcome.UNCHANGED:
            return WebhookResult.ok("Status unchanged")

        if transition.became_paid:
            self._issue_and_deliver(transition.order)

        log.info("notification_processed", new_status=transition.current_status.value)
        return WebhookResult.ok("Notification processed")

    def _issue_and_deliver(self, order: Order) -> None:
        """Issue the voucher and schedule delivery. Failures are logged, never raised."""
        log = logger.bind(order_id=str(order.id), external_reference=order.external_reference)
        try:
            result = self.issuer.issue(order)
        except Exception:
            log.exception("voucher_issuance_error")
            return

        if not result.success:
            log.error("voucher_issuance_failed", error=result.error.value if result.error else None)
            return
        if result.already_created:
            return

        try:
            voucher = current_domain.repository_for(Voucher).get(result.voucher_id)
            request = DeliveryRequest.from_order(order, voucher)
            self.schedule(self.dispatcher.dispatch, request)
        except Exception:
            log.exception("voucher_delivery_scheduling_failed", voucher_id=result.voucher_id)

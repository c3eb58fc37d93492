"""Gateway status vocabulary and its mapping onto internal payment statuses.

The mapping is a pure, total function: every combination of transaction and
fraud status (including values the gateway may add later) resolves to exactly
one of PENDING, COMPLETED or FAILED.

    settlement                       → COMPLETED (PENDING if fraud is challenge/deny)
    capture + accept                 → COMPLETED
    capture + challenge/deny/missing → PENDING
    deny / cancel / expire           → FAILED
    pending / refund / partial_refund / anything else, non-strings included → PENDING
"""

from enum import Enum

from vouchers.order.order import PaymentStatus


class TransactionStatus(Enum):
    CAPTURE = "capture"
    SETTLEMENT = "settlement"
    PENDING = "pending"
    DENY = "deny"
    CANCEL = "cancel"
    EXPIRE = "expire"
    REFUND = "refund"
    PARTIAL_REFUND = "partial_refund"


class FraudStatus(Enum):
    ACCEPT = "accept"
    CHALLENGE = "challenge"
    DENY = "deny"


_FAILED_STATUSES = {
    TransactionStatus.DENY.value,
    TransactionStatus.CANCEL.value,
    TransactionStatus.EXPIRE.value,
}

_FLAGGED_FRAUD_STATUSES = {
    FraudStatus.CHALLENGE.value,
    FraudStatus.DENY.value,
}


def _is_status(value) -> bool:
    return isinstance(value, str)


def is_successful_payment(transaction_status, fraud_status=None) -> bool:
    if not _is_status(transaction_status) or not (fraud_status is None or _is_status(fraud_status)):
        return False
    if transaction_status == TransactionStatus.SETTLEMENT.value:
        return fraud_status not in _FLAGGED_FRAUD_STATUSES
    if transaction_status == TransactionStatus.CAPTURE.value:
        return fraud_status == FraudStatus.ACCEPT.value
    return False


def is_failed_payment(transaction_status) -> bool:
    return _is_status(transaction_status) and transaction_status in _FAILED_STATUSES


def map_transaction_status(transaction_status, fraud_status=None) -> PaymentStatus:
    """Translate the gateway's transaction/fraud status into a PaymentStatus."""
    if is_successful_payment(transaction_status, fraud_status):
        return PaymentStatus.COMPLETED

    if is_failed_payment(transaction_status):
        return PaymentStatus.FAILED

    # pending, challenged, refunds and anything unrecognised
    return PaymentStatus.PENDING

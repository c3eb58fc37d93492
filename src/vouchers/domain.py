"""Vouchers bounded context: payment reconciliation and gift voucher issuance.

Receives asynchronous payment notifications from the payment gateway,
moves orders through their payment lifecycle, issues exactly one redeemable
gift voucher per paid order, and hands the voucher to the delivery channels
(email, WhatsApp) on a best-effort basis.
"""

import structlog
from protean.domain import Domain

vouchers = Domain(name="vouchers")

logger = structlog.get_logger(__name__)

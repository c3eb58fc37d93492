"""Vouchers domain API package."""

from vouchers.api.routes import order_router, payment_router, voucher_router

__all__ = ["order_router", "payment_router", "voucher_router"]

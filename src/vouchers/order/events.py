"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from vouchers.domain import vouchers


@vouchers.event(part_of="Order")
class OrderPlaced:
    """A pending order was created at checkout, before any gateway callback."""

    __version__ = 1

    order_id = Identifier(required=True)
    external_reference = String(required=True)
    service_id = Identifier()
    total_amount = Integer(required=True)
    placed_at = DateTime(required=True)


@vouchers.event(part_of="Order")
class PaymentStatusChanged:
    """The gateway reported a payment outcome that moved the order's status."""

    __version__ = 1

    order_id = Identifier(required=True)
    external_reference = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    transaction_id = String()
    payment_type = String()
    changed_at = DateTime(required=True)


@vouchers.event(part_of="Order")
class VoucherLinked:
    """The voucher issued for this order was attached to it."""

    __version__ = 1

    order_id = Identifier(required=True)
    voucher_id = Identifier(required=True)
    linked_at = DateTime(required=True)

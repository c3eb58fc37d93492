"""Domain events for the Voucher aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from vouchers.domain import vouchers


@vouchers.event(part_of="Voucher")
class VoucherIssued:
    """A voucher was created for a paid order."""

    __version__ = 1

    voucher_id = Identifier(required=True)
    order_id = Identifier(required=True)
    code = String(required=True)
    amount = Integer(required=True)
    expiry_date = DateTime(required=True)
    issued_at = DateTime(required=True)


@vouchers.event(part_of="Voucher")
class VoucherRedeemed:
    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True)
    redeemed_at = DateTime(required=True)


@vouchers.event(part_of="Voucher")
class VoucherExtended:
    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True)
    previous_expiry_date = DateTime(required=True)
    new_expiry_date = DateTime(required=True)


@vouchers.event(part_of="Voucher")
class VoucherVoided:
    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True)
    voided_at = DateTime(required=True)

"""Voucher management: redeem, extend and void by voucher code."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from vouchers.domain import vouchers
from vouchers.utils.locking import store_lock
from vouchers.voucher.voucher import Voucher


@vouchers.command(part_of="Voucher")
class RedeemVoucher:
    code = String(required=True, max_length=50)


@vouchers.command(part_of="Voucher")
class ExtendVoucher:
    code = String(required=True, max_length=50)
    days = Integer(required=True)


@vouchers.command(part_of="Voucher")
class VoidVoucher:
    code = String(required=True, max_length=50)


def _load(repo, code: str) -> Voucher:
    voucher = repo.find_by_code(code)
    if voucher is None:
        raise ObjectNotFoundError({"code": [f"Voucher {code} not found"]})
    return voucher


@vouchers.command_handler(part_of=Voucher)
class ManageVoucherHandler:
    @handle(RedeemVoucher)
    def redeem_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        with store_lock:
            voucher = _load(repo, command.code)
            voucher.redeem()
            repo.add(voucher)

    @handle(ExtendVoucher)
    def extend_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        with store_lock:
            voucher = _load(repo, command.code)
            voucher.extend(command.days)
            repo.add(voucher)

    @handle(VoidVoucher)
    def void_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        with store_lock:
            voucher = _load(repo, command.code)
            voucher.void()
            repo.add(voucher)

"""Voucher repository: code lookup and the one-voucher-per-order insert."""

import structlog

from vouchers.domain import vouchers
from vouchers.utils.locking import store_lock
from vouchers.voucher.codes import MAX_CODE_ATTEMPTS, generate_voucher_code
from vouchers.voucher.voucher import Voucher

logger = structlog.get_logger(__name__)


class VoucherAlreadyIssued(Exception):
    """The order already owns a voucher; carries the existing one."""

    def __init__(self, voucher: Voucher):
        super().__init__(f"Order {voucher.order_id} already has voucher {voucher.code}")
        self.voucher = voucher


class CodeGenerationExhausted(Exception):
    """Every generated code collided with an existing voucher."""

    def __init__(self, attempts: int):
        super().__init__(f"Could not generate a unique voucher code after {attempts} attempts")
        self.attempts = attempts


@vouchers.repository(part_of=Voucher)
class VoucherRepository:
    def find_by_code(self, code: str) -> Voucher | None:
        if not code:
            return None
        results = self._dao.query.filter(code=code).all().items
        return results[0] if results else None

    def find_by_order(self, order_id) -> Voucher | None:
        results = self._dao.query.filter(order_id=str(order_id)).all().items
        return results[0] if results else None

    def code_exists(self, code: str) -> bool:
        return self.find_by_code(code) is not None

    def add_for_order(
        self,
        order_id,
        build,
        generate_code=generate_voucher_code,
        max_attempts: int = MAX_CODE_ATTEMPTS,
    ) -> Voucher:
        """Insert the voucher for ``order_id`` unless one already exists.

        ``build`` receives a fresh, unused code and returns the Voucher to
        store. The order check, the code collision check and the insert all
        happen under the store lock.

        Raises:
            VoucherAlreadyIssued: the order already has a voucher.
            CodeGenerationExhausted: ``max_attempts`` codes in a row collided.
        """
        with store_lock:
            existing = self.find_by_order(order_id)
            if existing is not None:
                raise VoucherAlreadyIssued(existing)

            for attempt in range(1, max_attempts + 1):
                code = generate_code()
                if self.code_exists(code):
                    logger.warning("voucher_code_collision", order_id=str(order_id), attempt=attempt)
                    continue

                voucher = build(code)
                self.add(voucher)
                return voucher

        raise CodeGenerationExhausted(max_attempts)

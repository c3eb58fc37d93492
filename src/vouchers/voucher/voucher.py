"""Voucher aggregate: a redeemable gift voucher issued for a paid order.

Lifecycle:
    issued → redeemed
    issued → voided (expiry pulled to the moment of voiding)
    issued → expired (by the passage of time past expiry_date)

Only unredeemed, unexpired, unvoided vouchers can be redeemed or extended.
"""

from datetime import UTC, datetime, timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from vouchers.domain import vouchers
from vouchers.voucher.events import VoucherExtended, VoucherIssued, VoucherRedeemed, VoucherVoided


@vouchers.aggregate
class Voucher:
    code: String(required=True, max_length=50, unique=True)
    order_id: Identifier(required=True, unique=True)
    service_id: Identifier()

    recipient_name: String(required=True, max_length=255)
    recipient_email: String(max_length=255)
    sender_name: String(max_length=255)
    sender_message: Text()

    amount: Integer(required=True, min_value=0)
    issued_at: DateTime(required=True)
    expiry_date: DateTime(required=True)

    is_redeemed: Boolean(default=False)
    redeemed_at: DateTime()
    voided_at: DateTime()

    @invariant.post
    def redemption_has_timestamp(self):
        if self.is_redeemed and self.redeemed_at is None:
            raise ValidationError({"redeemed_at": ["A redeemed voucher must record when it was redeemed"]})

    @classmethod
    def issue(
        cls,
        code,
        order_id,
        recipient_name,
        amount,
        service_id=None,
        recipient_email=None,
        sender_name=None,
        sender_message=None,
        validity_days=None,
        now=None,
    ):
        """Create a voucher expiring ``validity_days`` after issuance, or one calendar year by default."""
        now = now or datetime.now(UTC)
        expiry_date = one_year_after(now) if validity_days is None else now + timedelta(days=validity_days)
        voucher = cls(
            code=code,
            order_id=order_id,
            service_id=service_id,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            sender_name=sender_name,
            sender_message=sender_message,
            amount=amount,
            issued_at=now,
            expiry_date=expiry_date,
            is_redeemed=False,
        )
        voucher.raise_(
            VoucherIssued(
                voucher_id=str(voucher.id),
                order_id=str(order_id),
                code=code,
                amount=amount,
                expiry_date=voucher.expiry_date,
                issued_at=now,
            )
        )
        return voucher

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_expired(self, now=None) -> bool:
        now = now or datetime.now(UTC)
        return _aware(self.expiry_date) <= now

    @property
    def is_voided(self) -> bool:
        return self.voided_at is not None

    def _assert_usable(self, now):
        if self.is_redeemed:
            raise ValidationError({"code": ["Voucher has already been redeemed"]})
        if self.is_voided:
            raise ValidationError({"code": ["Voucher has been voided"]})
        if self.is_expired(now):
            raise ValidationError({"code": ["Voucher has expired"]})

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def redeem(self, now=None) -> None:
        now = now or datetime.now(UTC)
        self._assert_usable(now)

        self.redeemed_at = now
        self.is_redeemed = True
        self.raise_(VoucherRedeemed(voucher_id=str(self.id), code=self.code, redeemed_at=now))

    def extend(self, days: int) -> None:
        """Push the expiry date out by ``days`` from its current value."""
        if days is None or days <= 0:
            raise ValidationError({"days": ["Extension must be a positive number of days"]})
        if self.is_redeemed:
            raise ValidationError({"code": ["Cannot extend a redeemed voucher"]})
        if self.is_voided:
            raise ValidationError({"code": ["Cannot extend a voided voucher"]})

        previous = _aware(self.expiry_date)
        self.expiry_date = previous + timedelta(days=days)
        self.raise_(
            VoucherExtended(
                voucher_id=str(self.id),
                code=self.code,
                previous_expiry_date=previous,
                new_expiry_date=self.expiry_date,
            )
        )

    def void(self, now=None) -> None:
        if self.is_redeemed:
            raise ValidationError({"code": ["Cannot void a redeemed voucher"]})
        if self.is_voided:
            raise ValidationError({"code": ["Voucher is already voided"]})

        now = now or datetime.now(UTC)
        self.voided_at = now
        self.expiry_date = now
        self.raise_(VoucherVoided(voucher_id=str(self.id), code=self.code, voided_at=now))


def one_year_after(moment: datetime) -> datetime:
    """Same calendar date next year. 29 February rolls over to 1 March."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, month=3, day=1)


def _aware(value: datetime) -> datetime:
    """Treat naive datetimes read back from storage as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value

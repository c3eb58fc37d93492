"""Tests for order lookup and the guarded, locked status transition."""

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError

from vouchers.order.order import Order, PaymentStatus, TransitionOutcome


@pytest.fixture()
def repo():
    return current_domain.repository_for(Order)


class TestFindByExternalReference:
    def test_finds_order(self, repo, place_order):
        order = place_order(external_reference="KSP-1760000000000-FIND00001")
        found = repo.find_by_external_reference("KSP-1760000000000-FIND00001")
        assert found is not None
        assert found.id == order.id

    def test_unknown_reference(self, repo, place_order):
        place_order()
        assert repo.find_by_external_reference("KSP-does-not-exist") is None

    def test_blank_reference(self, repo):
        assert repo.find_by_external_reference("") is None


class TestTransition:
    def test_applies_and_persists_metadata(self, repo, place_order, reload):
        order = place_order()
        result = repo.transition(
            order.id,
            PaymentStatus.COMPLETED,
            transaction_id="trx-1",
            payment_type="qris",
            transaction_time="2026-10-18 10:15:00",
        )

        assert result.outcome == TransitionOutcome.APPLIED
        assert result.previous_status == PaymentStatus.PENDING
        assert result.current_status == PaymentStatus.COMPLETED
        assert result.became_paid is True

        stored = reload(order)
        assert stored.payment_status == "COMPLETED"
        assert stored.transaction_id == "trx-1"
        assert stored.payment_type == "qris"
        assert stored.transaction_time == "2026-10-18 10:15:00"

    def test_completed_order_reports_already_processed(self, repo, place_order, reload):
        order = place_order()
        repo.transition(order.id, PaymentStatus.COMPLETED, transaction_id="trx-1")

        result = repo.transition(order.id, PaymentStatus.FAILED, transaction_id="trx-2")

        assert result.outcome == TransitionOutcome.ALREADY_PROCESSED
        assert result.became_paid is False
        stored = reload(order)
        assert stored.payment_status == "COMPLETED"
        assert stored.transaction_id == "trx-1"

    def test_refunded_order_is_not_touched(self, repo, place_order, reload):
        order = place_order()
        repo.transition(order.id, PaymentStatus.COMPLETED)
        stored = reload(order)
        stored.payment_status = PaymentStatus.REFUNDED.value
        repo.add(stored)

        result = repo.transition(order.id, PaymentStatus.COMPLETED)

        assert result.outcome == TransitionOutcome.ALREADY_PROCESSED
        assert reload(order).payment_status == "REFUNDED"

    def test_pending_repeat_is_unchanged(self, repo, place_order, reload):
        order = place_order()
        result = repo.transition(order.id, PaymentStatus.PENDING, transaction_id="trx-1")
        assert result.outcome == TransitionOutcome.UNCHANGED
        assert reload(order).transaction_id is None

    def test_failed_then_completed_becomes_paid(self, repo, place_order):
        order = place_order()
        repo.transition(order.id, PaymentStatus.FAILED)
        result = repo.transition(order.id, PaymentStatus.COMPLETED)
        assert result.outcome == TransitionOutcome.APPLIED
        assert result.became_paid is True

    def test_stale_copy_cannot_apply_twice(self, repo, place_order):
        order = place_order()
        stale_id = order.id

        first = repo.transition(stale_id, PaymentStatus.COMPLETED)
        second = repo.transition(stale_id, PaymentStatus.COMPLETED)

        assert first.became_paid is True
        assert second.outcome == TransitionOutcome.ALREADY_PROCESSED
        assert second.became_paid is False

    def test_unknown_order(self, repo):
        with pytest.raises(ObjectNotFoundError):
            repo.transition("missing-order", PaymentStatus.COMPLETED)


class TestVersionCheck:
    def test_write_from_outdated_copy_is_rejected(self, repo, place_order, reload):
        order = place_order()
        copy_a = repo.get(order.id)
        copy_b = repo.get(order.id)

        copy_a.record_payment_status(PaymentStatus.COMPLETED)
        repo.add(copy_a)
        copy_b.record_payment_status(PaymentStatus.FAILED)

        with pytest.raises(ExpectedVersionError):
            repo.add(copy_b)
        assert reload(order).payment_status == "COMPLETED"

    def test_transition_over_outdated_read_is_rejected(self, repo, place_order, reload, monkeypatch):
        order = place_order()
        outdated = repo.get(order.id)
        repo.transition(order.id, PaymentStatus.FAILED)
        with monkeypatch.context() as patched:
            patched.setattr(type(repo), "get", lambda self, identifier: outdated)
            with pytest.raises(ExpectedVersionError):
                repo.transition(order.id, PaymentStatus.COMPLETED)

        assert reload(order).payment_status == "FAILED"


class TestLinkVoucher:
    def test_links_voucher_to_paid_order(self, repo, place_order, reload):
        order = place_order()
        repo.transition(order.id, PaymentStatus.COMPLETED)
        assert repo.link_voucher(order.id, "voucher-1") is True
        assert reload(order).voucher_id == "voucher-1"

    def test_relinking_same_voucher_is_accepted(self, repo, place_order):
        order = place_order()
        repo.transition(order.id, PaymentStatus.COMPLETED)
        repo.link_voucher(order.id, "voucher-1")
        assert repo.link_voucher(order.id, "voucher-1") is True

    def test_refuses_second_voucher(self, repo, place_order, reload):
        order = place_order()
        repo.transition(order.id, PaymentStatus.COMPLETED)
        repo.link_voucher(order.id, "voucher-1")
        assert repo.link_voucher(order.id, "voucher-2") is False
        assert reload(order).voucher_id == "voucher-1"

    def test_refuses_unpaid_order(self, repo, place_order, reload):
        order = place_order()
        assert repo.link_voucher(order.id, "voucher-1") is False
        assert reload(order).voucher_id is None

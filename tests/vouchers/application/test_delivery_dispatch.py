"""Tests for best-effort voucher delivery."""

import httpx
import pytest
from protean import current_domain

from vouchers.channel.fake_email import FakeEmailAdapter
from vouchers.channel.fake_whatsapp import FakeWhatsAppAdapter
from vouchers.delivery.dispatch import DeliveryDispatcher, DeliveryRequest
from vouchers.order.order import Order, PaymentStatus
from vouchers.voucher.issuance import VoucherIssuer
from vouchers.voucher.voucher import Voucher


@pytest.fixture()
def adapters():
    return FakeEmailAdapter(), FakeWhatsAppAdapter()


@pytest.fixture()
def dispatcher(adapters):
    email, whatsapp = adapters
    return DeliveryDispatcher(email_channel=email, whatsapp_channel=whatsapp)


@pytest.fixture()
def request_for(place_order, reload):
    """Factory: issue a voucher for a freshly paid order and build its delivery request."""

    def _request(**order_overrides):
        order = place_order(**order_overrides)
        current_domain.repository_for(Order).transition(order.id, PaymentStatus.COMPLETED)
        order = reload(order)
        result = VoucherIssuer().issue(order)
        voucher = current_domain.repository_for(Voucher).get(result.voucher_id)
        return DeliveryRequest.from_order(order, voucher)

    return _request


class TestDestinationResolution:
    def test_recipient_target(self, request_for):
        request = request_for(send_to="RECIPIENT")
        assert request.email == "made@example.com"
        assert request.phone == "081298765432"

    def test_purchaser_target(self, request_for):
        request = request_for(send_to="PURCHASER")
        assert request.email == "ayu@example.com"
        assert request.phone == "081234567890"


class TestChannelSelection:
    def test_email_only(self, dispatcher, adapters, request_for):
        email, whatsapp = adapters
        attempts = dispatcher.dispatch(request_for(delivery_method="EMAIL"))

        assert [a.channel for a in attempts] == ["Email"]
        assert attempts[0].succeeded
        assert email.sent_emails[0]["to"] == "made@example.com"
        assert whatsapp.sent_messages == []

    def test_whatsapp_only_normalises_phone(self, dispatcher, adapters, request_for):
        email, whatsapp = adapters
        attempts = dispatcher.dispatch(request_for(delivery_method="WHATSAPP"))

        assert [a.channel for a in attempts] == ["WhatsApp"]
        assert whatsapp.sent_messages[0]["to"] == "6281298765432"
        assert email.sent_emails == []

    def test_both_channels(self, dispatcher, adapters, request_for):
        email, whatsapp = adapters
        attempts = dispatcher.dispatch(request_for(delivery_method="BOTH"))

        assert [a.status for a in attempts] == ["sent", "sent"]
        assert len(email.sent_emails) == 1
        assert len(whatsapp.sent_messages) == 1

    def test_message_carries_voucher_code(self, dispatcher, adapters, request_for):
        email, _ = adapters
        request = request_for()
        dispatcher.dispatch(request)
        assert request.voucher_code in email.sent_emails[0]["body"]

    def test_channel_without_destination_is_skipped(self, dispatcher, adapters, request_for):
        _, whatsapp = adapters
        attempts = dispatcher.dispatch(request_for(delivery_method="BOTH", recipient_phone=None))

        assert [a.status for a in attempts] == ["sent", "skipped"]
        assert whatsapp.sent_messages == []

    def test_uses_registry_channels_by_default(self, email_channel, request_for):
        DeliveryDispatcher().dispatch(request_for())
        assert len(email_channel.sent_emails) == 1


class TestBestEffort:
    def test_failed_result_is_reported(self, dispatcher, adapters, request_for):
        email, _ = adapters
        email.configure(should_succeed=False, failure_reason="Mailbox full")

        attempts = dispatcher.dispatch(request_for())

        assert attempts[0].status == "failed"
        assert attempts[0].error == "Mailbox full"

    def test_adapter_exception_does_not_propagate(self, dispatcher, adapters, request_for):
        email, _ = adapters
        email.configure(should_raise=RuntimeError("smtp down"))

        attempts = dispatcher.dispatch(request_for())

        assert attempts[0].status == "failed"
        assert "smtp down" in attempts[0].error

    def test_timeout_is_a_failed_attempt(self, dispatcher, adapters, request_for):
        email, _ = adapters
        email.configure(should_raise=httpx.ReadTimeout("timed out"))

        attempts = dispatcher.dispatch(request_for())

        assert attempts[0].status == "failed"

    def test_one_channel_failing_does_not_stop_the_other(self, dispatcher, adapters, request_for):
        email, whatsapp = adapters
        email.configure(should_raise=RuntimeError("smtp down"))

        attempts = dispatcher.dispatch(request_for(delivery_method="BOTH"))

        assert [a.status for a in attempts] == ["failed", "sent"]
        assert len(whatsapp.sent_messages) == 1

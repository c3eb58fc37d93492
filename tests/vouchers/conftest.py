"""Shared fixtures for the vouchers test suite."""

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from vouchers.channel import ChannelType, get_channel, reset_channels
from vouchers.channel.rate_limit import reset_rate_limiter
from vouchers.gateway.signature import compute_signature
from vouchers.order.checkout import generate_external_reference
from vouchers.order.order import Order
from vouchers.voucher.voucher import Voucher

SERVER_KEY = "SB-Mid-server-kalanara-test"


@pytest.fixture(scope="session")
def vouchers_bed():
    from vouchers.domain import vouchers

    bed = DomainFixture(vouchers)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(vouchers_bed):
    with vouchers_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _environment(monkeypatch):
    monkeypatch.setenv("MIDTRANS_SERVER_KEY", SERVER_KEY)
    monkeypatch.setenv("APP_URL", "https://spa.example.com")
    for name in ("EMAIL_ADAPTER", "WHATSAPP_ADAPTER", "VOUCHER_CODE_PREFIX", "VOUCHER_VALIDITY_DAYS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _fresh_channels():
    reset_channels()
    reset_rate_limiter()
    yield
    reset_channels()
    reset_rate_limiter()


@pytest.fixture()
def email_channel():
    return get_channel(ChannelType.EMAIL.value)


@pytest.fixture()
def whatsapp_channel():
    return get_channel(ChannelType.WHATSAPP.value)


@pytest.fixture()
def place_order():
    """Factory: persist a PENDING order and return it as stored."""

    def _place(**overrides):
        defaults = {
            "external_reference": generate_external_reference(),
            "customer_name": "Ayu Lestari",
            "customer_email": "ayu@example.com",
            "customer_phone": "081234567890",
            "recipient_name": "Made Wirawan",
            "recipient_email": "made@example.com",
            "recipient_phone": "081298765432",
            "sender_message": "Happy birthday!",
            "delivery_method": "EMAIL",
            "send_to": "RECIPIENT",
            "service_id": "svc-balinese-massage",
            "service_name": "Balinese Massage",
            "service_duration": 90,
            "total_amount": 750000,
        }
        defaults.update(overrides)
        order = Order.place(**defaults)
        repo = current_domain.repository_for(Order)
        repo.add(order)
        return repo.get(order.id)

    return _place


@pytest.fixture()
def signed_notification():
    """Factory: a gateway notification body signed with the test server key."""

    def _build(external_reference, server_key=SERVER_KEY, **overrides):
        body = {
            "order_id": external_reference,
            "transaction_status": "settlement",
            "fraud_status": "accept",
            "status_code": "200",
            "gross_amount": "750000.00",
            "transaction_id": "9aed5972-5b6a-401e-894b-a32c91ed1a3a",
            "payment_type": "bank_transfer",
            "transaction_time": "2026-10-18 10:15:00",
        }
        body.update(overrides)
        body["signature_key"] = compute_signature(
            body["order_id"],
            body["status_code"],
            body["gross_amount"],
            server_key,
        )
        return body

    return _build


def reload_order(order) -> Order:
    return current_domain.repository_for(Order).get(order.id)


def vouchers_for(order) -> list[Voucher]:
    return current_domain.repository_for(Voucher)._dao.query.filter(order_id=str(order.id)).all().items


@pytest.fixture()
def reload():
    return reload_order


@pytest.fixture()
def vouchers_of():
    return vouchers_for

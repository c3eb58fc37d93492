"""Tests for voucher message rendering and formatting helpers."""

from datetime import UTC, datetime

import pytest

from vouchers.delivery.messages import (
    VoucherEmailTemplate,
    VoucherWhatsAppTemplate,
    format_currency,
    format_date,
    format_phone_number,
    verify_url,
)


def _context(**overrides):
    context = {
        "voucher_code": "KSP-2026-ABCDEFGHJKLM",
        "recipient_name": "Made Wirawan",
        "sender_name": "Ayu Lestari",
        "sender_message": "Happy birthday!",
        "service_name": "Balinese Massage",
        "service_duration": 90,
        "amount": 750000,
        "expiry_date": datetime(2027, 10, 18, tzinfo=UTC),
    }
    context.update(overrides)
    return context


class TestFormatting:
    @pytest.mark.parametrize(
        "amount, expected",
        [(0, "Rp 0"), (950, "Rp 950"), (750000, "Rp 750.000"), (1250000, "Rp 1.250.000")],
    )
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize(
        "phone, expected",
        [
            ("081298765432", "6281298765432"),
            ("0812-9876-5432", "6281298765432"),
            ("+62 812 9876 5432", "6281298765432"),
            ("6281298765432", "6281298765432"),
            ("(0361) 123 4567", "623611234567"),
        ],
    )
    def test_format_phone_number(self, phone, expected):
        assert format_phone_number(phone) == expected

    def test_format_date(self):
        assert format_date(datetime(2027, 1, 5, tzinfo=UTC)) == "January 5, 2027"

    def test_verify_url_uses_app_url(self, monkeypatch):
        monkeypatch.setenv("APP_URL", "https://spa.example.com/")
        assert verify_url("KSP-2026-AB") == "https://spa.example.com/verify?code=KSP-2026-AB"

    def test_verify_url_explicit_base(self):
        assert verify_url("A B", base_url="https://x.test") == "https://x.test/verify?code=A%20B"


class TestVoucherEmailTemplate:
    def test_subject_names_sender(self):
        content = VoucherEmailTemplate.render(_context())
        assert content["subject"] == "Ayu Lestari sent you a gift from Kalanara Spa!"

    def test_body_contains_voucher_details(self):
        body = VoucherEmailTemplate.render(_context())["body"]
        assert "Dear Made Wirawan," in body
        assert "KSP-2026-ABCDEFGHJKLM" in body
        assert "Balinese Massage" in body
        assert "Duration: 90 minutes" in body
        assert "Rp 750.000" in body
        assert "October 18, 2027" in body
        assert '"Happy birthday!"' in body
        assert "/verify?code=KSP-2026-ABCDEFGHJKLM" in body

    def test_optional_fields_are_omitted(self):
        body = VoucherEmailTemplate.render(_context(sender_message=None, service_duration=None))["body"]
        assert "Happy birthday" not in body
        assert "Duration" not in body


class TestVoucherWhatsAppTemplate:
    def test_has_no_subject(self):
        assert "subject" not in VoucherWhatsAppTemplate.render(_context())

    def test_body_contains_voucher_details(self):
        body = VoucherWhatsAppTemplate.render(_context())["body"]
        assert "Dear *Made Wirawan*," in body
        assert "*Code:* `KSP-2026-ABCDEFGHJKLM`" in body
        assert "*Duration:* 90 minutes" in body
        assert "*Value:* Rp 750.000" in body
        assert '_"Happy birthday!"_' in body

    def test_missing_sender_name(self):
        body = VoucherWhatsAppTemplate.render(_context(sender_name=None))["body"]
        assert "Someone has gifted you" in body

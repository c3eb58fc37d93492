"""Voucher message templates for the delivery channels.

Each template renders a ``{"subject", "body"}`` dict (WhatsApp has no
subject) from a plain context dict, so the dispatcher never has to know the
message layout.
"""

import os
import re
from datetime import datetime
from urllib.parse import quote

SPA_NAME = "Kalanara Spa"
SPA_PHONE = "+62 361 123 4567"
SPA_ADDRESS = "Jl. Raya Ubud No. 88, Ubud, Bali 80571"
SPA_EMAIL = "hello@kalanaraspa.com"
DEFAULT_APP_URL = "https://kalanara-spa.vercel.app"


def format_currency(amount: int) -> str:
    """Indonesian Rupiah with dot thousands separators, e.g. ``Rp 1.250.000``."""
    return "Rp " + f"{int(amount):,}".replace(",", ".")


def format_phone_number(phone: str) -> str:
    """Normalise a phone number to WhatsApp's digits-only international form.

    Local numbers with a leading 0 get the Indonesian country code (62).
    """
    cleaned = re.sub(r"[^\d+]", "", phone or "")
    if cleaned.startswith("0"):
        cleaned = "62" + cleaned[1:]
    return cleaned.lstrip("+")


def format_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def verify_url(code: str, base_url: str | None = None) -> str:
    base_url = (base_url or os.environ.get("APP_URL") or DEFAULT_APP_URL).rstrip("/")
    return f"{base_url}/verify?code={quote(code)}"


def _gift_line(context: dict) -> str:
    message = context.get("sender_message")
    if not message:
        return ""
    return f'\n"{message}"\n- {context.get("sender_name") or "Someone"}\n'


class VoucherEmailTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        sender = context.get("sender_name") or "Someone"
        lines = [
            f"Dear {context['recipient_name']},",
            "",
            f"{sender} has gifted you a spa experience at {SPA_NAME}!",
            _gift_line(context),
            f"Voucher code: {context['voucher_code']}",
            f"Treatment: {context.get('service_name') or 'Spa treatment'}",
        ]
        if context.get("service_duration"):
            lines.append(f"Duration: {context['service_duration']} minutes")
        lines += [
            f"Value: {format_currency(context['amount'])}",
            f"Valid until: {format_date(context['expiry_date'])}",
            "",
            f"Call us at {SPA_PHONE} to book and present your code on arrival.",
            f"Verify your voucher: {verify_url(context['voucher_code'])}",
            "",
            SPA_NAME,
            SPA_ADDRESS,
            SPA_EMAIL,
        ]
        return {
            "subject": f"{sender} sent you a gift from {SPA_NAME}!",
            "body": "\n".join(lines),
        }


class VoucherWhatsAppTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        sender = context.get("sender_name") or "Someone"
        lines = [
            f"*{SPA_NAME.upper()} GIFT VOUCHER*",
            "",
            f"Dear *{context['recipient_name']}*,",
            "",
            f"{sender} has gifted you a luxurious spa experience at {SPA_NAME}!",
        ]
        if context.get("sender_message"):
            lines += ["", f'_"{context["sender_message"]}"_', f"- {sender}"]
        lines += [
            "",
            "*VOUCHER DETAILS*",
            f"*Code:* `{context['voucher_code']}`",
            f"*Treatment:* {context.get('service_name') or 'Spa treatment'}",
        ]
        if context.get("service_duration"):
            lines.append(f"*Duration:* {context['service_duration']} minutes")
        lines += [
            f"*Value:* {format_currency(context['amount'])}",
            f"*Valid Until:* {format_date(context['expiry_date'])}",
            "",
            "*HOW TO REDEEM*",
            f"1. Call us at {SPA_PHONE} to book",
            "2. Present your voucher code on arrival",
            "3. Enjoy your spa experience!",
            "",
            "*Verify your voucher:*",
            verify_url(context["voucher_code"]),
        ]
        return {"body": "\n".join(lines)}

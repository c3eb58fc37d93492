"""WhatsApp click-to-chat adapter.

There is no WhatsApp sending API behind this adapter: it produces the
``wa.me`` link with the voucher message prefilled, which the storefront
hands to the purchaser to open.
"""

from urllib.parse import quote

from vouchers.channel.whatsapp_port import WhatsAppPort

WHATSAPP_BASE_URL = "https://wa.me"


def build_whatsapp_url(phone: str, text: str) -> str:
    return f"{WHATSAPP_BASE_URL}/{phone}?text={quote(text)}"


class WhatsAppLinkAdapter(WhatsAppPort):
    def send(self, to: str, body: str) -> dict:
        if not to or not to.isdigit():
            return {"message_id": None, "status": "failed", "error": f"Invalid WhatsApp number: {to!r}"}

        return {"message_id": None, "status": "sent", "url": build_whatsapp_url(to, body)}

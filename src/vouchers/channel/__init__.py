"""Channel adapter registry: outbound voucher delivery channels.

Provides singleton access to channel adapters. Fake adapters are used by
default; the real ones are selected through environment variables:

    EMAIL_ADAPTER=resend    ResendEmailAdapter (needs RESEND_API_KEY)
    WHATSAPP_ADAPTER=link   WhatsAppLinkAdapter (click-to-chat links)
"""

import os
from enum import Enum

_channel_instances: dict[str, object] = {}


class ChannelType(Enum):
    EMAIL = "Email"
    WHATSAPP = "WhatsApp"


def _build_email_adapter():
    if os.environ.get("EMAIL_ADAPTER", "fake") == "resend":
        from vouchers.channel.resend_email import ResendEmailAdapter

        return ResendEmailAdapter(
            api_key=os.environ.get("RESEND_API_KEY", ""),
            sender=os.environ.get("EMAIL_FROM", "vouchers@example.com"),
            timeout=float(os.environ.get("DELIVERY_TIMEOUT_SECONDS", "5.0")),
        )

    from vouchers.channel.fake_email import FakeEmailAdapter

    return FakeEmailAdapter()


def _build_whatsapp_adapter():
    if os.environ.get("WHATSAPP_ADAPTER", "fake") == "link":
        from vouchers.channel.whatsapp_link import WhatsAppLinkAdapter

        return WhatsAppLinkAdapter()

    from vouchers.channel.fake_whatsapp import FakeWhatsAppAdapter

    return FakeWhatsAppAdapter()


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type).

    Args:
        channel_type: One of ChannelType values ("Email", "WhatsApp")
    """
    if channel_type not in _channel_instances:
        if channel_type == ChannelType.EMAIL.value:
            _channel_instances[channel_type] = _build_email_adapter()
        elif channel_type == ChannelType.WHATSAPP.value:
            _channel_instances[channel_type] = _build_whatsapp_adapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    """Install a specific adapter for a channel type."""
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()

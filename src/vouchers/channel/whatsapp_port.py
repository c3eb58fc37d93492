"""WhatsApp channel port: abstract interface for WhatsApp messaging."""

from abc import ABC, abstractmethod


class WhatsAppPort(ABC):
    @abstractmethod
    def send(self, to: str, body: str) -> dict:
        """Send a WhatsApp message to a number in international format, digits only.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional),
            url (optional, for link-based adapters)
        """
        ...

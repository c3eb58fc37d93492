"""Email channel port: the interface voucher emails are sent through."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Sends a rendered voucher email to a single address.

    Adapters report delivery problems in the returned dict rather than
    raising; the dispatcher records an exception the same way as a
    "failed" result.
    """

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send a voucher email to ``to``.

        Returns:
            dict with keys: message_id (None when not sent), status ("sent" or
            "failed"), error (optional, the provider's reason for a failure)
        """
        ...

"""Email adapter backed by the Resend HTTP API.

Every request is bounded by ``httpx.Timeout``; a timeout propagates as an
``httpx.TimeoutException`` so the dispatcher records it as a failed attempt.
"""

import httpx
import structlog

from vouchers.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com"


class ResendEmailAdapter(EmailPort):
    def __init__(
        self,
        api_key: str,
        sender: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.client = client or httpx.Client(base_url=RESEND_API_URL, timeout=httpx.Timeout(timeout))

    def close(self):
        self.client.close()

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        if not self.api_key:
            return {"message_id": None, "status": "failed", "error": "RESEND_API_KEY is not configured"}

        payload = {"from": self.sender, "to": [to], "subject": subject, "text": body}
        if html_body:
            payload["html"] = html_body

        try:
            response = self.client.post(
                "/emails",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("resend_rejected", status_code=exc.response.status_code, to=to)
            return {
                "message_id": None,
                "status": "failed",
                "error": f"Resend returned HTTP {exc.response.status_code}",
            }

        return {"message_id": response.json().get("id"), "status": "sent"}

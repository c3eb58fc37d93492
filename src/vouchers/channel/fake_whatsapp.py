"""Fake WhatsApp adapter: records sent messages for testing."""

from uuid import uuid4

from vouchers.channel.whatsapp_port import WhatsAppPort


class FakeWhatsAppAdapter(WhatsAppPort):
    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.should_raise: Exception | None = None
        self.failure_reason = "WhatsApp delivery failed"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "WhatsApp delivery failed",
        should_raise: Exception | None = None,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.should_raise = should_raise

    def send(self, to: str, body: str) -> dict:
        if self.should_raise is not None:
            raise self.should_raise

        if not self.should_succeed:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"wa-{uuid4().hex[:12]}"
        self.sent_messages.append({"message_id": message_id, "to": to, "body": body})

        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent_messages.clear()
        self.should_succeed = True
        self.should_raise = None
        self.failure_reason = "WhatsApp delivery failed"

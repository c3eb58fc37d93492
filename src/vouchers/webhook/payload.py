"""Inbound payment notification payload."""

from pydantic import BaseModel, ConfigDict, StrictStr


class NotificationPayload(BaseModel):
    """Notification body as posted by the gateway.

    Required fields must be present and be strings; anything else the
    gateway sends is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    order_id: StrictStr
    transaction_status: StrictStr
    transaction_id: StrictStr
    status_code: StrictStr
    signature_key: StrictStr
    gross_amount: StrictStr
    payment_type: StrictStr
    fraud_status: StrictStr | None = None
    transaction_time: StrictStr | None = None
    merchant_id: StrictStr | None = None
    status_message: StrictStr | None = None

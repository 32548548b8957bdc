"""
Inbound webhook payload models (Resend delivery events)
"""

from typing import Optional, List
from pydantic import BaseModel, Field
from signalpage.models.enums import DeliveryStatus

# Resend event type -> email_queue status it moves the row to
RESEND_STATUS_BY_EVENT = {
    "email.delivered": DeliveryStatus.DELIVERED,
    "email.opened": DeliveryStatus.OPENED,
    "email.failed": DeliveryStatus.FAILED,
    "email.bounced": DeliveryStatus.FAILED,
}

class ResendFailedInfo(BaseModel):
    reason: str

class ResendBounceInfo(BaseModel):
    message: str = ""
    subType: str = ""
    type: str = ""

class ResendWebhookData(BaseModel):
    email_id: str
    created_at: Optional[str] = None  # when the email was created, not the event
    from_: Optional[str] = Field(default=None, alias="from")
    to: List[str] = []
    subject: Optional[str] = None
    failed: Optional[ResendFailedInfo] = None
    bounce: Optional[ResendBounceInfo] = None

    def failure_reason(self) -> Optional[str]:
        if self.failed:
            return self.failed.reason
        if self.bounce:
            return f"{self.bounce.type}/{self.bounce.subType}: {self.bounce.message}"
        return None

class ResendWebhook(BaseModel):
    type: str
    created_at: str  # when the event occurred
    data: ResendWebhookData

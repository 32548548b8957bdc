"""
Email queue service - outbound emails and their delivery status
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from signalpage.models.enums import DeliveryStatus
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

class EmailQueueService(BaseService):
    """Service for the email_queue table"""

    def __init__(self):
        super().__init__(
            "email_queue",
            [
                "user_id", "to_email", "to_name", "subject", "body_html", "body_text",
                "email_type", "metadata", "status", "resend_id", "sent_at", "error_message",
            ]
        )

    async def enqueue(self, data: Dict[str, Any]) -> ServiceResult:
        return await self.create({**data, "status": DeliveryStatus.PENDING.value})

    async def mark_sent(self, queue_id: str, resend_id: Optional[str]) -> ServiceResult:
        return await self.update(queue_id, {
            "status": DeliveryStatus.SENT.value,
            "resend_id": resend_id,
            "sent_at": datetime.utcnow(),
        })

    async def mark_failed(self, queue_id: str, error_message: str) -> ServiceResult:
        return await self.update(queue_id, {
            "status": DeliveryStatus.FAILED.value,
            "error_message": error_message[:1000],
        })

    async def update_status_by_resend_id(
        self,
        resend_id: str,
        status: DeliveryStatus,
        error_message: Optional[str] = None
    ) -> ServiceResult:
        """
        Apply a delivery event reported by Resend

        Returns:
            ServiceResult with updated rows, RESOURCE_NOT_FOUND for ids sent by another system
        """
        updates: Dict[str, Any] = {"status": status.value}
        if error_message:
            updates["error_message"] = error_message[:1000]

        result = await self.update_where({"resend_id": resend_id}, updates)
        if result.success and not result.data:
            return ServiceResult(
                success=False,
                error=f"No queued email with resend_id {resend_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return result


# Global service instance
_email_queue_service: Optional[EmailQueueService] = None

def get_email_queue_service() -> EmailQueueService:
    """Get the global email queue service instance"""
    global _email_queue_service
    if _email_queue_service is None:
        _email_queue_service = EmailQueueService()
    return _email_queue_service

"""
Webhook API routes - Resend delivery events for queued emails
Webhook signature verification stays in route, database operations use service layer.
"""

import logging
from fastapi import APIRouter, HTTPException, Request

from signalpage.models.webhook import RESEND_STATUS_BY_EVENT, ResendWebhook
from signalpage.services.email_queue_service import get_email_queue_service
from signalpage.utils.webhook_verification import verify_resend_webhook

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/resend")
async def handle_resend_webhook(request: Request):
    """Handle Resend webhooks (email.delivered, email.opened, email.failed, email.bounced)"""
    payload = await verify_resend_webhook(request)
    webhook = ResendWebhook(**payload)

    logger.info(f"📧 Resend webhook received: type={webhook.type}, email_id={webhook.data.email_id}")

    status = RESEND_STATUS_BY_EVENT.get(webhook.type)
    if status is None:
        logger.warning(f"⚠️ Unsupported webhook type: {webhook.type}")
        return {"status": "unsupported", "type": webhook.type, "message": "Webhook type not supported"}

    try:
        reason = webhook.data.failure_reason()
        if reason:
            logger.info(f"❌ Email {webhook.type.split('.')[-1]}: {reason}")

        result = await get_email_queue_service().update_status_by_resend_id(
            resend_id=webhook.data.email_id,
            status=status,
            error_message=reason
        )

        if result.success:
            logger.info(f"✅ Email {status.value}: updated {len(result.data)} record(s) for email_id={webhook.data.email_id}")
            return {"status": "updated", "email_id": webhook.data.email_id, "rows_updated": len(result.data), "action": status.value}

        if result.error_type == "RESOURCE_NOT_FOUND":
            # Email sent by another system; acknowledge so Resend stops retrying
            logger.info(f"ℹ️ Resend webhook: email_id={webhook.data.email_id} not found in database")
            return {"status": "not_found", "email_id": webhook.data.email_id, "message": "Email ID not found in database"}

        logger.error(f"Resend webhook status update failed: {result.error}")
        raise HTTPException(status_code=500, detail="Webhook processing failed")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Resend webhook processing failed: {e}")
        raise HTTPException(status_code=500, detail="Webhook processing failed")

"""
Email service using Resend API
"""

import asyncio
import logging
import resend

from signalpage.config import settings
from signalpage.models.email import EmailRequest, EmailResponse
from signalpage.models.enums import DeliveryStatus
from signalpage.services.email_queue_service import get_email_queue_service

logger = logging.getLogger(__name__)


def _resend_id(result) -> str:
    # Resend returns a dict in current SDKs and an object in older ones
    if isinstance(result, dict):
        return result.get("id")
    return getattr(result, "id", None)


async def send_email_via_resend(request: EmailRequest, user_id: str) -> EmailResponse:
    """
    Queue an email, send it via Resend and record the outcome on the queue row.

    Delivery failures are recorded as status=failed rather than raised, so batch
    senders can keep going; database failures raise RuntimeError.
    """
    queue_service = get_email_queue_service()

    queued = await queue_service.enqueue({
        "user_id": user_id,
        "to_email": request.recipient_email,
        "to_name": request.recipient_name,
        "subject": request.subject,
        "body_html": request.html_body,
        "body_text": request.body,
        "email_type": request.email_type,
        "metadata": request.metadata or {},
    })
    if not queued.success:
        raise RuntimeError(f"Failed to queue email: {queued.error}")

    queue_id = queued.first["id"]

    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set - email {queue_id} left pending")
        return EmailResponse(queue_id=queue_id, status=DeliveryStatus.PENDING.value, recipient=request.recipient_email)

    email_data = {
        "from": settings.FROM_EMAIL,
        "to": [request.recipient_email],
        "subject": request.subject,
        "html": request.html_body or f"<p>{request.body.replace(chr(10), '<br>')}</p>",
        "text": request.body,
    }

    try:
        result = await asyncio.to_thread(resend.Emails.send, email_data)
    except Exception as e:
        logger.error(f"Email sending failed for queue row {queue_id}: {e}")
        await queue_service.mark_failed(queue_id, str(e))
        return EmailResponse(queue_id=queue_id, status=DeliveryStatus.FAILED.value, recipient=request.recipient_email)

    resend_id = _resend_id(result)
    await queue_service.mark_sent(queue_id, resend_id)
    logger.info(f"📧 Email sent via Resend - ID: {resend_id}, To: {request.recipient_email}")

    return EmailResponse(
        queue_id=queue_id,
        status=DeliveryStatus.SENT.value,
        recipient=request.recipient_email,
        resend_id=resend_id
    )

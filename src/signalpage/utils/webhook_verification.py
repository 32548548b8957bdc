"""
Webhook signature verification: Svix for Resend, Stripe's signed events for billing
"""

import json
import logging
from typing import Dict, Any

import stripe
from fastapi import HTTPException, Request
from svix.webhooks import Webhook, WebhookVerificationError

from signalpage.config import settings

logger = logging.getLogger(__name__)


async def verify_resend_webhook(request: Request) -> Dict[str, Any]:
    """
    Verify a Resend webhook signature using Svix.

    Returns:
        Dict[str, Any]: Parsed and verified webhook payload

    Raises:
        HTTPException: 400 if verification fails, 500 if secret not configured
    """
    if not settings.RESEND_WEBHOOK_SECRET:
        logger.error("RESEND_WEBHOOK_SECRET environment variable not configured")
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    payload = (await request.body()).decode("utf-8")

    headers = {
        "svix-id": request.headers.get("svix-id"),
        "svix-timestamp": request.headers.get("svix-timestamp"),
        "svix-signature": request.headers.get("svix-signature"),
    }

    missing_headers = [key for key, value in headers.items() if not value]
    if missing_headers:
        logger.error(f"Missing required webhook headers: {missing_headers}")
        raise HTTPException(status_code=400, detail=f"Missing required webhook headers: {missing_headers}")

    try:
        verified_payload = Webhook(settings.RESEND_WEBHOOK_SECRET).verify(payload, headers)
    except WebhookVerificationError as e:
        logger.error(f"Resend webhook verification failed: {str(e)}")
        raise HTTPException(status_code=400, detail="Webhook verification failed")

    logger.debug("Resend webhook signature verification successful")
    return verified_payload


async def verify_stripe_webhook(request: Request) -> Dict[str, Any]:
    """
    Verify the stripe-signature header.

    Returns:
        Dict[str, Any]: The verified event as plain JSON

    Raises:
        HTTPException: 400 on missing or bad signature, 500 if secret not configured
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    if not signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET environment variable not configured")
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    try:
        stripe.Webhook.construct_event(
            payload=payload,
            sig_header=signature,
            secret=settings.STRIPE_WEBHOOK_SECRET
        )
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Stripe webhook signature verification failed: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")

    return json.loads(payload)

"""
Stripe billing API routes - checkout, customer portal and Stripe webhooks
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, Request

from signalpage.models.subscription import CheckoutRequest, CheckoutResponse
from signalpage.services.stripe_service import (
    BillingError, create_checkout_session, create_portal_session, handle_webhook_event
)
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.webhook_verification import verify_stripe_webhook

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/create-checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: CheckoutRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Start a subscription checkout for the caller"""
    try:
        url = await create_checkout_session(auth.user_id, auth.email, request.interval, request.tier.value)
        return CheckoutResponse(url=url)

    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Checkout error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create checkout session")

@router.post("/create-portal")
async def create_portal(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    """Billing portal link for managing an existing subscription"""
    try:
        url = await create_portal_session(auth.user_id)
        return {"url": url}

    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Portal session error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create portal session")

@router.post("/webhook")
async def stripe_webhook(request: Request):
    """Handle Stripe subscription lifecycle events"""
    event = await verify_stripe_webhook(request)

    try:
        await handle_webhook_event(event)
        return {"received": True}

    except Exception as e:
        logger.error(f"Webhook handler error for {event.get('type')}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Webhook handler failed")

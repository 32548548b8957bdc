"""
Stripe billing service - checkout, customer portal and webhook event handling
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import stripe

from signalpage.config import settings
from signalpage.config.plans import get_price_id_for_tier, get_tier_from_price_id
from signalpage.services.profiles_service import get_profiles_service

logger = logging.getLogger(__name__)

VALID_INTERVALS = ("monthly", "quarterly")
PAID_TIERS = ("pro", "coach")


class BillingError(Exception):
    """Billing request that cannot be fulfilled; status_code is the HTTP status to report"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _require_stripe():
    if not settings.STRIPE_SECRET_KEY:
        raise BillingError("Stripe is not configured", status_code=503)


async def get_or_create_customer(user_id: str, email: Optional[str]) -> str:
    """Return the profile's Stripe customer id, creating and storing one if missing"""
    profiles_service = get_profiles_service()
    profile_result = await profiles_service.get_profile(user_id)
    profile = profile_result.first or {}

    customer_id = profile.get("stripe_customer_id")
    if customer_id:
        return customer_id

    customer = await asyncio.to_thread(
        stripe.Customer.create,
        email=profile.get("email") or email,
        name=profile.get("full_name") or None,
        metadata={"supabase_user_id": user_id}
    )
    customer_id = customer.id
    logger.info(f"Created Stripe customer {customer_id} for user {user_id}")

    if profile_result.success:
        save_result = await profiles_service.update_profile(user_id, {"stripe_customer_id": customer_id})
    else:
        save_result = await profiles_service.save_profile(user_id, email, {"stripe_customer_id": customer_id})
    if not save_result.success:
        logger.error(f"Failed to store Stripe customer for user {user_id}: {save_result.error}")

    return customer_id


async def create_checkout_session(user_id: str, email: Optional[str], interval: Optional[str], tier: str = "pro") -> str:
    """Create a subscription checkout session and return its URL"""
    if interval not in VALID_INTERVALS:
        raise BillingError("Invalid billing interval", status_code=400)
    if tier not in PAID_TIERS:
        raise BillingError("Invalid subscription tier", status_code=400)

    price_id = get_price_id_for_tier(tier, interval)
    if not price_id:
        logger.error(f"Price ID not configured for {tier} {interval}")
        raise BillingError(f"Price not configured for {interval}", status_code=500)

    _require_stripe()
    customer_id = await get_or_create_customer(user_id, email)

    session = await asyncio.to_thread(
        stripe.checkout.Session.create,
        customer=customer_id,
        mode="subscription",
        payment_method_types=["card"],
        line_items=[{"price": price_id, "quantity": 1}],
        success_url=f"{settings.APP_URL}/dashboard?checkout=success",
        cancel_url=f"{settings.APP_URL}/pricing?checkout=canceled",
        metadata={"supabase_user_id": user_id, "tier": tier, "interval": interval}
    )

    logger.info(f"💳 Checkout session {session.id} created for user {user_id} ({tier}/{interval})")
    return session.url


async def create_portal_session(user_id: str) -> str:
    _require_stripe()
    profile = (await get_profiles_service().get_profile(user_id)).first or {}
    customer_id = profile.get("stripe_customer_id")
    if not customer_id:
        raise BillingError("No billing account found. Subscribe to a plan first.", status_code=400)

    session = await asyncio.to_thread(
        stripe.billing_portal.Session.create,
        customer=customer_id,
        return_url=f"{settings.APP_URL}/dashboard"
    )
    return session.url


async def _profile_for_customer(customer_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not customer_id:
        return None
    result = await get_profiles_service().get_by_stripe_customer(customer_id)
    if not result.success:
        if result.error_type == "RESOURCE_NOT_FOUND":
            logger.error(f"No profile found for customer: {customer_id}")
            return None
        raise RuntimeError(f"Profile lookup failed: {result.error}")
    return result.first


async def _apply_profile_update(user_id: str, updates: Dict[str, Any]):
    result = await get_profiles_service().update_profile(user_id, updates)
    if not result.success:
        raise RuntimeError(f"Failed to update profile {user_id}: {result.error}")


async def handle_checkout_complete(session: Dict[str, Any]):
    metadata = session.get("metadata") or {}
    user_id = metadata.get("supabase_user_id")
    tier = metadata.get("tier")

    if not user_id or not tier:
        logger.error("Missing metadata in checkout session")
        return

    subscription_id = session.get("subscription")
    status = "active"
    if subscription_id:
        subscription = await asyncio.to_thread(stripe.Subscription.retrieve, subscription_id)
        status = subscription["status"]

    await _apply_profile_update(user_id, {
        "subscription_tier": tier,
        "subscription_status": status,
        "subscription_id": subscription_id,
        "stripe_customer_id": session.get("customer"),
    })
    logger.info(f"User {user_id} subscribed to {tier}")


async def handle_subscription_change(subscription: Dict[str, Any]):
    profile = await _profile_for_customer(subscription.get("customer"))
    if not profile:
        return

    items = (subscription.get("items") or {}).get("data") or []
    price_id = ((items[0] if items else {}).get("price") or {}).get("id")
    tier = get_tier_from_price_id(price_id)

    await _apply_profile_update(profile["id"], {
        "subscription_tier": tier,
        "subscription_status": subscription.get("status"),
        "subscription_id": subscription.get("id"),
    })
    logger.info(f"Updated subscription for user {profile['id']}: {tier} ({subscription.get('status')})")


async def handle_subscription_canceled(subscription: Dict[str, Any]):
    profile = await _profile_for_customer(subscription.get("customer"))
    if not profile:
        return

    await _apply_profile_update(profile["id"], {
        "subscription_tier": "free",
        "subscription_status": "canceled",
        "subscription_id": None,
    })
    logger.info(f"Subscription canceled for user {profile['id']}")


async def handle_payment_failed(invoice: Dict[str, Any]):
    profile = await _profile_for_customer(invoice.get("customer"))
    if not profile:
        return

    await _apply_profile_update(profile["id"], {"subscription_status": "past_due"})
    logger.info(f"Payment failed for user {profile['id']}")


EVENT_HANDLERS = {
    "checkout.session.completed": handle_checkout_complete,
    "customer.subscription.created": handle_subscription_change,
    "customer.subscription.updated": handle_subscription_change,
    "customer.subscription.deleted": handle_subscription_canceled,
    "invoice.payment_failed": handle_payment_failed,
}


async def handle_webhook_event(event: Dict[str, Any]) -> bool:
    """Dispatch a verified Stripe event; returns False for event types we ignore"""
    event_type = event.get("type")
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info(f"Unhandled event type: {event_type}")
        return False

    logger.info(f"🔔 Processing Stripe event {event.get('id')} ({event_type})")
    await handler((event.get("data") or {}).get("object") or {})
    return True

"""
Subscription service - tier limits, page quota checks and Stripe subscription details
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import stripe

from signalpage.config.plans import BILLING_INTERVALS, get_tier_config
from signalpage.models.subscription import (
    PageCreationCheck, PaymentMethodDetails, StripeDetails, UserSubscription
)
from signalpage.services.profiles_service import get_profiles_service
from signalpage.services.signal_pages_service import get_signal_pages_service

logger = logging.getLogger(__name__)

INACTIVE_REASON = "Your subscription is not active. Please update your payment method."


def build_subscription(profile: Optional[Dict[str, Any]], page_count: int) -> UserSubscription:
    """Combine a profile row and the user's page count into their limits"""
    profile = profile or {}
    tier = profile.get("subscription_tier") or "free"
    status = profile.get("subscription_status") or "active"

    # Free users bypass all limits
    if profile.get("is_free_user"):
        return UserSubscription(
            tier=tier,
            status=status,
            is_free_user=True,
            max_pages=None,
            current_page_count=page_count,
            can_create_page=True
        )

    max_pages = get_tier_config(tier)["max_pages"]
    within_limit = max_pages is None or page_count < max_pages

    return UserSubscription(
        tier=tier,
        status=status,
        is_free_user=False,
        max_pages=max_pages,
        current_page_count=page_count,
        can_create_page=status == "active" and within_limit
    )


def limit_reason(subscription: UserSubscription) -> str:
    plural = "" if subscription.max_pages == 1 else "s"
    return (
        f"You've reached your limit of {subscription.max_pages} page{plural}. "
        "Upgrade to Pro for unlimited pages."
    )


async def get_user_subscription(user_id: str) -> UserSubscription:
    profile_result = await get_profiles_service().get_profile(user_id)
    if not profile_result.success and profile_result.error_type != "RESOURCE_NOT_FOUND":
        raise RuntimeError(f"Failed to load profile: {profile_result.error}")

    count_result = await get_signal_pages_service().count_pages(user_id)
    if not count_result.success:
        raise RuntimeError(f"Failed to count pages: {count_result.error}")

    return build_subscription(profile_result.first, count_result.count or 0)


async def can_user_create_page(user_id: str) -> PageCreationCheck:
    subscription = await get_user_subscription(user_id)

    if subscription.can_create_page:
        return PageCreationCheck(allowed=True, subscription=subscription)

    if subscription.status != "active":
        return PageCreationCheck(allowed=False, reason=INACTIVE_REASON, subscription=subscription)

    return PageCreationCheck(allowed=False, reason=limit_reason(subscription), subscription=subscription)


def build_stripe_details(stripe_subscription: Dict[str, Any], tier: str) -> StripeDetails:
    """Summarize a Stripe subscription (expanded with default_payment_method) for display"""
    items = (stripe_subscription.get("items") or {}).get("data") or []
    item = items[0] if items else {}
    price = item.get("price") or {}
    recurring = price.get("recurring") or {}

    billing_period = "monthly"
    if recurring.get("interval") == "month" and (recurring.get("interval_count") or 1) == 3:
        billing_period = "quarterly"

    configured = BILLING_INTERVALS.get(tier, {}).get(billing_period)
    amount = configured["price"] if configured else (price.get("unit_amount") or 0) / 100

    payment_method = None
    pm = stripe_subscription.get("default_payment_method")
    if isinstance(pm, dict) and pm.get("card"):
        card = pm["card"]
        payment_method = PaymentMethodDetails(
            brand=card.get("brand"),
            last4=card.get("last4"),
            exp_month=card.get("exp_month"),
            exp_year=card.get("exp_year")
        )

    # Newer API versions report the period on the item rather than the subscription
    period_end = item.get("current_period_end") or stripe_subscription.get("current_period_end") or 0

    return StripeDetails(
        current_period_end=period_end,
        cancel_at_period_end=bool(stripe_subscription.get("cancel_at_period_end")),
        billing_period=billing_period,
        price=amount,
        payment_method=payment_method
    )


async def get_stripe_details(user_id: str, subscription: UserSubscription) -> Optional[StripeDetails]:
    """Stripe details for paid users; errors are logged and reported as None"""
    if subscription.tier == "free" or subscription.is_free_user:
        return None

    try:
        profile = (await get_profiles_service().get_profile(user_id)).first or {}
        subscription_id = profile.get("subscription_id")
        if not subscription_id:
            return None

        stripe_subscription = await asyncio.to_thread(
            stripe.Subscription.retrieve, subscription_id, expand=["default_payment_method"]
        )
        return build_stripe_details(_to_dict(stripe_subscription), subscription.tier)

    except Exception as e:
        logger.error(f"Error fetching Stripe details for user {user_id}: {e}")
        return None


def _to_dict(obj: Any) -> Dict[str, Any]:
    if hasattr(obj, "to_dict_recursive"):
        return obj.to_dict_recursive()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)

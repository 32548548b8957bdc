"""
Subscription status API route
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from signalpage.services.subscription_service import get_stripe_details, get_user_subscription
from signalpage.utils.auth import AuthConfig, AuthContext

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/subscription/status")
async def subscription_status(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    """Tier, limits and (for paid users) Stripe billing details"""
    try:
        subscription = await get_user_subscription(auth.user_id)
        stripe_details = await get_stripe_details(auth.user_id, subscription)

        return {
            **subscription.model_dump(by_alias=True),
            "stripeDetails": stripe_details.model_dump(by_alias=True) if stripe_details else None
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting subscription status: {e}")
        raise HTTPException(status_code=500, detail="Failed to get subscription status")

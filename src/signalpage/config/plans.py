"""
Subscription plans configuration - single source of truth for tiers, limits and pricing
"""

from typing import Dict, Any, Optional

from signalpage.config import settings

# max_pages of None means unlimited
SUBSCRIPTION_TIERS: Dict[str, Dict[str, Any]] = {
    "free": {
        "name": "Free",
        "max_pages": 1,
        "features": ["1 Signal Page", "Basic analytics", "Standard themes"],
    },
    "pro": {
        "name": "Pro",
        "max_pages": None,
        "features": [
            "Unlimited Signal Pages",
            "Advanced analytics",
            "All themes",
            "Priority support",
        ],
    },
    "coach": {
        "name": "Interview Coach",
        "max_pages": None,
        "features": [
            "Everything in Pro",
            "AI-generated interview questions",
            "Personalized answer scripts",
            "Gap analysis & preparation tips",
            "Role-specific mock interview prep",
        ],
    },
}

BILLING_INTERVALS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "pro": {
        "monthly": {"name": "Monthly", "price": 19, "interval": "month", "description": "Billed monthly"},
        "quarterly": {
            "name": "Quarterly",
            "price": 49,
            "interval": "quarter",
            "price_per_month": 16,
            "description": "Billed every 3 months",
            "savings": "14% off",
        },
    },
    "coach": {
        "monthly": {"name": "Monthly", "price": 39, "interval": "month", "description": "Billed monthly"},
        "quarterly": {
            "name": "Quarterly",
            "price": 99,
            "interval": "quarter",
            "price_per_month": 33,
            "description": "Billed every 3 months",
            "savings": "15% off",
        },
    },
}


def _price_ids() -> Dict[str, Dict[str, Optional[str]]]:
    return {
        "pro": {
            "monthly": settings.STRIPE_PRO_MONTHLY_PRICE_ID,
            "quarterly": settings.STRIPE_PRO_QUARTERLY_PRICE_ID,
        },
        "coach": {
            "monthly": settings.STRIPE_COACH_MONTHLY_PRICE_ID,
            "quarterly": settings.STRIPE_COACH_QUARTERLY_PRICE_ID,
        },
    }


def get_tier_config(tier: str) -> Dict[str, Any]:
    """Get plan configuration for a tier, falling back to free"""
    return SUBSCRIPTION_TIERS.get(tier, SUBSCRIPTION_TIERS["free"])


def get_price_id_for_tier(tier: str, interval: str = "monthly") -> Optional[str]:
    """Get the configured Stripe price ID for a paid tier and billing interval"""
    return _price_ids().get(tier, {}).get(interval) or None


def get_tier_from_price_id(price_id: Optional[str]) -> str:
    """Resolve a Stripe price ID back to a tier; unknown prices map to free"""
    if not price_id:
        return "free"
    for tier, intervals in _price_ids().items():
        if price_id in [p for p in intervals.values() if p]:
            return tier
    return "free"


def has_coach_access(tier: str) -> bool:
    return tier == "coach"


def has_pro_access(tier: str) -> bool:
    return tier in ("pro", "coach")

"""
Subscription and billing Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from signalpage.models.enums import BillingInterval, PaidTier, SubscriptionTier

class UserSubscription(BaseModel):
    """Serialized with camelCase keys; max_pages of None means unlimited"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tier: str = SubscriptionTier.FREE.value
    status: str = "active"
    is_free_user: bool = False
    max_pages: Optional[int] = 1
    current_page_count: int = 0
    can_create_page: bool = False

class PageCreationCheck(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    subscription: UserSubscription

class PaymentMethodDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    brand: Optional[str] = None
    last4: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None

class StripeDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_period_end: int = 0
    cancel_at_period_end: bool = False
    billing_period: str = BillingInterval.MONTHLY.value
    price: float = 0
    payment_method: Optional[PaymentMethodDetails] = None


class CheckoutRequest(BaseModel):
    interval: Optional[str] = None
    tier: PaidTier = PaidTier.PRO

class CheckoutResponse(BaseModel):
    url: Optional[str] = Field(default=None)

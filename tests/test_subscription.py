"""
Subscription limits and Stripe detail tests
"""

import pytest
from unittest.mock import patch

from signalpage.services.subscription_service import (
    INACTIVE_REASON, build_stripe_details, build_subscription, can_user_create_page, limit_reason
)

from service_mocks import USER_ID, failed, mock_service, not_found, ok


class TestBuildSubscription:

    def test_free_tier_limit(self):
        assert build_subscription({"subscription_tier": "free"}, 0).can_create_page is True
        at_limit = build_subscription({"subscription_tier": "free"}, 1)
        assert at_limit.can_create_page is False
        assert at_limit.max_pages == 1

    def test_missing_profile_defaults_to_free(self):
        subscription = build_subscription(None, 0)
        assert subscription.tier == "free"
        assert subscription.status == "active"
        assert subscription.can_create_page is True

    def test_free_user_bypasses_limits(self):
        subscription = build_subscription({"subscription_tier": "free", "is_free_user": True}, 12)
        assert subscription.max_pages is None
        assert subscription.can_create_page is True

    def test_pro_is_unlimited_while_active(self):
        assert build_subscription({"subscription_tier": "pro"}, 40).can_create_page is True
        past_due = build_subscription({"subscription_tier": "pro", "subscription_status": "past_due"}, 0)
        assert past_due.can_create_page is False

    def test_limit_reason_pluralizes(self):
        single = build_subscription({"subscription_tier": "free"}, 1)
        assert limit_reason(single) == "You've reached your limit of 1 page. Upgrade to Pro for unlimited pages."
        assert "3 pages" in limit_reason(single.model_copy(update={"max_pages": 3}))

    def test_serializes_camel_case(self):
        dumped = build_subscription({"subscription_tier": "free"}, 1).model_dump(by_alias=True)
        assert dumped["maxPages"] == 1
        assert dumped["currentPageCount"] == 1
        assert dumped["canCreatePage"] is False


class TestCanUserCreatePage:

    @pytest.mark.asyncio
    async def test_inactive_subscription_reason(self):
        profiles = mock_service(get_profile=ok([{"subscription_tier": "pro", "subscription_status": "canceled"}]))
        pages = mock_service(count_pages=ok(count=0))

        with patch("signalpage.services.subscription_service.get_profiles_service", return_value=profiles), \
                patch("signalpage.services.subscription_service.get_signal_pages_service", return_value=pages):
            check = await can_user_create_page(USER_ID)

        assert check.allowed is False
        assert check.reason == INACTIVE_REASON

    @pytest.mark.asyncio
    async def test_user_without_profile_gets_free_quota(self):
        profiles = mock_service(get_profile=not_found())
        pages = mock_service(count_pages=ok(count=1))

        with patch("signalpage.services.subscription_service.get_profiles_service", return_value=profiles), \
                patch("signalpage.services.subscription_service.get_signal_pages_service", return_value=pages):
            check = await can_user_create_page(USER_ID)

        assert check.allowed is False
        assert check.reason.startswith("You've reached your limit of 1 page.")

    @pytest.mark.asyncio
    async def test_count_failure_raises(self):
        profiles = mock_service(get_profile=ok([{"subscription_tier": "free"}]))
        pages = mock_service(count_pages=failed("DATABASE_ERROR"))

        with patch("signalpage.services.subscription_service.get_profiles_service", return_value=profiles), \
                patch("signalpage.services.subscription_service.get_signal_pages_service", return_value=pages):
            with pytest.raises(RuntimeError):
                await can_user_create_page(USER_ID)


class TestBuildStripeDetails:

    def test_quarterly_subscription_with_card(self):
        details = build_stripe_details({
            "cancel_at_period_end": True,
            "items": {"data": [{
                "current_period_end": 1793000000,
                "price": {"unit_amount": 4900, "recurring": {"interval": "month", "interval_count": 3}},
            }]},
            "default_payment_method": {
                "card": {"brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2030}
            },
        }, "pro")

        assert details.billing_period == "quarterly"
        assert details.price == 49
        assert details.current_period_end == 1793000000
        assert details.cancel_at_period_end is True
        assert details.payment_method.last4 == "4242"

    def test_unknown_tier_uses_stripe_amount(self):
        details = build_stripe_details({
            "current_period_end": 1790000000,
            "items": {"data": [{"price": {"unit_amount": 2500, "recurring": {"interval": "month"}}}]},
            "default_payment_method": "pm_123",
        }, "legacy")

        assert details.billing_period == "monthly"
        assert details.price == 25
        assert details.current_period_end == 1790000000
        assert details.payment_method is None

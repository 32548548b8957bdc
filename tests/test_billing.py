"""
Stripe billing tests: checkout, webhook routing and subscription lifecycle handlers
"""

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from signalpage.services.stripe_service import BillingError, create_checkout_session, handle_webhook_event

from service_mocks import USER_ID, mock_service, not_found, ok


def _subscription_event(event_type, price_id="price_pro_quarterly", status="active"):
    return {
        "id": "evt_1",
        "type": event_type,
        "data": {"object": {
            "id": "sub_1",
            "customer": "cus_1",
            "status": status,
            "items": {"data": [{"price": {"id": price_id}}]},
        }},
    }


class TestCheckoutRoute:

    def test_invalid_interval(self, client):
        response = client.post("/api/stripe/create-checkout", json={"interval": "yearly"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid billing interval"

    def test_free_tier_cannot_be_purchased(self, client):
        create = MagicMock()
        with patch("stripe.checkout.Session.create", create):
            response = client.post("/api/stripe/create-checkout", json={"interval": "monthly", "tier": "free"})

        assert response.status_code == 422
        create.assert_not_called()

    def test_stripe_not_configured(self, client):
        with patch("signalpage.config.settings.STRIPE_SECRET_KEY", None):
            response = client.post("/api/stripe/create-checkout", json={"interval": "monthly"})
        assert response.status_code == 503

    def test_creates_session_for_existing_customer(self, client):
        profiles = mock_service(get_profile=ok([{"id": USER_ID, "stripe_customer_id": "cus_1"}]))
        create = MagicMock(return_value=SimpleNamespace(id="cs_1", url="https://checkout.stripe.test/cs_1"))

        with patch("signalpage.config.settings.STRIPE_SECRET_KEY", "sk_test"), \
                patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles), \
                patch("stripe.checkout.Session.create", create):
            response = client.post("/api/stripe/create-checkout", json={"interval": "quarterly", "tier": "coach"})

        assert response.status_code == 200
        assert response.json() == {"url": "https://checkout.stripe.test/cs_1"}
        kwargs = create.call_args.kwargs
        assert kwargs["customer"] == "cus_1"
        assert kwargs["line_items"] == [{"price": "price_coach_quarterly", "quantity": 1}]
        assert kwargs["metadata"] == {"supabase_user_id": USER_ID, "tier": "coach", "interval": "quarterly"}
        assert kwargs["success_url"] == "https://signalpage.test/dashboard?checkout=success"

    def test_portal_without_customer(self, client):
        profiles = mock_service(get_profile=ok([{"id": USER_ID}]))
        with patch("signalpage.config.settings.STRIPE_SECRET_KEY", "sk_test"), \
                patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles):
            response = client.post("/api/stripe/create-portal")
        assert response.status_code == 400


class TestWebhookRoute:

    def test_missing_signature(self, anonymous_client):
        response = anonymous_client.post("/api/stripe/webhook", content=b"{}")
        assert response.status_code == 400
        assert response.json()["message"] == "Missing signature"

    def test_verified_event_is_dispatched(self, anonymous_client):
        event = _subscription_event("customer.subscription.updated")
        with patch("signalpage.api.routes.billing.verify_stripe_webhook", AsyncMock(return_value=event)), \
                patch("signalpage.api.routes.billing.handle_webhook_event", AsyncMock(return_value=True)) as handle:
            response = anonymous_client.post("/api/stripe/webhook", content=b"{}")

        assert response.status_code == 200
        assert response.json() == {"received": True}
        handle.assert_awaited_once_with(event)

    def test_handler_failure_is_500(self, anonymous_client):
        event = _subscription_event("customer.subscription.updated")
        with patch("signalpage.api.routes.billing.verify_stripe_webhook", AsyncMock(return_value=event)), \
                patch("signalpage.api.routes.billing.handle_webhook_event", AsyncMock(side_effect=RuntimeError("db"))):
            response = anonymous_client.post("/api/stripe/webhook", content=b"{}")

        assert response.status_code == 500
        assert response.json()["message"] == "Webhook handler failed"


class TestWebhookHandlers:

    @pytest.mark.asyncio
    async def test_subscription_update_sets_tier_from_price(self):
        profiles = mock_service(get_by_stripe_customer=ok([{"id": USER_ID}]), update_profile=ok([{"id": USER_ID}]))

        with patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles):
            handled = await handle_webhook_event(_subscription_event("customer.subscription.updated"))

        assert handled is True
        profiles.update_profile.assert_awaited_once_with(USER_ID, {
            "subscription_tier": "pro",
            "subscription_status": "active",
            "subscription_id": "sub_1",
        })

    @pytest.mark.asyncio
    async def test_cancellation_downgrades_to_free(self):
        profiles = mock_service(get_by_stripe_customer=ok([{"id": USER_ID}]), update_profile=ok([{"id": USER_ID}]))

        with patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles):
            await handle_webhook_event(_subscription_event("customer.subscription.deleted"))

        updates = profiles.update_profile.call_args.args[1]
        assert updates == {"subscription_tier": "free", "subscription_status": "canceled", "subscription_id": None}

    @pytest.mark.asyncio
    async def test_payment_failure_marks_past_due(self):
        profiles = mock_service(get_by_stripe_customer=ok([{"id": USER_ID}]), update_profile=ok([{"id": USER_ID}]))
        event = {"type": "invoice.payment_failed", "data": {"object": {"customer": "cus_1"}}}

        with patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles):
            await handle_webhook_event(event)

        profiles.update_profile.assert_awaited_once_with(USER_ID, {"subscription_status": "past_due"})

    @pytest.mark.asyncio
    async def test_checkout_complete_activates_tier(self):
        profiles = mock_service(update_profile=ok([{"id": USER_ID}]))
        event = {"type": "checkout.session.completed", "data": {"object": {
            "customer": "cus_1",
            "subscription": "sub_1",
            "metadata": {"supabase_user_id": USER_ID, "tier": "pro", "interval": "monthly"},
        }}}

        with patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles), \
                patch("stripe.Subscription.retrieve", MagicMock(return_value={"status": "trialing"})):
            await handle_webhook_event(event)

        profiles.update_profile.assert_awaited_once_with(USER_ID, {
            "subscription_tier": "pro",
            "subscription_status": "trialing",
            "subscription_id": "sub_1",
            "stripe_customer_id": "cus_1",
        })

    @pytest.mark.asyncio
    async def test_unknown_customer_is_ignored(self):
        profiles = mock_service(get_by_stripe_customer=not_found(), update_profile=ok([]))

        with patch("signalpage.services.stripe_service.get_profiles_service", return_value=profiles):
            await handle_webhook_event(_subscription_event("customer.subscription.updated"))

        profiles.update_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_unhandled_event_type(self):
        assert await handle_webhook_event({"type": "charge.refunded", "data": {"object": {}}}) is False


class TestCheckoutSession:

    @pytest.mark.asyncio
    async def test_unpaid_tier_is_rejected_before_price_lookup(self):
        with patch("signalpage.services.stripe_service.get_price_id_for_tier") as price_lookup:
            with pytest.raises(BillingError) as exc_info:
                await create_checkout_session(USER_ID, "jane@example.com", "monthly", "free")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid subscription tier"
        price_lookup.assert_not_called()

# =============================================================================
# tests/test_billing.py - Stripe Billing Tests
# =============================================================================
# Tests for checkout, the customer portal and webhook handling.
# Stripe calls are patched on the `stripe` module, database writes on
# SupabaseClient; nothing leaves the process.
# =============================================================================

from unittest.mock import patch

import pytest
import stripe

from app.exceptions import (
    BillingNotConfiguredError,
    CheckoutError,
    PriceNotConfiguredError,
    WebhookSignatureError,
)
from core.models.subscription import PlanType, SubscriptionStatus
from core.services import billing_service
from core.services.billing_service import (
    BillingService,
    map_subscription_status,
    plan_type_for,
)
from lib.supabase_client import SupabaseClient
from tests.conftest import USER_ID


def _stripe_subscription(status="active", interval="month", **extra):
    subscription = {
        "id": "sub_123",
        "customer": "cus_123",
        "status": status,
        "cancel_at_period_end": False,
        "current_period_start": 1709251200,
        "current_period_end": 1711929600,
        "items": {"data": [{"price": {"recurring": {"interval": interval}}}]},
    }
    subscription.update(extra)
    return subscription


# =============================================================================
# Mapping Helpers
# =============================================================================

class TestStatusMapping:
    """Tests for Stripe status and plan mapping."""

    @pytest.mark.parametrize("stripe_status,expected", [
        ("active", SubscriptionStatus.ACTIVE),
        ("trialing", SubscriptionStatus.TRIALING),
        ("past_due", SubscriptionStatus.PAST_DUE),
        ("canceled", SubscriptionStatus.CANCELED),
        ("incomplete", SubscriptionStatus.INCOMPLETE),
        ("incomplete_expired", SubscriptionStatus.INCOMPLETE),
        ("unpaid", SubscriptionStatus.INCOMPLETE),
        ("paused", SubscriptionStatus.INCOMPLETE),
        (None, SubscriptionStatus.INCOMPLETE),
    ])
    def test_map_status(self, stripe_status, expected):
        assert map_subscription_status(stripe_status) == expected

    def test_yearly_interval(self):
        assert plan_type_for(_stripe_subscription(interval="year")) == PlanType.YEARLY

    def test_monthly_interval_and_missing_items(self):
        assert plan_type_for(_stripe_subscription()) == PlanType.MONTHLY
        assert plan_type_for({"items": {"data": []}}) == PlanType.MONTHLY

    def test_price_for_plan(self):
        assert BillingService.price_id_for("yearly") == "price_yearly"
        assert BillingService.price_id_for("monthly") == "price_monthly"
        assert BillingService.price_id_for(None) == "price_monthly"

    def test_missing_price(self):
        with patch.object(billing_service.settings, "STRIPE_YEARLY_PRICE_ID", ""):
            with pytest.raises(PriceNotConfiguredError):
                BillingService.price_id_for("yearly")


# =============================================================================
# Checkout and Portal
# =============================================================================

class TestCheckout:
    """Tests for BillingService.create_checkout."""

    def test_existing_customer(self, subscription_row):
        with patch.object(SupabaseClient, "fetch_subscription", return_value=subscription_row), \
                patch("stripe.Customer.create") as create_customer, \
                patch("stripe.checkout.Session.create",
                      return_value={"id": "cs_1", "url": "https://checkout.stripe.com/cs_1"}) as create_session:
            url = BillingService.create_checkout(USER_ID, "sam@example.com", "yearly")

        assert url == "https://checkout.stripe.com/cs_1"
        create_customer.assert_not_called()
        kwargs = create_session.call_args.kwargs
        assert kwargs["customer"] == "cus_123"
        assert kwargs["mode"] == "subscription"
        assert kwargs["line_items"] == [{"price": "price_yearly", "quantity": 1}]
        assert kwargs["success_url"] == "https://tranquil.test/dashboard?session_id={CHECKOUT_SESSION_ID}"
        assert kwargs["cancel_url"] == "https://tranquil.test/pricing"
        assert kwargs["metadata"] == {"userId": USER_ID}

    def test_new_customer_gets_incomplete_row(self):
        with patch.object(SupabaseClient, "fetch_subscription", return_value=None), \
                patch.object(SupabaseClient, "insert_row") as insert, \
                patch("stripe.Customer.create", return_value={"id": "cus_new"}) as create_customer, \
                patch("stripe.checkout.Session.create", return_value={"id": "cs_2", "url": "https://pay"}):
            BillingService.create_checkout(USER_ID, "sam@example.com", "monthly")

        create_customer.assert_called_once_with(email="sam@example.com", metadata={"userId": USER_ID})
        table, data = insert.call_args.args
        assert table == "subscriptions"
        assert data == {
            "user_id": USER_ID,
            "stripe_customer_id": "cus_new",
            "status": "incomplete",
            "plan_type": "monthly",
        }

    def test_stripe_failure_becomes_checkout_error(self, subscription_row):
        with patch.object(SupabaseClient, "fetch_subscription", return_value=subscription_row), \
                patch("stripe.checkout.Session.create", side_effect=RuntimeError("card declined")):
            with pytest.raises(CheckoutError) as exc_info:
                BillingService.create_checkout(USER_ID, None, "monthly")

        assert exc_info.value.status_code == 500

    def test_not_configured(self):
        with patch.object(billing_service.settings, "STRIPE_SECRET_KEY", ""):
            with pytest.raises(BillingNotConfiguredError):
                BillingService.create_checkout(USER_ID, None, "monthly")


class TestPortal:
    """Tests for BillingService.portal_url."""

    def test_portal_for_customer(self, subscription_row):
        with patch.object(SupabaseClient, "fetch_subscription", return_value=subscription_row), \
                patch("stripe.billing_portal.Session.create",
                      return_value={"url": "https://billing.stripe.com/p1"}) as create:
            url = BillingService.portal_url(USER_ID)

        assert url == "https://billing.stripe.com/p1"
        create.assert_called_once_with(customer="cus_123", return_url="https://tranquil.test/profile")

    def test_no_customer(self):
        with patch.object(SupabaseClient, "fetch_subscription", return_value=None), \
                patch("stripe.billing_portal.Session.create") as create:
            assert BillingService.portal_url(USER_ID) is None
        create.assert_not_called()


# =============================================================================
# Webhooks
# =============================================================================

class TestWebhookSignature:
    """Tests for BillingService.construct_event."""

    def test_missing_signature(self):
        with pytest.raises(WebhookSignatureError) as exc_info:
            BillingService.construct_event(b"{}", None)
        assert exc_info.value.message == "No signature"
        assert exc_info.value.status_code == 400

    def test_invalid_signature(self):
        error = stripe.SignatureVerificationError("bad", "t=1,v1=abc")
        with patch("stripe.Webhook.construct_event", side_effect=error):
            with pytest.raises(WebhookSignatureError) as exc_info:
                BillingService.construct_event(b"{}", "t=1,v1=abc")
        assert exc_info.value.message == "Invalid signature"

    def test_valid_signature(self):
        event = {"type": "invoice.payment_succeeded"}
        with patch("stripe.Webhook.construct_event", return_value=event) as construct:
            assert BillingService.construct_event(b"{}", "t=1,v1=ok") == event
        construct.assert_called_once_with(b"{}", "t=1,v1=ok", "whsec_test_123")


class TestWebhookEvents:
    """Tests for BillingService.handle_event."""

    def _handle(self, event):
        with patch.object(SupabaseClient, "update_rows", return_value=[{"user_id": USER_ID}]) as update:
            user_ids = BillingService.handle_event(event)
        return user_ids, update

    def test_checkout_completed(self):
        event = {
            "type": "checkout.session.completed",
            "data": {"object": {"customer": "cus_123", "subscription": "sub_123"}},
        }
        with patch("stripe.Subscription.retrieve",
                   return_value=_stripe_subscription(interval="year")) as retrieve:
            user_ids, update = self._handle(event)

        retrieve.assert_called_once_with("sub_123")
        assert user_ids == [USER_ID]
        table, data, column, value = update.call_args.args
        assert (table, column, value) == ("subscriptions", "stripe_customer_id", "cus_123")
        assert data["status"] == "active"
        assert data["plan_type"] == "yearly"
        assert data["stripe_subscription_id"] == "sub_123"
        assert data["current_period_start"] == "2024-03-01T00:00:00+00:00"

    def test_checkout_without_subscription_is_ignored(self):
        event = {"type": "checkout.session.completed", "data": {"object": {"customer": "cus_123"}}}
        user_ids, update = self._handle(event)
        assert user_ids == []
        update.assert_not_called()

    def test_subscription_updated(self):
        subscription = _stripe_subscription(status="unpaid", cancel_at_period_end=True)
        user_ids, update = self._handle({
            "type": "customer.subscription.updated",
            "data": {"object": subscription},
        })

        data = update.call_args.args[1]
        assert data["status"] == "incomplete"
        assert data["cancel_at_period_end"] is True
        assert user_ids == [USER_ID]

    def test_period_read_from_items(self):
        """Newer API versions only carry the period on subscription items."""
        subscription = _stripe_subscription()
        del subscription["current_period_end"]
        subscription["items"]["data"][0]["current_period_end"] = 1711929600

        _, update = self._handle({
            "type": "customer.subscription.created",
            "data": {"object": subscription},
        })
        assert update.call_args.args[1]["current_period_end"] == "2024-04-01T00:00:00+00:00"

    def test_subscription_deleted(self):
        _, update = self._handle({
            "type": "customer.subscription.deleted",
            "data": {"object": _stripe_subscription()},
        })
        assert update.call_args.args[1] == {"status": "canceled", "cancel_at_period_end": False}

    def test_payment_failed(self):
        _, update = self._handle({
            "type": "invoice.payment_failed",
            "data": {"object": {"customer": "cus_123"}},
        })
        assert update.call_args.args[1] == {"status": "past_due"}

    @pytest.mark.parametrize("event_type", ["invoice.payment_succeeded", "customer.created"])
    def test_events_without_changes(self, event_type):
        user_ids, update = self._handle({"type": event_type, "data": {"object": {"customer": "cus_123"}}})
        assert user_ids == []
        update.assert_not_called()

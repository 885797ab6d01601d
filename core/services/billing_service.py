# =============================================================================
# core/services/billing_service.py - Stripe Billing
# =============================================================================
# Checkout, customer portal and webhook handling for premium subscriptions.
#
# The `subscriptions` table mirrors Stripe: checkout creates the customer
# and an `incomplete` row, webhooks keep status, plan and billing periods
# in sync. Rows are matched by stripe_customer_id.
#
# Stripe is configured lazily, so the API starts (and free features work)
# without any Stripe keys.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

import stripe

from app.config import settings
from app.exceptions import (
    BillingNotConfiguredError,
    CheckoutError,
    PriceNotConfiguredError,
    WebhookSignatureError,
)
from lib.supabase_client import SupabaseClient
from core.models.subscription import PlanType, SubscriptionStatus

logger = logging.getLogger(__name__)

# Stripe statuses we keep as-is; everything else is stored as incomplete
_DIRECT_STATUSES = {
    "active": SubscriptionStatus.ACTIVE,
    "canceled": SubscriptionStatus.CANCELED,
    "past_due": SubscriptionStatus.PAST_DUE,
    "trialing": SubscriptionStatus.TRIALING,
}


def map_subscription_status(status: str | None) -> SubscriptionStatus:
    """
    Map a Stripe subscription status to one we store.

    incomplete, incomplete_expired, unpaid, paused and anything unknown
    collapse into INCOMPLETE.
    """
    return _DIRECT_STATUSES.get(status or "", SubscriptionStatus.INCOMPLETE)


def _lookup(obj: Any, *path: str | int) -> Any:
    """Walk nested Stripe objects / dicts, None when any step is missing."""
    for key in path:
        if obj is None:
            return None
        try:
            obj = obj[key]
        except (KeyError, IndexError, TypeError, AttributeError):
            return None
    return obj


def _timestamp(epoch: int | None) -> str | None:
    """Stripe epoch seconds -> ISO 8601 (UTC)."""
    if not epoch:
        return None
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


def _period(subscription: Any, field: str) -> str | None:
    """
    Billing period boundary of a subscription.

    Newer Stripe API versions moved current_period_* from the subscription
    to its items, so fall back to the first item.
    """
    epoch = _lookup(subscription, field) or _lookup(subscription, "items", "data", 0, field)
    return _timestamp(epoch)


def plan_type_for(subscription: Any) -> PlanType:
    interval = _lookup(subscription, "items", "data", 0, "price", "recurring", "interval")
    return PlanType.YEARLY if interval == "year" else PlanType.MONTHLY


class BillingService:
    """Service for Stripe checkout, portal and webhooks."""

    @staticmethod
    def configure() -> None:
        """
        Set the Stripe API key on first use.

        Raises:
            BillingNotConfiguredError: If STRIPE_SECRET_KEY is missing
        """
        if not settings.STRIPE_SECRET_KEY:
            raise BillingNotConfiguredError("STRIPE_SECRET_KEY")
        if stripe.api_key != settings.STRIPE_SECRET_KEY:
            stripe.api_key = settings.STRIPE_SECRET_KEY
            logger.info("Stripe configured")

    @staticmethod
    def price_id_for(plan_type: str | None) -> str:
        """
        Stripe price for a plan. "yearly" picks the yearly price, anything
        else the monthly one.

        Raises:
            PriceNotConfiguredError: If that price ID isn't set
        """
        if plan_type == PlanType.YEARLY.value:
            price_id = settings.STRIPE_YEARLY_PRICE_ID
        else:
            price_id = settings.STRIPE_MONTHLY_PRICE_ID
        if not price_id:
            raise PriceNotConfiguredError(plan_type or PlanType.MONTHLY.value)
        return price_id

    @staticmethod
    def get_or_create_customer(user_id: str, email: str | None, plan_type: str | None) -> str:
        """
        Return the user's Stripe customer ID, creating one if needed.

        A new customer gets an `incomplete` subscriptions row so later
        webhooks can find the user by stripe_customer_id.
        """
        existing = SupabaseClient.fetch_subscription(user_id)
        if existing and existing.get("stripe_customer_id"):
            return existing["stripe_customer_id"]

        customer = stripe.Customer.create(email=email, metadata={"userId": user_id})
        customer_id = customer["id"]

        plan = PlanType.YEARLY if plan_type == PlanType.YEARLY.value else PlanType.MONTHLY
        SupabaseClient.insert_row("subscriptions", {
            "user_id": user_id,
            "stripe_customer_id": customer_id,
            "status": SubscriptionStatus.INCOMPLETE.value,
            "plan_type": plan.value,
        })
        logger.info(f"Created Stripe customer {customer_id} for user {user_id}")
        return customer_id

    @staticmethod
    def create_checkout(user_id: str, email: str | None, plan_type: str | None) -> str:
        """
        Start a subscription checkout.

        Args:
            user_id: Signed-in user
            email: Used when a Stripe customer has to be created
            plan_type: "monthly" or "yearly"

        Returns:
            Hosted Checkout URL to redirect the user to

        Raises:
            BillingNotConfiguredError: If Stripe isn't configured
            PriceNotConfiguredError: If the plan's price ID is missing
            CheckoutError: If Stripe or the database call fails
        """
        BillingService.configure()
        price_id = BillingService.price_id_for(plan_type)

        try:
            customer_id = BillingService.get_or_create_customer(user_id, email, plan_type)
            session = stripe.checkout.Session.create(
                customer=customer_id,
                mode="subscription",
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{settings.app_url}/dashboard?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{settings.app_url}/pricing",
                metadata={"userId": user_id},
            )
        except Exception as e:
            logger.error(f"Checkout error for user {user_id}: {e}")
            raise CheckoutError(str(e))

        logger.info(f"Checkout session {session['id']} created for user {user_id}")
        return session["url"]

    @staticmethod
    def portal_url(user_id: str) -> str | None:
        """
        Billing portal URL for the user, None when they never checked out.
        """
        subscription = SupabaseClient.fetch_subscription(user_id)
        customer_id = (subscription or {}).get("stripe_customer_id")
        if not customer_id:
            return None

        BillingService.configure()
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=f"{settings.app_url}/profile",
        )
        return session["url"]

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def construct_event(payload: bytes, signature: str | None) -> Any:
        """
        Verify a webhook payload against STRIPE_WEBHOOK_SECRET.

        Raises:
            WebhookSignatureError: "No signature" / "Invalid signature"
        """
        if not signature:
            raise WebhookSignatureError("No signature")

        BillingService.configure()
        try:
            return stripe.Webhook.construct_event(
                payload, signature, settings.STRIPE_WEBHOOK_SECRET
            )
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise WebhookSignatureError("Invalid signature")

    @staticmethod
    def _update_by_customer(customer_id: str | None, data: dict[str, Any]) -> list[str]:
        """Update the customer's subscription rows, return their user IDs."""
        if not customer_id:
            return []
        rows = SupabaseClient.update_rows("subscriptions", data, "stripe_customer_id", customer_id)
        if not rows:
            logger.warning(f"No subscription row for Stripe customer {customer_id}")
        return [str(row["user_id"]) for row in rows if row.get("user_id")]

    @staticmethod
    def handle_checkout_completed(session: Any) -> list[str]:
        subscription_id = _lookup(session, "subscription")
        if not subscription_id:
            return []

        subscription = stripe.Subscription.retrieve(subscription_id)
        return BillingService._update_by_customer(_lookup(session, "customer"), {
            "stripe_subscription_id": subscription_id,
            "status": map_subscription_status(_lookup(subscription, "status")).value,
            "plan_type": plan_type_for(subscription).value,
            "current_period_start": _period(subscription, "current_period_start"),
            "current_period_end": _period(subscription, "current_period_end"),
            "cancel_at_period_end": bool(_lookup(subscription, "cancel_at_period_end")),
        })

    @staticmethod
    def handle_subscription_updated(subscription: Any) -> list[str]:
        return BillingService._update_by_customer(_lookup(subscription, "customer"), {
            "stripe_subscription_id": _lookup(subscription, "id"),
            "status": map_subscription_status(_lookup(subscription, "status")).value,
            "current_period_start": _period(subscription, "current_period_start"),
            "current_period_end": _period(subscription, "current_period_end"),
            "cancel_at_period_end": bool(_lookup(subscription, "cancel_at_period_end")),
        })

    @staticmethod
    def handle_subscription_deleted(subscription: Any) -> list[str]:
        return BillingService._update_by_customer(_lookup(subscription, "customer"), {
            "status": SubscriptionStatus.CANCELED.value,
            "cancel_at_period_end": False,
        })

    @staticmethod
    def handle_payment_failed(invoice: Any) -> list[str]:
        return BillingService._update_by_customer(_lookup(invoice, "customer"), {
            "status": SubscriptionStatus.PAST_DUE.value,
        })

    @staticmethod
    def handle_event(event: Any) -> list[str]:
        """
        Apply a verified webhook event to the subscriptions table.

        Args:
            event: Stripe Event (or its dict form)

        Returns:
            IDs of users whose subscription row changed
        """
        event_type = _lookup(event, "type")
        obj = _lookup(event, "data", "object")
        logger.info(f"Stripe webhook: {event_type}")

        if event_type == "checkout.session.completed":
            return BillingService.handle_checkout_completed(obj)
        if event_type in ("customer.subscription.created", "customer.subscription.updated"):
            return BillingService.handle_subscription_updated(obj)
        if event_type == "customer.subscription.deleted":
            return BillingService.handle_subscription_deleted(obj)
        if event_type == "invoice.payment_succeeded":
            # Subscription events carry the state change
            logger.info(f"Payment succeeded for customer: {_lookup(obj, 'customer')}")
            return []
        if event_type == "invoice.payment_failed":
            return BillingService.handle_payment_failed(obj)

        logger.info(f"Unhandled event type: {event_type}")
        return []

# =============================================================================
# core/models/subscription.py - Subscription Schemas
# =============================================================================
# Mirror of the Stripe subscription state, one row per user in the
# `subscriptions` table. Rows are only written by the billing service
# (checkout + webhooks); everyone else reads them.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SubscriptionStatus(str, Enum):
    """
    Subscription states we store.

    Stripe has more (incomplete_expired, unpaid, paused); those collapse
    into INCOMPLETE, see BillingService.map_subscription_status.
    """
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    TRIALING = "trialing"
    INCOMPLETE = "incomplete"


# Statuses that unlock premium programs
PREMIUM_STATUSES = frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING})


class PlanType(str, Enum):
    """Billing interval of the subscription."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Subscription(BaseModel):
    """Schema for a subscriptions row."""

    id: str | None = None
    user_id: str
    stripe_customer_id: str
    stripe_subscription_id: str | None = None
    status: SubscriptionStatus = SubscriptionStatus.INCOMPLETE
    plan_type: PlanType = PlanType.MONTHLY
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_premium(self) -> bool:
        return self.status in PREMIUM_STATUSES


class SubscriptionSummary(BaseModel):
    """What the client needs to render plan badges."""

    status: SubscriptionStatus | None = Field(
        default=None,
        description="None for users on the free plan"
    )
    plan_type: PlanType | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    is_premium: bool = False

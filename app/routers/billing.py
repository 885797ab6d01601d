# =============================================================================
# app/routers/billing.py - Stripe Endpoints
# =============================================================================
# Checkout, customer portal and the Stripe webhook.
#
# The webhook is called by Stripe, not the browser: it is authenticated
# by its signature and answers with the bodies Stripe's dashboard shows.
# =============================================================================

import asyncio
import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from app.auth import AuthUser, get_current_user_optional
from app.config import settings
from app.dependencies import CurrentUser
from app.exceptions import BillingNotConfiguredError, WebhookSignatureError
from app.websocket.broadcast import publish_subscription_updated
from core.models.subscription import PlanType
from core.services.billing_service import BillingService
from core.services.user_context_service import UserContextService

logger = logging.getLogger(__name__)

router = APIRouter()


class CheckoutRequest(BaseModel):
    """Plan chosen on the pricing page."""
    plan_type: PlanType = Field(default=PlanType.MONTHLY, alias="planType")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {"example": {"planType": "yearly"}},
    }


class CheckoutResponse(BaseModel):
    url: str = Field(..., description="Stripe-hosted Checkout page")


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(request: CheckoutRequest, user: CurrentUser):
    """
    Create a Checkout session for a subscription.

    The client redirects to the returned URL.

    Raises:
        401: If not authenticated
        500: If prices are missing or Stripe fails
    """
    url = BillingService.create_checkout(str(user.id), user.email, request.plan_type.value)
    return CheckoutResponse(url=url)


@router.get("/portal")
def open_portal(user: AuthUser | None = Depends(get_current_user_optional)):
    """
    Redirect to the Stripe billing portal.

    Anonymous visitors go to /login, users who never subscribed to
    /pricing, and any error lands on /profile.
    """
    if user is None:
        return RedirectResponse(f"{settings.app_url}/login", status_code=307)

    try:
        url = BillingService.portal_url(str(user.id))
    except Exception as e:
        logger.error(f"Portal error: {e}")
        return RedirectResponse(f"{settings.app_url}/profile", status_code=307)

    if url is None:
        return RedirectResponse(f"{settings.app_url}/pricing", status_code=307)
    return RedirectResponse(url, status_code=307)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="stripe-signature"),
):
    """
    Receive Stripe events.

    Responses:
        200 {"received": true}
        400 {"error": "No signature"} / {"error": "Invalid signature"}
        500 {"error": "Webhook handler failed"}
    """
    payload = await request.body()

    try:
        event = BillingService.construct_event(payload, stripe_signature)
    except WebhookSignatureError as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    except BillingNotConfiguredError as e:
        logger.error(f"Webhook received but billing is not configured: {e.message}")
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed"})

    try:
        user_ids = await asyncio.to_thread(BillingService.handle_event, event)
    except Exception as e:
        logger.exception(f"Webhook handler error: {e}")
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed"})

    for user_id in user_ids:
        UserContextService.invalidate(user_id)
        await asyncio.to_thread(publish_subscription_updated, user_id)

    return {"received": True}

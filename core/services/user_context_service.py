# =============================================================================
# core/services/user_context_service.py - Auth / User Context
# =============================================================================
# Loads and caches the signed-in user's profile + subscription.
#
# Rules:
# - Profile and subscription are fetched in parallel, bounded by
#   USER_CONTEXT_TIMEOUT_SECONDS.
# - A missing or failing subscription means the free plan.
# - A failing profile fetch is logged and yields profile = None.
# - Concurrent loads for one user share a single fetch; results are
#   reused for USER_CONTEXT_CACHE_TTL_SECONDS unless forced.
# - Auth events decide between reuse, forced refresh and clearing.
# =============================================================================

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from app.config import settings
from app.auth.models import AuthUser
from lib.fetch_guard import FetchGuard
from lib.supabase_client import SupabaseClient
from core.models.profile import Profile
from core.models.subscription import PREMIUM_STATUSES, SubscriptionStatus, SubscriptionSummary
from core.models.user_context import AuthEvent, UserContext

logger = logging.getLogger(__name__)


# Shared by every request in this process
user_context_guard = FetchGuard(
    "user context",
    ttl=settings.USER_CONTEXT_CACHE_TTL_SECONDS,
    timeout=settings.USER_CONTEXT_TIMEOUT_SECONDS,
)

# Events that (re)load the context; USER_UPDATED additionally forces it
LOAD_EVENTS = {AuthEvent.INITIAL_SESSION, AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED}


def is_premium(subscription: dict[str, Any] | None) -> bool:
    """A user is premium iff their subscription is active or trialing."""
    if not subscription:
        return False
    try:
        return SubscriptionStatus(subscription.get("status")) in PREMIUM_STATUSES
    except ValueError:
        return False


class UserContextService:
    """Service for the cached per-user context."""

    @staticmethod
    def _fetch_profile(user_id: str) -> Profile | None:
        try:
            row = SupabaseClient.fetch_profile(user_id)
            return Profile.model_validate(row) if row else None
        except Exception as e:
            logger.error(f"Error fetching profile for {user_id}: {e}")
            return None

    @staticmethod
    def _fetch_subscription(user_id: str) -> dict[str, Any] | None:
        try:
            return SupabaseClient.fetch_subscription(user_id)
        except Exception as e:
            # No readable subscription means the free plan
            logger.warning(f"Subscription fetch failed for {user_id}, treating as free: {e}")
            return None

    @staticmethod
    def build_context(
        user: AuthUser,
        profile: Profile | None,
        subscription: dict[str, Any] | None,
    ) -> UserContext:
        """Combine fetched rows into a UserContext."""
        premium = is_premium(subscription)
        summary = SubscriptionSummary(is_premium=premium)
        if subscription:
            summary = SubscriptionSummary(
                status=subscription.get("status"),
                plan_type=subscription.get("plan_type"),
                current_period_end=subscription.get("current_period_end"),
                cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
                is_premium=premium,
            )

        return UserContext(
            user_id=str(user.id),
            email=user.email or (profile.email if profile else None),
            profile=profile,
            subscription=summary,
            is_premium=premium,
            loaded_at=datetime.now(timezone.utc),
        )

    @staticmethod
    async def load(user: AuthUser, force: bool = False) -> UserContext:
        """
        Get the user's context, loading it if needed.

        Args:
            user: The authenticated user
            force: Ignore the cache and any in-flight load

        Returns:
            UserContext

        Raises:
            FetchTimeoutError: If the fetches don't finish in time
        """
        user_id = str(user.id)

        async def loader() -> UserContext:
            profile, subscription = await asyncio.gather(
                asyncio.to_thread(UserContextService._fetch_profile, user_id),
                asyncio.to_thread(UserContextService._fetch_subscription, user_id),
            )
            return UserContextService.build_context(user, profile, subscription)

        return await user_context_guard.run(user_id, loader, force=force)

    @staticmethod
    async def refresh(user: AuthUser) -> UserContext:
        """Force a reload, e.g. after the profile was edited."""
        return await UserContextService.load(user, force=True)

    @staticmethod
    def invalidate(user_id: UUID | str) -> None:
        """Drop the cached context so the next request reloads it."""
        user_context_guard.invalidate(str(user_id))

    @staticmethod
    async def handle_auth_event(event: AuthEvent, user: AuthUser) -> UserContext | None:
        """
        React to a Supabase Auth state change.

        - INITIAL_SESSION / SIGNED_IN / TOKEN_REFRESHED: load, reusing any
          cached or in-flight context
        - USER_UPDATED: force a fresh load
        - SIGNED_OUT: clear the cached context
        - anything else: ignored

        Returns:
            The current context, or None after sign-out / ignored events
        """
        logger.debug(f"Auth event {event.value} for user {user.id}")

        if event == AuthEvent.SIGNED_OUT:
            UserContextService.invalidate(user.id)
            return None
        if event == AuthEvent.USER_UPDATED:
            return await UserContextService.refresh(user)
        if event in LOAD_EVENTS:
            return await UserContextService.load(user)
        return None

# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the signed-in user's context.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# The client forwards its auth state changes to POST /events so the
# cached context stays in step with the session.
# =============================================================================

import logging
from fastapi import APIRouter, Depends, Query, Response, status

from app.auth.dependencies import get_current_user
from app.auth.models import AuthEventRequest, AuthUser, TokenVerification
from core.models.user_context import UserContext
from core.services.user_context_service import UserContextService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserContext)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user),
    force: bool = Query(default=False, description="Reload instead of using the cached context"),
) -> UserContext:
    """
    Get the current user's context: profile, subscription and premium flag.

    Concurrent calls share one load. Pass force=true to retry after a
    timeout.

    Raises:
        401: If not authenticated
        504: If the profile / subscription fetch times out
    """
    return await UserContextService.load(user, force=force)


@router.get("/verify", response_model=TokenVerification)
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> TokenVerification:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return TokenVerification(user_id=str(user.id), email=user.email)


@router.post(
    "/events",
    response_model=UserContext | None,
    responses={204: {"description": "Context cleared or event ignored"}},
)
async def auth_event(
    request: AuthEventRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Forward a Supabase Auth state change.

    - INITIAL_SESSION / SIGNED_IN / TOKEN_REFRESHED: returns the context
    - USER_UPDATED: reloads and returns the context
    - SIGNED_OUT: clears the cached context (204)
    """
    context = await UserContextService.handle_auth_event(request.event, user)
    if context is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return context


@router.post("/refresh", response_model=UserContext)
async def refresh_context(
    user: AuthUser = Depends(get_current_user)
) -> UserContext:
    """Reload the context now, e.g. after returning from checkout."""
    return await UserContextService.refresh(user)

# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Usage:
#   @router.get("/programs")
#   async def list_programs(context: UserContextDep):
#       ... context.is_premium ...
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import AuthUser, get_current_user
from core.models.user_context import UserContext
from core.services.user_context_service import UserContextService


async def get_user_context(
    user: AuthUser = Depends(get_current_user),
) -> UserContext:
    """
    Get the signed-in user's cached context (profile + subscription).

    Concurrent requests for one user share a single load.
    """
    return await UserContextService.load(user)


# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
UserContextDep = Annotated[UserContext, Depends(get_user_context)]

# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import decode_token, get_current_user, get_current_user_optional
from app.auth.models import AuthEventRequest, AuthUser, TokenVerification

__all__ = [
    "decode_token",
    "get_current_user",
    "get_current_user_optional",
    "AuthEventRequest",
    "AuthUser",
    "TokenVerification",
]

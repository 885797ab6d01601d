# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import Optional

from core.models.user_context import AuthEvent


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class AuthEventRequest(BaseModel):
    """
    Auth state change forwarded by the client's Supabase listener.

    Example:
        {"event": "TOKEN_REFRESHED"}
    """
    event: AuthEvent


class TokenVerification(BaseModel):
    """Response of GET /auth/verify."""
    valid: bool = True
    user_id: str
    email: Optional[str] = None

# =============================================================================
# core/models/user_context.py - User Context Schema
# =============================================================================
# The cached view of "who is signed in": auth identity, profile row,
# subscription summary and the derived premium flag.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .profile import Profile
from .subscription import SubscriptionSummary


class AuthEvent(str, Enum):
    """Supabase Auth state-change events forwarded by the client."""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class UserContext(BaseModel):
    """
    Everything the client needs after sign-in.

    Example:
        {
            "user_id": "550e8400-...",
            "email": "sam@example.com",
            "profile": {...},
            "subscription": {"status": "active", "plan_type": "yearly", ...},
            "is_premium": true
        }
    """

    user_id: str
    email: str | None = None
    profile: Profile | None = Field(
        default=None,
        description="None when the profile could not be loaded"
    )
    subscription: SubscriptionSummary = Field(default_factory=SubscriptionSummary)
    is_premium: bool = False
    loaded_at: datetime | None = None

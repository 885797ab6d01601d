# =============================================================================
# core/models/profile.py - Profile Schemas
# =============================================================================
# One row of the `profiles` table. The row is created by a database trigger
# when a user signs up; the API only reads and updates it.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from lib.utils import first_name as first_name_of


class ExperienceLevel(str, Enum):
    """Self-reported relaxation experience from the onboarding quiz."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Profile(BaseModel):
    """
    Schema for returning a user profile.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "email": "sam@example.com",
            "full_name": "Sam Rivera",
            "quiz_completed": true,
            "preferred_duration": 10,
            "experience_level": "beginner",
            "goals": ["better-sleep"]
        }
    """

    id: str = Field(..., description="Auth user UUID")
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None

    # Onboarding quiz outcome
    quiz_completed: bool = False
    quiz_results: dict[str, Any] | None = None

    # Preferred session length in minutes
    preferred_duration: int | None = Field(default=10, ge=1)
    experience_level: ExperienceLevel | None = None
    goals: list[str] | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def first_name(self) -> str | None:
        return first_name_of(self.full_name)


class ProfileUpdate(BaseModel):
    """
    Fields a user may edit from the profile page.

    Example:
        {"full_name": "Sam Rivera"}
    """

    full_name: str = Field(
        ...,
        max_length=120,
        description="Display name (blank clears it)"
    )

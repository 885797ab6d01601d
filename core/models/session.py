# =============================================================================
# core/models/session.py - Practice Session Schemas
# =============================================================================
# These models define the API contract for recorded practice:
# - PracticeSessionCreate: Input when an exercise finishes
# - PracticeSession: One row of the `sessions` table
# - DashboardStats: Aggregates shown on the dashboard
#
# A practice session is one completed exercise. Quick exercises are stored
# with exercise_id = null since they don't exist in the exercises table.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from .program import Program, UserProgram


class PracticeSessionCreate(BaseModel):
    """
    Schema for recording a finished exercise.

    Example:
        {
            "exercise_id": "quick-breathing",
            "duration_seconds": 128,
            "feedback_rating": 5
        }
    """

    # Exercise UUID or a quick-* ID (stored as null)
    exercise_id: str | None = Field(
        default=None,
        description="Exercise that was completed"
    )

    # Set when the exercise was played as part of a program day
    user_program_id: str | None = Field(
        default=None,
        description="Enrollment to advance after this session"
    )

    # Seconds actually played, as reported by the player
    duration_seconds: int = Field(
        ...,
        ge=0,
        le=24 * 60 * 60,
        description="Elapsed seconds"
    )

    feedback_rating: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Optional 1-5 rating"
    )

    notes: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional free-text notes"
    )


class PracticeSession(BaseModel):
    """Schema for a sessions row."""

    id: str
    user_id: str
    exercise_id: str | None = None
    user_program_id: str | None = None
    completed_at: datetime
    duration_seconds: int = Field(..., ge=0)
    feedback_rating: int | None = None
    notes: str | None = None


class ActiveProgram(BaseModel):
    """The user's active enrollment joined with its program."""

    enrollment: UserProgram
    program: Program | None = None


class DashboardStats(BaseModel):
    """
    Schema for the dashboard.

    Example:
        {
            "greeting": "Good evening",
            "first_name": "Sam",
            "total_sessions": 12,
            "total_minutes": 94,
            "current_streak": 3,
            "active_program": null,
            "recent_sessions": [...]
        }
    """

    greeting: str
    first_name: str | None = None
    total_sessions: int = Field(default=0, ge=0)
    total_minutes: int = Field(default=0, ge=0)
    current_streak: int = Field(
        default=0,
        ge=0,
        description="Consecutive days with practice, ending today"
    )
    active_program: ActiveProgram | None = None
    recent_sessions: list[PracticeSession] = Field(default_factory=list)

# =============================================================================
# core/models/program.py - Program Schemas
# =============================================================================
# These models define the API contract for programs:
# - Program: a multi-day course (`programs` table)
# - UserProgram: a user's enrollment and progress (`user_programs` table)
# - ProgramSummary / ProgramDetail: list and detail responses
#
# Progress invariant: 1 <= current_day <= duration_days. The last completed
# day sets completed_at and clears is_active instead of moving past the end.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .exercise import Exercise


class ProgramCategory(str, Enum):
    """Which player family a program uses."""
    PMR = "pmr"
    BREATHING = "breathing"
    MEDITATION = "meditation"
    MIXED = "mixed"


class ProgramFilter(str, Enum):
    """
    Filters offered on the programs page.

    - all: every program
    - free: programs that don't need premium
    - pmr / breathing / meditation / mixed: by category
    """
    ALL = "all"
    FREE = "free"
    PMR = "pmr"
    BREATHING = "breathing"
    MEDITATION = "meditation"
    MIXED = "mixed"


class Program(BaseModel):
    """Schema for a programs row."""

    id: str
    title: str
    description: str | None = None
    category: ProgramCategory
    difficulty: str | None = None
    duration_days: int = Field(..., ge=1, description="Number of program days")
    image_url: str | None = None
    is_premium: bool = False
    order_index: int = 0
    created_at: datetime | None = None


class UserProgram(BaseModel):
    """
    Schema for a user_programs row.

    Example:
        {
            "id": "770e8400-...",
            "user_id": "550e8400-...",
            "program_id": "660e8400-...",
            "current_day": 3,
            "started_at": "2024-01-15T10:30:00Z",
            "completed_at": null,
            "is_active": true
        }
    """

    id: str
    user_id: str
    program_id: str
    current_day: int = Field(default=1, ge=1)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    is_active: bool = True

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class ProgramSummary(BaseModel):
    """A program card: the program plus the caller's progress."""

    program: Program
    enrollment: UserProgram | None = None
    is_locked: bool = Field(
        default=False,
        description="Premium program and the caller isn't premium"
    )


class ProgramList(BaseModel):
    """Listing returned by GET /programs."""

    programs: list[ProgramSummary] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    filter: ProgramFilter = ProgramFilter.ALL


class ProgramDay(BaseModel):
    """Exercises scheduled for one program day."""

    day: int = Field(..., ge=0, description="Day number (0 = unscheduled)")
    exercises: list[Exercise] = Field(default_factory=list)


class ProgramDetail(BaseModel):
    """Everything the program page shows."""

    program: Program
    days: list[ProgramDay] = Field(default_factory=list)
    enrollment: UserProgram | None = None
    is_locked: bool = False
    today_exercise: Exercise | None = Field(
        default=None,
        description="First exercise of the caller's current day"
    )

# =============================================================================
# app/routers/sessions.py - Practice Session Endpoints
# =============================================================================
# Records finished exercises and serves the dashboard stats.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from app.dependencies import CurrentUser, UserContextDep
from app.websocket.broadcast import publish_session_recorded
from core.models.program import UserProgram
from core.models.session import DashboardStats, PracticeSession, PracticeSessionCreate
from core.services.session_service import SessionService

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class SessionRecordedResponse(BaseModel):
    """Response when a session is recorded."""
    session: PracticeSession
    enrollment: UserProgram | None = Field(
        default=None,
        description="The program enrollment after advancing, when user_program_id was given"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "session": {
                    "id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                    "user_id": "550e8400-e29b-41d4-a716-446655440000",
                    "exercise_id": None,
                    "completed_at": "2024-03-10T08:00:00Z",
                    "duration_seconds": 128,
                    "feedback_rating": 5,
                },
                "enrollment": None,
            }
        }
    }


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=SessionRecordedResponse, status_code=status.HTTP_201_CREATED)
def record_session(request: PracticeSessionCreate, user: CurrentUser):
    """
    Record a finished exercise.

    When user_program_id is set, the enrollment moves to the next day
    (or completes on the last day).

    Raises:
        400: If the program was already completed
        404: If the exercise or enrollment doesn't exist
    """
    session, enrollment = SessionService.record_session(user.id, request)
    publish_session_recorded(
        str(user.id),
        session.id,
        session.duration_seconds,
        enrollment.current_day if enrollment else None,
    )
    return SessionRecordedResponse(session=session, enrollment=enrollment)


@router.get("", response_model=list[PracticeSession])
def list_sessions(
    user: CurrentUser,
    limit: Annotated[int | None, Query(ge=1, le=500, description="Maximum sessions to return")] = 50,
):
    """List the user's sessions, newest first."""
    return SessionService.list_sessions(user.id, limit=limit)


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    context: UserContextDep,
    tz: Annotated[str | None, Query(description="IANA time zone, e.g. Europe/Berlin")] = None,
):
    """
    Dashboard stats: totals, streak, active program, recent sessions.

    Streak days are counted in `tz` (default UTC).
    """
    full_name = context.profile.full_name if context.profile else None
    return SessionService.get_dashboard(context.user_id, full_name=full_name, tz_name=tz)

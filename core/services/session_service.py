# =============================================================================
# core/services/session_service.py - Practice Session Business Logic
# =============================================================================
# Records completed exercises (`sessions` table) and computes the
# dashboard: totals, streak, active program and recent sessions.
# =============================================================================

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lib.supabase_client import SupabaseClient
from lib.utils import first_name
from core.catalog import is_quick_exercise
from core.models.program import Program, UserProgram
from core.models.session import (
    ActiveProgram,
    DashboardStats,
    PracticeSession,
    PracticeSessionCreate,
)
from core.services.program_service import ProgramService
from app.exceptions import ExerciseNotFoundError, ProgramCompletedError

logger = logging.getLogger(__name__)

RECENT_SESSION_COUNT = 5


# =============================================================================
# Stats helpers
# =============================================================================

def resolve_timezone(name: str | None) -> tzinfo:
    """IANA zone name -> tzinfo. Unknown or missing names fall back to UTC."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown time zone {name!r}, using UTC")
        return timezone.utc


def _parse_timestamp(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def total_minutes(durations: Iterable[int]) -> int:
    """Total practice time in whole minutes (rounded)."""
    return round(sum(durations) / 60)


def current_streak(
    completed_at: Iterable[datetime | str],
    today: date,
    tz: tzinfo = timezone.utc,
) -> int:
    """
    Count consecutive calendar days with practice, ending today.

    A day without practice today means a streak of 0, even if yesterday
    had sessions.

    Args:
        completed_at: Session completion timestamps
        today: The caller's current date in tz
        tz: Zone used to turn timestamps into calendar days

    Example:
        current_streak(["2024-03-10T08:00:00Z", "2024-03-09T21:00:00Z"], date(2024, 3, 10))  # 2
    """
    days = {_parse_timestamp(value).astimezone(tz).date() for value in completed_at}

    streak = 0
    expected = today
    while expected in days:
        streak += 1
        expected -= timedelta(days=1)
    return streak


def greeting_for(hour: int) -> str:
    """Time-of-day greeting for the dashboard header."""
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


# =============================================================================
# Service
# =============================================================================

class SessionService:
    """
    Service for recorded practice sessions.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def record_session(
        user_id: UUID | str,
        data: PracticeSessionCreate,
    ) -> tuple[PracticeSession, UserProgram | None]:
        """
        Record a completed exercise.

        Quick exercises are stored with exercise_id = null. When the
        session belongs to a program day, the enrollment is verified
        before the insert and advanced after it.

        Args:
            user_id: The user who practised
            data: What was played and for how long

        Returns:
            Tuple of (session, advanced enrollment or None)

        Raises:
            ExerciseNotFoundError: If a non-quick exercise_id doesn't exist
            EnrollmentNotFoundError: If user_program_id isn't the user's
            ProgramCompletedError: If that enrollment already finished
        """
        exercise_id = data.exercise_id
        if exercise_id and is_quick_exercise(exercise_id):
            exercise_id = None
        elif exercise_id and not SupabaseClient.fetch_exercise(exercise_id):
            raise ExerciseNotFoundError(exercise_id)

        enrollment = None
        if data.user_program_id:
            # Fails fast on someone else's or a finished enrollment, before anything is written
            enrollment = ProgramService.get_enrollment(data.user_program_id, user_id)
            if enrollment.is_completed:
                raise ProgramCompletedError(enrollment.id)

        row = SupabaseClient.insert_row("sessions", {
            "user_id": str(user_id),
            "exercise_id": exercise_id,
            "user_program_id": enrollment.id if enrollment else None,
            "duration_seconds": data.duration_seconds,
            "feedback_rating": data.feedback_rating,
            "notes": data.notes,
        })
        session = PracticeSession.model_validate(row)
        logger.info(
            f"Recorded session {session.id} for user {user_id}: "
            f"{data.duration_seconds}s of {data.exercise_id or 'unknown exercise'}"
        )

        advanced = None
        if enrollment:
            advanced = ProgramService.advance_day(enrollment.id, user_id)

        return session, advanced

    @staticmethod
    def list_sessions(user_id: UUID | str, limit: int | None = None) -> list[PracticeSession]:
        """
        List a user's sessions, newest first.

        Args:
            user_id: The user
            limit: Optional maximum number of sessions
        """
        client = SupabaseClient.get_client()

        query = (
            client.table("sessions")
            .select("*")
            .eq("user_id", str(user_id))
            .order("completed_at", desc=True)
        )
        if limit:
            query = query.limit(limit)

        try:
            response = query.execute()
            return [PracticeSession.model_validate(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Failed to list sessions: {e}")
            raise

    @staticmethod
    def get_active_program(user_id: UUID | str) -> ActiveProgram | None:
        """The user's active enrollment with its program, if any."""
        client = SupabaseClient.get_client()

        response = (
            client.table("user_programs")
            .select("*, program:programs(*)")
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        rows: list[dict[str, Any]] = response.data or []
        if not rows:
            return None

        row = dict(rows[0])
        program_row = row.pop("program", None)
        return ActiveProgram(
            enrollment=UserProgram.model_validate(row),
            program=Program.model_validate(program_row) if program_row else None,
        )

    @staticmethod
    def get_dashboard(
        user_id: UUID | str,
        full_name: str | None = None,
        tz_name: str | None = None,
        now: datetime | None = None,
    ) -> DashboardStats:
        """
        Compute the dashboard for a user.

        Args:
            user_id: The user
            full_name: For the greeting's first name
            tz_name: IANA zone of the caller (default UTC)
            now: Current time, injectable for tests

        Returns:
            DashboardStats
        """
        tz = resolve_timezone(tz_name)
        local_now = (now or datetime.now(timezone.utc)).astimezone(tz)

        sessions = SessionService.list_sessions(user_id)
        active_program = SessionService.get_active_program(user_id)

        return DashboardStats(
            greeting=greeting_for(local_now.hour),
            first_name=first_name(full_name),
            total_sessions=len(sessions),
            total_minutes=total_minutes(s.duration_seconds for s in sessions),
            current_streak=current_streak((s.completed_at for s in sessions), local_now.date(), tz),
            active_program=active_program,
            recent_sessions=sessions[:RECENT_SESSION_COUNT],
        )

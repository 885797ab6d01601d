# =============================================================================
# tests/test_sessions.py - Practice Session and Dashboard Tests
# =============================================================================
# Tests for recording sessions and computing dashboard stats:
# - Quick exercises are stored with exercise_id = null
# - Program sessions advance the enrollment
# - Streaks count calendar days in the caller's time zone
# =============================================================================

from datetime import date, datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from app.exceptions import EnrollmentNotFoundError, ExerciseNotFoundError, ProgramCompletedError
from core.models.program import UserProgram
from core.models.session import PracticeSessionCreate
from core.services.program_service import ProgramService
from core.services.session_service import (
    SessionService,
    current_streak,
    greeting_for,
    resolve_timezone,
    total_minutes,
)
from lib.supabase_client import SupabaseClient
from tests.conftest import EXERCISE_ID, USER_ID, USER_PROGRAM_ID, make_query


# =============================================================================
# Stats Helpers
# =============================================================================

class TestCurrentStreak:
    """Tests for the consecutive-day streak."""

    def test_no_sessions(self):
        assert current_streak([], date(2024, 3, 10)) == 0

    def test_consecutive_days(self):
        timestamps = [
            "2024-03-10T08:00:00+00:00",
            "2024-03-09T21:00:00+00:00",
            "2024-03-08T07:30:00+00:00",
        ]
        assert current_streak(timestamps, date(2024, 3, 10)) == 3

    def test_several_sessions_same_day_count_once(self):
        timestamps = ["2024-03-10T08:00:00Z", "2024-03-10T20:00:00Z"]
        assert current_streak(timestamps, date(2024, 3, 10)) == 1

    def test_gap_breaks_streak(self):
        timestamps = ["2024-03-10T08:00:00Z", "2024-03-08T08:00:00Z"]
        assert current_streak(timestamps, date(2024, 3, 10)) == 1

    def test_nothing_today_is_zero(self):
        """Yesterday's practice alone doesn't make a current streak."""
        assert current_streak(["2024-03-09T08:00:00Z"], date(2024, 3, 10)) == 0

    def test_time_zone_decides_the_day(self):
        """01:00 UTC on the 10th is still the 9th in New York."""
        new_york = ZoneInfo("America/New_York")
        timestamps = ["2024-03-10T01:00:00Z", "2024-03-10T15:00:00Z"]

        assert current_streak(timestamps, date(2024, 3, 10)) == 1
        assert current_streak(timestamps, date(2024, 3, 10), new_york) == 2

    def test_accepts_datetimes(self):
        stamp = datetime(2024, 3, 10, 8, tzinfo=timezone.utc)
        assert current_streak([stamp], date(2024, 3, 10)) == 1


class TestDashboardHelpers:
    """Tests for greeting, minutes and time zone helpers."""

    @pytest.mark.parametrize("hour,expected", [
        (0, "Good morning"),
        (11, "Good morning"),
        (12, "Good afternoon"),
        (17, "Good afternoon"),
        (18, "Good evening"),
        (23, "Good evening"),
    ])
    def test_greeting(self, hour, expected):
        assert greeting_for(hour) == expected

    def test_total_minutes_rounds(self):
        assert total_minutes([]) == 0
        assert total_minutes([128, 300]) == 7
        assert total_minutes([29]) == 0
        assert total_minutes([90]) == 2

    def test_unknown_time_zone_falls_back_to_utc(self):
        assert resolve_timezone("Mars/Olympus") is timezone.utc
        assert resolve_timezone(None) is timezone.utc
        assert resolve_timezone("Europe/Berlin") == ZoneInfo("Europe/Berlin")


# =============================================================================
# Recording Sessions
# =============================================================================

class TestRecordSession:
    """Tests for SessionService.record_session."""

    def test_quick_exercise_stored_as_null(self, session_row):
        with patch.object(SupabaseClient, "insert_row", return_value=session_row) as insert, \
                patch.object(SupabaseClient, "fetch_exercise") as fetch:
            session, advanced = SessionService.record_session(
                USER_ID,
                PracticeSessionCreate(exercise_id="quick-breathing", duration_seconds=128),
            )

        fetch.assert_not_called()
        table, data = insert.call_args.args
        assert table == "sessions"
        assert data["exercise_id"] is None
        assert data["duration_seconds"] == 128
        assert data["user_id"] == USER_ID
        assert session.exercise_id is None
        assert advanced is None

    def test_stored_exercise_is_checked(self, session_row, breathing_row):
        session_row["exercise_id"] = EXERCISE_ID
        with patch.object(SupabaseClient, "fetch_exercise", return_value=breathing_row), \
                patch.object(SupabaseClient, "insert_row", return_value=session_row) as insert:
            session, _ = SessionService.record_session(
                USER_ID,
                PracticeSessionCreate(exercise_id=EXERCISE_ID, duration_seconds=240),
            )

        assert insert.call_args.args[1]["exercise_id"] == EXERCISE_ID
        assert session.exercise_id == EXERCISE_ID

    def test_unknown_exercise(self):
        with patch.object(SupabaseClient, "fetch_exercise", return_value=None), \
                patch.object(SupabaseClient, "insert_row") as insert:
            with pytest.raises(ExerciseNotFoundError):
                SessionService.record_session(
                    USER_ID,
                    PracticeSessionCreate(exercise_id="not-a-thing", duration_seconds=60),
                )
        insert.assert_not_called()

    def test_program_session_advances_enrollment(self, session_row, user_program_row):
        enrollment = UserProgram.model_validate(user_program_row)
        advanced = enrollment.model_copy(update={"current_day": 4})
        session_row["user_program_id"] = USER_PROGRAM_ID

        with patch.object(ProgramService, "get_enrollment", return_value=enrollment), \
                patch.object(ProgramService, "advance_day", return_value=advanced) as advance, \
                patch.object(SupabaseClient, "insert_row", return_value=session_row) as insert:
            _, result = SessionService.record_session(
                USER_ID,
                PracticeSessionCreate(
                    exercise_id="quick-pmr",
                    user_program_id=USER_PROGRAM_ID,
                    duration_seconds=300,
                ),
            )

        assert insert.call_args.args[1]["user_program_id"] == USER_PROGRAM_ID
        advance.assert_called_once_with(USER_PROGRAM_ID, USER_ID)
        assert result.current_day == 4

    def test_foreign_enrollment_writes_nothing(self):
        with patch.object(
            ProgramService, "get_enrollment",
            side_effect=EnrollmentNotFoundError(USER_PROGRAM_ID),
        ), patch.object(SupabaseClient, "insert_row") as insert:
            with pytest.raises(EnrollmentNotFoundError):
                SessionService.record_session(
                    USER_ID,
                    PracticeSessionCreate(user_program_id=USER_PROGRAM_ID, duration_seconds=60),
                )
        insert.assert_not_called()

    def test_completed_enrollment_writes_nothing(self, user_program_row):
        """A retried save on a finished program must not add another session."""
        finished = {**user_program_row, "current_day": 7, "completed_at": "2024-03-08T09:00:00+00:00", "is_active": False}
        with patch.object(SupabaseClient, "fetch_user_program", return_value=finished), \
                patch.object(SupabaseClient, "insert_row") as insert, \
                patch.object(ProgramService, "advance_day") as advance:
            with pytest.raises(ProgramCompletedError) as exc_info:
                SessionService.record_session(
                    USER_ID,
                    PracticeSessionCreate(user_program_id=USER_PROGRAM_ID, duration_seconds=60),
                )

        assert exc_info.value.status_code == 400
        insert.assert_not_called()
        advance.assert_not_called()


# =============================================================================
# Dashboard
# =============================================================================

class TestDashboard:
    """Tests for SessionService.get_dashboard."""

    def test_dashboard(self, mock_supabase, session_row, user_program_row, program_row):
        sessions = [
            {**session_row, "id": f"s{i}", "completed_at": f"2024-03-{10 - i:02d}T08:00:00+00:00"}
            for i in range(7)
        ]
        mock_supabase.tables["sessions"] = make_query(sessions)
        mock_supabase.tables["user_programs"] = make_query([{**user_program_row, "program": program_row}])

        stats = SessionService.get_dashboard(
            USER_ID,
            full_name="Sam Rivera",
            now=datetime(2024, 3, 10, 19, 0, tzinfo=timezone.utc),
        )

        assert stats.greeting == "Good evening"
        assert stats.first_name == "Sam"
        assert stats.total_sessions == 7
        assert stats.total_minutes == 15
        assert stats.current_streak == 7
        assert len(stats.recent_sessions) == 5
        assert stats.active_program.enrollment.current_day == 3
        assert stats.active_program.program.title == "7 Days of Release"

    def test_empty_dashboard(self, mock_supabase):
        stats = SessionService.get_dashboard(
            USER_ID,
            now=datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc),
        )

        assert stats.greeting == "Good morning"
        assert stats.first_name is None
        assert stats.total_sessions == 0
        assert stats.current_streak == 0
        assert stats.active_program is None

    def test_greeting_uses_time_zone(self, mock_supabase):
        stats = SessionService.get_dashboard(
            USER_ID,
            tz_name="Asia/Tokyo",
            now=datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc),
        )
        # 08:00 on the 11th in Tokyo
        assert stats.greeting == "Good morning"

    def test_list_sessions_limit(self, mock_supabase, session_row):
        query = make_query([session_row])
        mock_supabase.tables["sessions"] = query

        sessions = SessionService.list_sessions(USER_ID, limit=10)

        query.eq.assert_called_with("user_id", USER_ID)
        query.order.assert_called_with("completed_at", desc=True)
        query.limit.assert_called_with(10)
        assert len(sessions) == 1

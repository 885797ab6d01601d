# =============================================================================
# tests/test_programs.py - Program and Enrollment Tests
# =============================================================================
# Tests for program listing, locking, enrollment and daily progress.
# The key invariant: current_day never moves past duration_days.
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import (
    EnrollmentNotFoundError,
    ProgramCompletedError,
    ProgramLockedError,
    ProgramNotFoundError,
)
from core.models.exercise import Exercise
from core.models.program import Program, ProgramCategory, ProgramFilter
from core.services.program_service import ProgramService, group_by_day, matches_filter
from lib.supabase_client import SupabaseClient
from tests.conftest import PROGRAM_ID, USER_ID, USER_PROGRAM_ID, make_query


# =============================================================================
# Helpers
# =============================================================================

class TestProgramHelpers:
    """Tests for filtering and day grouping."""

    def test_filters(self, program_row):
        program = Program.model_validate(program_row)
        premium = program.model_copy(update={"is_premium": True, "category": ProgramCategory.BREATHING})

        assert matches_filter(program, ProgramFilter.ALL) is True
        assert matches_filter(program, ProgramFilter.FREE) is True
        assert matches_filter(premium, ProgramFilter.FREE) is False
        assert matches_filter(program, ProgramFilter.PMR) is True
        assert matches_filter(premium, ProgramFilter.PMR) is False
        assert matches_filter(premium, ProgramFilter.BREATHING) is True

    def test_group_by_day(self, pmr_row, breathing_row):
        day_one = {**pmr_row, "id": "d1", "day_number": 1}
        exercises = [Exercise.model_validate(row) for row in (pmr_row, day_one, breathing_row)]

        days = group_by_day(exercises)

        assert [day.day for day in days] == [0, 1, 3]
        assert days[0].exercises[0].title == "4-7-8 Breathing"
        assert days[1].exercises[0].id == "d1"


# =============================================================================
# Listing and Detail
# =============================================================================

class TestListPrograms:
    """Tests for ProgramService.list_programs."""

    def test_locks_premium_for_free_users(self, mock_supabase, program_row, user_program_row):
        premium = {**program_row, "id": "premium-1", "title": "Deep Sleep", "is_premium": True}
        mock_supabase.tables["programs"] = make_query([program_row, premium])
        mock_supabase.tables["user_programs"] = make_query([user_program_row])

        listing = ProgramService.list_programs(USER_ID, is_premium=False)

        assert listing.total == 2
        free, locked = listing.programs
        assert free.is_locked is False
        assert free.enrollment.current_day == 3
        assert locked.is_locked is True
        assert locked.enrollment is None

    def test_premium_users_unlock_everything(self, mock_supabase, program_row):
        mock_supabase.tables["programs"] = make_query([{**program_row, "is_premium": True}])

        listing = ProgramService.list_programs(USER_ID, is_premium=True)
        assert listing.programs[0].is_locked is False

    def test_filter_free(self, mock_supabase, program_row):
        premium = {**program_row, "id": "premium-1", "is_premium": True}
        mock_supabase.tables["programs"] = make_query([program_row, premium])

        listing = ProgramService.list_programs(USER_ID, False, ProgramFilter.FREE)

        assert listing.total == 1
        assert listing.filter == ProgramFilter.FREE

    def test_newest_enrollment_wins(self, mock_supabase, program_row, user_program_row):
        older = {**user_program_row, "id": "old", "current_day": 7, "completed_at": "2024-02-01T00:00:00Z"}
        mock_supabase.tables["programs"] = make_query([program_row])
        mock_supabase.tables["user_programs"] = make_query([user_program_row, older])

        listing = ProgramService.list_programs(USER_ID, False)
        assert listing.programs[0].enrollment.id == USER_PROGRAM_ID


class TestProgramDetail:
    """Tests for ProgramService.get_program_detail."""

    def test_today_exercise_follows_current_day(self, mock_supabase, program_row, pmr_row, user_program_row):
        mock_supabase.tables["exercises"] = make_query([pmr_row])

        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "fetch_enrollment", return_value=user_program_row):
            detail = ProgramService.get_program_detail(PROGRAM_ID, USER_ID, is_premium=False)

        assert detail.today_exercise.id == pmr_row["id"]
        assert detail.days[0].day == 3
        assert detail.is_locked is False

    def test_not_enrolled(self, mock_supabase, program_row, pmr_row):
        mock_supabase.tables["exercises"] = make_query([pmr_row])

        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "fetch_enrollment", return_value=None):
            detail = ProgramService.get_program_detail(PROGRAM_ID, USER_ID, is_premium=False)

        assert detail.enrollment is None
        assert detail.today_exercise is None

    def test_unknown_program(self):
        with patch.object(SupabaseClient, "fetch_program", return_value=None):
            with pytest.raises(ProgramNotFoundError):
                ProgramService.get_program_detail("missing", USER_ID, is_premium=True)


# =============================================================================
# Enrollment
# =============================================================================

class TestEnroll:
    """Tests for ProgramService.enroll."""

    def test_new_enrollment_starts_at_day_one(self, program_row, user_program_row):
        new_row = {**user_program_row, "current_day": 1}
        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "fetch_enrollment", return_value=None), \
                patch.object(SupabaseClient, "insert_row", return_value=new_row) as insert:
            enrollment, created = ProgramService.enroll(PROGRAM_ID, USER_ID, is_premium=False)

        assert created is True
        assert enrollment.current_day == 1
        table, data = insert.call_args.args
        assert table == "user_programs"
        assert data == {"user_id": USER_ID, "program_id": PROGRAM_ID, "current_day": 1, "is_active": True}

    def test_in_progress_enrollment_is_returned(self, program_row, user_program_row):
        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "fetch_enrollment", return_value=user_program_row), \
                patch.object(SupabaseClient, "insert_row") as insert:
            enrollment, created = ProgramService.enroll(PROGRAM_ID, USER_ID, is_premium=False)

        assert created is False
        assert enrollment.current_day == 3
        insert.assert_not_called()

    def test_completed_enrollment_starts_over(self, program_row, user_program_row):
        finished = {**user_program_row, "current_day": 7, "completed_at": "2024-03-08T00:00:00Z", "is_active": False}
        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "fetch_enrollment", return_value=finished), \
                patch.object(SupabaseClient, "insert_row", return_value={**user_program_row, "id": "new", "current_day": 1}):
            enrollment, created = ProgramService.enroll(PROGRAM_ID, USER_ID, is_premium=False)

        assert created is True
        assert enrollment.id == "new"

    def test_premium_program_locked(self, program_row):
        program_row["is_premium"] = True
        with patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "insert_row") as insert:
            with pytest.raises(ProgramLockedError) as exc_info:
                ProgramService.enroll(PROGRAM_ID, USER_ID, is_premium=False)

        assert exc_info.value.status_code == 403
        insert.assert_not_called()


# =============================================================================
# Daily Progress
# =============================================================================

class TestAdvanceDay:
    """Tests for ProgramService.advance_day."""

    def _advance(self, program_row, user_program_row):
        def update(table, data, column, value):
            return [{**user_program_row, **data}]

        with patch.object(SupabaseClient, "fetch_user_program", return_value=user_program_row), \
                patch.object(SupabaseClient, "fetch_program", return_value=program_row), \
                patch.object(SupabaseClient, "update_rows", side_effect=update) as update_rows:
            enrollment = ProgramService.advance_day(USER_PROGRAM_ID, USER_ID)
        return enrollment, update_rows.call_args.args[1]

    def test_moves_to_next_day(self, program_row, user_program_row):
        enrollment, update = self._advance(program_row, user_program_row)

        assert update == {"current_day": 4}
        assert enrollment.current_day == 4
        assert enrollment.is_active is True

    def test_last_day_completes(self, program_row, user_program_row):
        user_program_row["current_day"] = 7
        enrollment, update = self._advance(program_row, user_program_row)

        assert update["current_day"] == 7
        assert update["is_active"] is False
        assert enrollment.is_completed is True
        assert enrollment.current_day == 7

    def test_never_moves_past_duration(self, program_row, user_program_row):
        """A stale day past the end is pulled back to duration_days."""
        user_program_row["current_day"] = 9
        enrollment, update = self._advance(program_row, user_program_row)

        assert update["current_day"] == 7
        assert enrollment.current_day == 7

    def test_completed_enrollment_rejected(self, user_program_row):
        user_program_row["completed_at"] = "2024-03-08T00:00:00Z"
        with patch.object(SupabaseClient, "fetch_user_program", return_value=user_program_row):
            with pytest.raises(ProgramCompletedError):
                ProgramService.advance_day(USER_PROGRAM_ID, USER_ID)

    def test_other_users_enrollment_hidden(self, user_program_row):
        user_program_row["user_id"] = "someone-else"
        with patch.object(SupabaseClient, "fetch_user_program", return_value=user_program_row):
            with pytest.raises(EnrollmentNotFoundError) as exc_info:
                ProgramService.advance_day(USER_PROGRAM_ID, USER_ID)

        assert exc_info.value.status_code == 404

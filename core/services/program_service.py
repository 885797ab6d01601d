# =============================================================================
# core/services/program_service.py - Program Business Logic
# =============================================================================
# Handles program listing, program detail pages, enrollment and daily
# progress. Progress rules live here and nowhere else:
#
# - Enrolling starts at day 1 and is idempotent while an enrollment is
#   in progress.
# - Premium programs are locked for users who aren't premium.
# - Advancing never moves current_day past duration_days; finishing the
#   last day marks the enrollment completed and inactive.
# =============================================================================

import logging
from datetime import datetime, timezone
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.exercise import Exercise
from core.models.program import (
    Program,
    ProgramDay,
    ProgramDetail,
    ProgramFilter,
    ProgramList,
    ProgramSummary,
    UserProgram,
)
from app.exceptions import (
    EnrollmentNotFoundError,
    ProgramCompletedError,
    ProgramLockedError,
    ProgramNotFoundError,
)

logger = logging.getLogger(__name__)


def matches_filter(program: Program, program_filter: ProgramFilter) -> bool:
    """Programs page filter: all, free, or a category."""
    if program_filter == ProgramFilter.ALL:
        return True
    if program_filter == ProgramFilter.FREE:
        return not program.is_premium
    return program.category.value == program_filter.value


def group_by_day(exercises: list[Exercise]) -> list[ProgramDay]:
    """
    Group exercises into program days, keeping their order.

    Exercises without a day_number are collected under day 0.
    """
    days: dict[int, list[Exercise]] = {}
    for exercise in exercises:
        days.setdefault(exercise.day_number or 0, []).append(exercise)
    return [ProgramDay(day=day, exercises=days[day]) for day in sorted(days)]


class ProgramService:
    """
    Service for programs and enrollments.

    Callers pass `is_premium` from the user context rather than having
    this service look up subscriptions itself.
    """

    @staticmethod
    def get_program(program_id: UUID | str) -> Program:
        """
        Get a program by ID.

        Raises:
            ProgramNotFoundError: If program doesn't exist
        """
        row = SupabaseClient.fetch_program(program_id)
        if not row:
            raise ProgramNotFoundError(str(program_id))
        return Program.model_validate(row)

    @staticmethod
    def list_programs(
        user_id: UUID | str,
        is_premium: bool,
        program_filter: ProgramFilter = ProgramFilter.ALL,
    ) -> ProgramList:
        """
        List programs in display order with the caller's progress.

        Args:
            user_id: Caller, used to attach enrollments
            is_premium: Whether premium programs are unlocked
            program_filter: all, free, or a category

        Returns:
            ProgramList
        """
        client = SupabaseClient.get_client()

        try:
            programs_response = (
                client.table("programs")
                .select("*")
                .order("order_index")
                .execute()
            )
            enrollments_response = (
                client.table("user_programs")
                .select("*")
                .eq("user_id", str(user_id))
                .order("started_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list programs: {e}")
            raise

        # Most recent enrollment wins (rows are newest first)
        enrollments: dict[str, UserProgram] = {}
        for row in enrollments_response.data or []:
            enrollment = UserProgram.model_validate(row)
            enrollments.setdefault(enrollment.program_id, enrollment)

        summaries = []
        for row in programs_response.data or []:
            program = Program.model_validate(row)
            if not matches_filter(program, program_filter):
                continue
            summaries.append(ProgramSummary(
                program=program,
                enrollment=enrollments.get(program.id),
                is_locked=program.is_premium and not is_premium,
            ))

        return ProgramList(programs=summaries, total=len(summaries), filter=program_filter)

    @staticmethod
    def get_program_detail(
        program_id: UUID | str,
        user_id: UUID | str,
        is_premium: bool,
    ) -> ProgramDetail:
        """
        Get a program with its day-by-day exercises.

        today_exercise is the first exercise scheduled for the caller's
        current day (None when not enrolled).

        Raises:
            ProgramNotFoundError: If program doesn't exist
        """
        program = ProgramService.get_program(program_id)
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("exercises")
                .select("*")
                .eq("program_id", program.id)
                .order("day_number")
                .order("order_index")
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch program exercises: {e}")
            raise

        exercises = [Exercise.model_validate(row) for row in response.data or []]
        enrollment_row = SupabaseClient.fetch_enrollment(user_id, program.id)
        enrollment = UserProgram.model_validate(enrollment_row) if enrollment_row else None

        today_exercise = None
        if enrollment and not enrollment.is_completed:
            today_exercise = next(
                (e for e in exercises if e.day_number == enrollment.current_day),
                None,
            )

        return ProgramDetail(
            program=program,
            days=group_by_day(exercises),
            enrollment=enrollment,
            is_locked=program.is_premium and not is_premium,
            today_exercise=today_exercise,
        )

    @staticmethod
    def enroll(
        program_id: UUID | str,
        user_id: UUID | str,
        is_premium: bool,
    ) -> tuple[UserProgram, bool]:
        """
        Start a program.

        An in-progress enrollment is returned as-is. A completed one is
        left in place and a fresh enrollment starts at day 1.

        Returns:
            Tuple of (enrollment, created)

        Raises:
            ProgramNotFoundError: If program doesn't exist
            ProgramLockedError: If the program is premium and the user isn't
        """
        program = ProgramService.get_program(program_id)
        if program.is_premium and not is_premium:
            raise ProgramLockedError(program.id)

        existing = SupabaseClient.fetch_enrollment(user_id, program.id)
        if existing and not existing.get("completed_at"):
            return UserProgram.model_validate(existing), False

        row = SupabaseClient.insert_row("user_programs", {
            "user_id": str(user_id),
            "program_id": program.id,
            "current_day": 1,
            "is_active": True,
        })
        logger.info(f"User {user_id} enrolled in program {program.id}")
        return UserProgram.model_validate(row), True

    @staticmethod
    def get_enrollment(user_program_id: UUID | str, user_id: UUID | str) -> UserProgram:
        """
        Get an enrollment owned by the user.

        Raises:
            EnrollmentNotFoundError: If it doesn't exist or isn't theirs
        """
        row = SupabaseClient.fetch_user_program(user_program_id)
        if not row or str(row.get("user_id")) != str(user_id):
            # Don't reveal other users' enrollments
            raise EnrollmentNotFoundError(str(user_program_id))
        return UserProgram.model_validate(row)

    @staticmethod
    def advance_day(
        user_program_id: UUID | str,
        user_id: UUID | str,
        program: Program | None = None,
    ) -> UserProgram:
        """
        Mark the current day done.

        Moves current_day forward by one, or, on the last day, sets
        completed_at and is_active = false and keeps current_day at
        duration_days.

        Raises:
            EnrollmentNotFoundError: If the enrollment isn't the user's
            ProgramCompletedError: If the enrollment already finished
        """
        enrollment = ProgramService.get_enrollment(user_program_id, user_id)
        if enrollment.is_completed:
            raise ProgramCompletedError(enrollment.id)

        program = program or ProgramService.get_program(enrollment.program_id)

        if enrollment.current_day >= program.duration_days:
            update = {
                "current_day": program.duration_days,
                "completed_at": datetime.now(timezone.utc).isoformat(),
                "is_active": False,
            }
            logger.info(f"User {user_id} completed program {program.id}")
        else:
            update = {"current_day": enrollment.current_day + 1}

        rows = SupabaseClient.update_rows("user_programs", update, "id", enrollment.id)
        if not rows:
            raise EnrollmentNotFoundError(enrollment.id)
        return UserProgram.model_validate(rows[0])

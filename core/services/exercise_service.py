# =============================================================================
# core/services/exercise_service.py - Exercise Library
# =============================================================================
# Lists, filters and resolves exercises.
#
# The full library is small and read on every library visit, so it is
# loaded once through a FetchGuard (10s timeout, cached for
# LIBRARY_CACHE_TTL_SECONDS) and filtered in memory.
# =============================================================================

import logging
from typing import Any

from app.config import settings
from app.exceptions import ExerciseNotFoundError
from lib.fetch_guard import FetchGuard
from lib.supabase_client import SupabaseClient
from core.catalog import QUICK_EXERCISES, get_quick_exercise
from core.models.exercise import Exercise, ExerciseList, ExerciseType, TARGET_AREA_LABELS

logger = logging.getLogger(__name__)


library_guard = FetchGuard(
    "exercise library",
    ttl=settings.LIBRARY_CACHE_TTL_SECONDS,
    timeout=settings.FETCH_TIMEOUT_SECONDS,
)

LIBRARY_KEY = "library"

def filter_exercises(
    exercises: list[Exercise],
    exercise_type: ExerciseType | None = None,
    max_minutes: int | None = None,
    target_area: str | None = None,
) -> list[Exercise]:
    """
    Apply the library filters. None means "all" for every filter.

    max_minutes compares duration_seconds / 60, so a 5:30 exercise is not
    "5 minutes or less".
    """
    result = []
    for exercise in exercises:
        if exercise_type and exercise.type != exercise_type:
            continue
        if max_minutes is not None and exercise.duration_seconds / 60 > max_minutes:
            continue
        if target_area and target_area not in (exercise.target_areas or []):
            continue
        result.append(exercise)
    return result


def available_target_areas(exercises: list[Exercise]) -> dict[str, str]:
    """Target areas used by at least one exercise, with display labels."""
    areas: dict[str, str] = {}
    for exercise in exercises:
        for area in exercise.target_areas or []:
            areas.setdefault(area, TARGET_AREA_LABELS.get(area, area.replace("_", " ").title()))
    return areas


class ExerciseService:
    """Service for the exercise library."""

    @staticmethod
    def load_library() -> list[Exercise]:
        """
        Fetch every stored exercise, ordered by type then duration.

        Returns:
            List of exercises (quick exercises are not included)
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("exercises")
                .select("*")
                .order("type")
                .order("duration_seconds")
                .execute()
            )
            exercises = [Exercise.model_validate(row) for row in response.data or []]
            logger.debug(f"Loaded {len(exercises)} exercises")
            return exercises

        except Exception as e:
            logger.error(f"Failed to load exercise library: {e}")
            raise

    @staticmethod
    async def list_exercises(
        exercise_type: ExerciseType | None = None,
        max_minutes: int | None = None,
        target_area: str | None = None,
        force: bool = False,
    ) -> ExerciseList:
        """
        List the library with optional filters.

        Args:
            exercise_type: Only this type
            max_minutes: Only exercises at most this long
            target_area: Only exercises tagged with this area
            force: Reload instead of using the cached library (retry)

        Returns:
            ExerciseList; target_areas lists areas across the whole library

        Raises:
            FetchTimeoutError: If the library takes longer than 10s to load
        """
        library = await library_guard.run(LIBRARY_KEY, ExerciseService.load_library, force=force)
        filtered = filter_exercises(library, exercise_type, max_minutes, target_area)
        return ExerciseList(
            exercises=filtered,
            total=len(filtered),
            target_areas=available_target_areas(library),
        )

    @staticmethod
    def list_quick_exercises() -> list[Exercise]:
        return list(QUICK_EXERCISES.values())

    @staticmethod
    def fetch_exercise(exercise_id: str) -> Exercise:
        """
        Resolve an exercise ID: built-in quick exercises first, then the database.

        Raises:
            ExerciseNotFoundError: If neither knows the ID
        """
        quick = get_quick_exercise(exercise_id)
        if quick is not None:
            return quick

        row = SupabaseClient.fetch_exercise(exercise_id)
        if not row:
            raise ExerciseNotFoundError(exercise_id)
        return Exercise.model_validate(row)

    @staticmethod
    async def get_exercise(exercise_id: str) -> Exercise:
        """Guarded fetch_exercise, bounded by FETCH_TIMEOUT_SECONDS."""
        quick = get_quick_exercise(exercise_id)
        if quick is not None:
            return quick
        return await library_guard.run(
            f"exercise:{exercise_id}",
            lambda: ExerciseService.fetch_exercise(exercise_id),
        )

    @staticmethod
    def load_candidates(max_seconds: int) -> list[dict[str, Any]]:
        """
        Exercises short enough for a recommendation, featured first.

        Only the columns used for scoring are selected.
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("exercises")
            .select("id, type, target_areas, duration_seconds")
            .lte("duration_seconds", max_seconds)
            .order("is_featured", desc=True)
            .order("duration_seconds")
            .execute()
        )
        return response.data or []

# =============================================================================
# app/routers/exercises.py - Exercise Library Endpoints
# =============================================================================
# Browse, filter and inspect exercises. Library loads are bounded by
# FETCH_TIMEOUT_SECONDS; a timeout returns 504 and the client retries
# with force=true.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import CurrentUser
from core.models.exercise import Exercise, ExerciseList, ExerciseType
from core.player import build_timeline
from core.services.exercise_service import ExerciseService

router = APIRouter()


@router.get("", response_model=ExerciseList)
async def list_exercises(
    user: CurrentUser,
    type: Annotated[ExerciseType | None, Query(description="Filter by exercise type")] = None,
    max_minutes: Annotated[int | None, Query(ge=1, description="Only exercises at most this long")] = None,
    target_area: Annotated[str | None, Query(description="Filter by target area, e.g. shoulders")] = None,
    force: Annotated[bool, Query(description="Reload instead of using the cached library")] = False,
):
    """
    List the exercise library.

    Example:
        GET /api/v1/exercises?type=breathing&max_minutes=5
    """
    return await ExerciseService.list_exercises(
        exercise_type=type,
        max_minutes=max_minutes,
        target_area=target_area,
        force=force,
    )


@router.get("/quick", response_model=list[Exercise])
async def list_quick_exercises():
    """The built-in quick exercises (breathing, PMR, meditation)."""
    return ExerciseService.list_quick_exercises()


@router.get("/{exercise_id}", response_model=Exercise)
async def get_exercise(
    exercise_id: Annotated[str, Path(description="Exercise UUID or quick-* ID")],
    user: CurrentUser,
):
    """
    Get one exercise.

    Raises:
        404: If the exercise doesn't exist
    """
    return await ExerciseService.get_exercise(exercise_id)


@router.get("/{exercise_id}/timeline")
async def get_timeline(
    exercise_id: Annotated[str, Path(description="Exercise UUID or quick-* ID")],
    user: CurrentUser,
):
    """
    Get the phases the player will step through.

    Useful for previews ("8 cycles, 2:08") and for clients that run the
    timer locally.

    Raises:
        404: If the exercise doesn't exist
        422: If it has no playable content
    """
    exercise = await ExerciseService.get_exercise(exercise_id)
    return build_timeline(exercise).to_dict()

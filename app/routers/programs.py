# =============================================================================
# app/routers/programs.py - Program Endpoints
# =============================================================================
# Multi-day programs: listing, detail, enrollment and daily progress.
# Premium programs are locked unless the user's context says premium.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status
from pydantic import BaseModel

from app.dependencies import UserContextDep
from core.models.program import ProgramDetail, ProgramFilter, ProgramList, UserProgram
from core.services.program_service import ProgramService

router = APIRouter()


class EnrollmentResponse(BaseModel):
    """Result of POST /programs/{id}/enroll."""
    enrollment: UserProgram
    created: bool


@router.get("", response_model=ProgramList)
def list_programs(
    context: UserContextDep,
    filter: Annotated[ProgramFilter, Query(description="all, free, or a category")] = ProgramFilter.ALL,
):
    """List programs in display order with the caller's progress."""
    return ProgramService.list_programs(context.user_id, context.is_premium, filter)


@router.get("/{program_id}", response_model=ProgramDetail)
def get_program(
    program_id: Annotated[str, Path(description="Program UUID")],
    context: UserContextDep,
):
    """
    Get a program with its exercises grouped by day.

    Raises:
        404: If the program doesn't exist
    """
    return ProgramService.get_program_detail(program_id, context.user_id, context.is_premium)


@router.post("/{program_id}/enroll", response_model=EnrollmentResponse)
def enroll(
    program_id: Annotated[str, Path(description="Program UUID")],
    context: UserContextDep,
    response: Response,
):
    """
    Start a program at day 1.

    Returns the existing enrollment (200) if one is in progress,
    otherwise a new one (201).

    Raises:
        403: If the program is premium and the user isn't
        404: If the program doesn't exist
    """
    enrollment, created = ProgramService.enroll(program_id, context.user_id, context.is_premium)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return EnrollmentResponse(enrollment=enrollment, created=created)


@router.post("/enrollments/{user_program_id}/advance", response_model=UserProgram)
def advance_day(
    user_program_id: Annotated[str, Path(description="user_programs row ID")],
    context: UserContextDep,
):
    """
    Mark today's day as done without recording a session.

    Raises:
        400: If the program is already completed
        404: If the enrollment isn't the caller's
    """
    return ProgramService.advance_day(user_program_id, context.user_id)

# =============================================================================
# app/routers/quiz.py - Onboarding Quiz Questions
# =============================================================================
# Public endpoint: the onboarding flow renders these before sign-up
# completes. Answers are submitted to POST /api/v1/profile/quiz.
# =============================================================================

from fastapi import APIRouter

from core.models.quiz import QuizQuestion
from core.quiz_data import ONBOARDING_QUESTIONS

router = APIRouter()


@router.get("/questions", response_model=list[QuizQuestion])
async def list_questions():
    """The five onboarding questions with their options."""
    return ONBOARDING_QUESTIONS

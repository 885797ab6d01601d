# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# The signed-in user's profile and onboarding quiz submission.
# All endpoints require authentication.
# =============================================================================

import asyncio

from fastapi import APIRouter

from app.dependencies import CurrentUser
from app.websocket.broadcast import publish_profile_updated
from core.models.profile import Profile, ProfileUpdate
from core.models.quiz import QuizResults, QuizSubmission
from core.services.profile_service import ProfileService
from core.services.recommendation_service import RecommendationService
from core.services.user_context_service import UserContextService

router = APIRouter()


@router.get("", response_model=Profile)
def get_profile(user: CurrentUser):
    """
    Get the current user's profile.

    Raises:
        404: If the profile row hasn't been created yet
    """
    return ProfileService.get_profile(user.id)


@router.patch("", response_model=Profile)
async def update_profile(update: ProfileUpdate, user: CurrentUser):
    """
    Update the display name.

    The cached user context is reloaded so the dashboard greeting
    changes right away.
    """
    profile = await asyncio.to_thread(ProfileService.update_profile, user.id, update)
    await UserContextService.refresh(user)
    await asyncio.to_thread(publish_profile_updated, str(user.id))
    return profile


@router.post("/quiz", response_model=QuizResults)
async def submit_quiz(submission: QuizSubmission, user: CurrentUser):
    """
    Submit the onboarding quiz.

    Stores the answers on the profile and returns up to five
    recommended exercise IDs.

    Example request:
        {"answers": {"stress-sources": ["work"], "goals": ["focus"],
                     "experience": ["beginner"], "duration": ["10"],
                     "focus-areas": ["shoulders"]}}
    """
    results = await asyncio.to_thread(RecommendationService.submit_quiz, user.id, submission)
    await UserContextService.refresh(user)
    await asyncio.to_thread(publish_profile_updated, str(user.id))
    return results

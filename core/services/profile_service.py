# =============================================================================
# core/services/profile_service.py - Profile Business Logic
# =============================================================================
# Reads and updates rows of the `profiles` table.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.profile import Profile, ProfileUpdate
from core.models.quiz import QuizResults
from app.exceptions import ProfileNotFoundError

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for profile operations."""

    @staticmethod
    def get_profile(user_id: UUID | str) -> Profile:
        """
        Get a user's profile.

        Raises:
            ProfileNotFoundError: If the sign-up trigger hasn't created it
        """
        row = SupabaseClient.fetch_profile(user_id)
        if not row:
            raise ProfileNotFoundError(str(user_id))
        return Profile.model_validate(row)

    @staticmethod
    def _update(user_id: UUID | str, data: dict[str, Any]) -> Profile:
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        rows = SupabaseClient.update_rows("profiles", data, "id", user_id)
        if not rows:
            raise ProfileNotFoundError(str(user_id))
        return Profile.model_validate(rows[0])

    @staticmethod
    def update_profile(user_id: UUID | str, update: ProfileUpdate) -> Profile:
        """
        Update editable profile fields.

        Args:
            user_id: The auth user UUID
            update: New values (a blank name clears it)

        Returns:
            The updated profile
        """
        full_name = update.full_name.strip() or None
        profile = ProfileService._update(user_id, {"full_name": full_name})
        logger.info(f"Updated profile name for user: {user_id}")
        return profile

    @staticmethod
    def save_quiz_results(user_id: UUID | str, results: QuizResults) -> Profile:
        """
        Store onboarding quiz results and mark the quiz as completed.

        The structured fields (experience, duration, goals) are copied to
        their own columns so the dashboard can read them without parsing
        quiz_results.
        """
        profile = ProfileService._update(user_id, {
            "quiz_completed": True,
            "quiz_results": results.model_dump(mode="json", by_alias=True),
            "experience_level": results.experience_level.value,
            "preferred_duration": results.preferred_duration,
            "goals": results.goals,
        })
        logger.info(
            f"Saved quiz results for user: {user_id} "
            f"({len(results.recommended_exercise_ids)} recommendations)"
        )
        return profile

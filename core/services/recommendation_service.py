# =============================================================================
# core/services/recommendation_service.py - Onboarding Recommendations
# =============================================================================
# Turns onboarding quiz answers into exercise recommendations:
#
# 1. Map answers to exercise types and target areas
# 2. Fetch exercises no longer than the preferred duration + 2 minutes,
#    featured first, then shortest first
# 3. Score: +2 for a matching type, +1 per matching target area
# 4. Keep the 5 best (ties keep fetch order)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import QuizIncompleteError
from core.models.profile import ExperienceLevel
from core.models.quiz import QuizResults, QuizSubmission, RecommendedFilters
from core.quiz_data import ONBOARDING_QUESTIONS
from core.services.exercise_service import ExerciseService
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

RECOMMENDATION_COUNT = 5
DURATION_BUFFER_SECONDS = 120
DEFAULT_PREFERRED_MINUTES = 10

# Focus-area answer -> exercise target areas
FOCUS_AREA_TARGETS = {
    "jaw": ["jaw", "face"],
    "neck": ["neck"],
    "shoulders": ["shoulders"],
    "back": ["back"],
    "hands": ["arms"],
    "all": ["full_body"],
}


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class RecommendationService:
    """Service for quiz scoring and recommendations."""

    @staticmethod
    def parse_answers(submission: QuizSubmission) -> QuizResults:
        """
        Convert raw answers (keyed by question ID) into QuizResults.

        Every question needs at least one answer. Single-choice questions
        use their first answer.

        Raises:
            QuizIncompleteError: If a question is unanswered or invalid
        """
        answers = submission.answers
        missing = [q.id for q in ONBOARDING_QUESTIONS if not answers.get(q.id)]
        if missing:
            raise QuizIncompleteError("unanswered questions", missing)

        try:
            experience = ExperienceLevel(answers["experience"][0])
            duration = int(answers["duration"][0])
        except ValueError as e:
            raise QuizIncompleteError(str(e), ["experience", "duration"])

        return QuizResults(
            stress_sources=answers.get("stress-sources", []),
            goals=answers.get("goals", []),
            experience_level=experience,
            preferred_duration=duration or DEFAULT_PREFERRED_MINUTES,
            focus_areas=answers.get("focus-areas", []),
        )

    @staticmethod
    def get_recommended_filters(results: QuizResults) -> RecommendedFilters:
        """
        Map quiz results to exercise types and target areas.

        Rules, in order:
        - calm-anxiety goal or general stress -> breathing, anxiety
        - release-tension goal or physical stress -> pmr
        - each focus area -> its target areas (hands -> arms, all -> full_body)
        - better-sleep goal or sleep stress -> breathing, sleep
        - focus goal or work stress -> breathing + meditation, focus + calm
        - nothing matched -> pmr + breathing, calm + full_body
        """
        goals = set(results.goals)
        sources = set(results.stress_sources)
        types: list[str] = []
        areas: list[str] = []

        if "calm-anxiety" in goals or "general" in sources:
            types.append("breathing")
            areas.append("anxiety")

        if "release-tension" in goals or "physical" in sources:
            types.append("pmr")

        for focus_area, targets in FOCUS_AREA_TARGETS.items():
            if focus_area in results.focus_areas:
                areas.extend(targets)

        if "better-sleep" in goals or "sleep" in sources:
            types.append("breathing")
            areas.append("sleep")

        if "focus" in goals or "work" in sources:
            types.extend(["breathing", "meditation"])
            areas.extend(["focus", "calm"])

        if not types:
            types = ["pmr", "breathing"]
        if not areas:
            areas = ["calm", "full_body"]

        return RecommendedFilters(types=_unique(types), target_areas=_unique(areas))

    @staticmethod
    def score_exercises(
        candidates: list[dict[str, Any]],
        filters: RecommendedFilters,
        limit: int = RECOMMENDATION_COUNT,
    ) -> list[str]:
        """
        Rank candidate exercises and return the best IDs.

        Python's sort is stable, so equal scores keep the candidates'
        featured-then-shortest order.
        """
        scored = []
        for exercise in candidates:
            score = 2 if exercise.get("type") in filters.types else 0
            exercise_areas = exercise.get("target_areas") or []
            score += sum(1 for area in filters.target_areas if area in exercise_areas)
            scored.append((score, str(exercise["id"])))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [exercise_id for _, exercise_id in scored[:limit]]

    @staticmethod
    def recommend(results: QuizResults) -> list[str]:
        """Fetch candidates within the preferred duration and score them."""
        filters = RecommendationService.get_recommended_filters(results)
        max_seconds = results.preferred_duration * 60 + DURATION_BUFFER_SECONDS
        candidates = ExerciseService.load_candidates(max_seconds)
        return RecommendationService.score_exercises(candidates, filters)

    @staticmethod
    def submit_quiz(user_id: UUID | str, submission: QuizSubmission) -> QuizResults:
        """
        Score a completed quiz and store it on the profile.

        Returns:
            QuizResults including recommended_exercise_ids

        Raises:
            QuizIncompleteError: If answers are incomplete
            ProfileNotFoundError: If the user has no profile row
        """
        results = RecommendationService.parse_answers(submission)
        results.recommended_exercise_ids = RecommendationService.recommend(results)
        ProfileService.save_quiz_results(user_id, results)
        logger.info(f"Quiz submitted for user {user_id}")
        return results

# =============================================================================
# core/models/quiz.py - Onboarding Quiz Schemas
# =============================================================================
# The onboarding quiz asks five questions and turns the answers into
# exercise recommendations. Answers arrive keyed by question ID, the way
# the client collects them; QuizResults is what gets stored on the profile.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .profile import ExperienceLevel


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class QuizOption(BaseModel):
    id: str
    label: str
    value: str
    icon: str | None = None


class QuizQuestion(BaseModel):
    id: str
    question: str
    type: QuestionType
    options: list[QuizOption]


class QuizSubmission(BaseModel):
    """
    Raw answers from the onboarding flow.

    Example:
        {
            "answers": {
                "stress-sources": ["work", "sleep"],
                "goals": ["better-sleep"],
                "experience": ["beginner"],
                "duration": ["10"],
                "focus-areas": ["shoulders"]
            }
        }
    """

    answers: dict[str, list[str]] = Field(
        ...,
        description="Selected option values keyed by question ID"
    )


class RecommendedFilters(BaseModel):
    """Exercise types and target areas derived from quiz answers."""

    types: list[str] = Field(default_factory=list)
    target_areas: list[str] = Field(default_factory=list)


class QuizResults(BaseModel):
    """
    Stored in profiles.quiz_results (camelCase, as the web client reads it).
    """

    model_config = ConfigDict(populate_by_name=True)

    stress_sources: list[str] = Field(default_factory=list, alias="stressSources")
    goals: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = Field(
        default=ExperienceLevel.BEGINNER,
        alias="experienceLevel"
    )
    preferred_duration: int = Field(default=10, ge=1, alias="preferredDuration")
    focus_areas: list[str] = Field(default_factory=list, alias="focusAreas")
    recommended_exercise_ids: list[str] = Field(
        default_factory=list,
        alias="recommendedExerciseIds"
    )

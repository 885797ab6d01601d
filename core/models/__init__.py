# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - exercise.py: Exercises and their PMR / breathing / meditation content
# - program.py: Programs and user enrollments
# - profile.py: User profiles
# - subscription.py: Stripe subscription mirror
# - session.py: Recorded practice sessions and dashboard stats
# - quiz.py: Onboarding quiz questions, answers and results
# - user_context.py: Cached profile + subscription for a signed-in user
#
# These models define the "contract" between API and clients.
# =============================================================================

from .exercise import (
    BreathingPattern,
    Exercise,
    ExerciseList,
    ExerciseType,
    MeditationStep,
    PMRPhase,
    PMRStep,
    TARGET_AREA_LABELS,
)
from .program import (
    Program,
    ProgramCategory,
    ProgramDay,
    ProgramDetail,
    ProgramFilter,
    ProgramList,
    ProgramSummary,
    UserProgram,
)
from .profile import ExperienceLevel, Profile, ProfileUpdate
from .subscription import (
    PREMIUM_STATUSES,
    PlanType,
    Subscription,
    SubscriptionStatus,
    SubscriptionSummary,
)
from .session import (
    ActiveProgram,
    DashboardStats,
    PracticeSession,
    PracticeSessionCreate,
)
from .quiz import (
    QuestionType,
    QuizOption,
    QuizQuestion,
    QuizResults,
    QuizSubmission,
    RecommendedFilters,
)
from .user_context import AuthEvent, UserContext

__all__ = [
    # Exercises
    "BreathingPattern",
    "Exercise",
    "ExerciseList",
    "ExerciseType",
    "MeditationStep",
    "PMRPhase",
    "PMRStep",
    "TARGET_AREA_LABELS",
    # Programs
    "Program",
    "ProgramCategory",
    "ProgramDay",
    "ProgramDetail",
    "ProgramFilter",
    "ProgramList",
    "ProgramSummary",
    "UserProgram",
    # Profiles
    "ExperienceLevel",
    "Profile",
    "ProfileUpdate",
    # Subscriptions
    "PREMIUM_STATUSES",
    "PlanType",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionSummary",
    # Practice sessions
    "ActiveProgram",
    "DashboardStats",
    "PracticeSession",
    "PracticeSessionCreate",
    # Quiz
    "QuestionType",
    "QuizOption",
    "QuizQuestion",
    "QuizResults",
    "QuizSubmission",
    "RecommendedFilters",
    # User context
    "AuthEvent",
    "UserContext",
]

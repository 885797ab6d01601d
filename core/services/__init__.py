# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .billing_service import BillingService
from .exercise_service import ExerciseService
from .profile_service import ProfileService
from .program_service import ProgramService
from .recommendation_service import RecommendationService
from .session_service import SessionService
from .user_context_service import UserContextService
from .waitlist_service import WaitlistResult, WaitlistService

__all__ = [
    "BillingService",
    "ExerciseService",
    "ProfileService",
    "ProgramService",
    "RecommendationService",
    "SessionService",
    "UserContextService",
    "WaitlistResult",
    "WaitlistService",
]

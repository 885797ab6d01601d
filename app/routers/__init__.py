# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: Profile and onboarding quiz submission
# - quiz.py: Onboarding quiz questions
# - exercises.py: Exercise library, quick exercises and timelines
# - programs.py: Programs, enrollment and daily progress
# - sessions.py: Recorded practice sessions and dashboard stats
# - billing.py: Stripe checkout, portal and webhook
# - waitlist.py: Pre-launch waitlist signups (Loops)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile
from . import quiz
from . import exercises
from . import programs
from . import sessions
from . import billing
from . import waitlist

__all__ = [
    "health",
    "profile",
    "quiz",
    "exercises",
    "programs",
    "sessions",
    "billing",
    "waitlist",
]

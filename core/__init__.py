# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for profiles, exercises, programs, sessions
# - player/: Exercise timelines, playback state machine and narration
# - services/: Library, programs, sessions, quiz, billing and waitlist logic
# - catalog.py: Built-in quick exercises
# - quiz_data.py: Onboarding quiz questions
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================

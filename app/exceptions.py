# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the client how to recover (retry, upgrade, sign in).
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TranquilException(Exception):
    """
    Base exception for the Tranquil API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TRANQUIL_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Fetch Exceptions
# =============================================================================

class FetchTimeoutError(TranquilException):
    """Raised when a guarded data fetch does not finish in time."""

    def __init__(self, resource: str, timeout: float):
        super().__init__(
            message=f"Loading {resource} timed out after {timeout:g}s",
            code="FETCH_TIMEOUT",
            status_code=504,
            suggestion="Retry the request. Check your connection if this keeps happening",
            details={"resource": resource, "timeout_seconds": timeout}
        )


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileNotFoundError(TranquilException):
    """Raised when a user has no profiles row yet."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"Profile not found for user: {user_id}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Profiles are created on sign-up. Sign out and sign back in to retry",
            details={"user_id": user_id}
        )


# =============================================================================
# Exercise Exceptions
# =============================================================================

class ExerciseNotFoundError(TranquilException):
    """Raised when an exercise ID doesn't exist."""

    def __init__(self, exercise_id: str):
        super().__init__(
            message=f"Exercise not found: {exercise_id}",
            code="EXERCISE_NOT_FOUND",
            status_code=404,
            suggestion="Browse GET /api/v1/exercises for available exercises",
            details={"exercise_id": exercise_id}
        )


class InvalidExerciseError(TranquilException):
    """Raised when an exercise has no playable content."""

    def __init__(self, exercise_id: str, reason: str):
        super().__init__(
            message=f"Exercise {exercise_id} cannot be played: {reason}",
            code="INVALID_EXERCISE",
            status_code=422,
            details={"exercise_id": exercise_id, "reason": reason}
        )


# =============================================================================
# Program Exceptions
# =============================================================================

class ProgramNotFoundError(TranquilException):
    """Raised when a program ID doesn't exist."""

    def __init__(self, program_id: str):
        super().__init__(
            message=f"Program not found: {program_id}",
            code="PROGRAM_NOT_FOUND",
            status_code=404,
            suggestion="Browse GET /api/v1/programs for available programs",
            details={"program_id": program_id}
        )


class EnrollmentNotFoundError(TranquilException):
    """Raised when a user_programs row doesn't exist or belongs to someone else."""

    def __init__(self, user_program_id: str):
        super().__init__(
            message=f"Program enrollment not found: {user_program_id}",
            code="ENROLLMENT_NOT_FOUND",
            status_code=404,
            suggestion="Enroll with POST /api/v1/programs/{id}/enroll first",
            details={"user_program_id": user_program_id}
        )


class ProgramLockedError(TranquilException):
    """Raised when a free user tries to start a premium program."""

    def __init__(self, program_id: str):
        super().__init__(
            message=f"Program requires a premium subscription: {program_id}",
            code="PROGRAM_LOCKED",
            status_code=403,
            suggestion="Upgrade with POST /api/v1/stripe/checkout to unlock premium programs",
            details={"program_id": program_id}
        )


class ProgramCompletedError(TranquilException):
    """Raised when advancing an enrollment that already finished."""

    def __init__(self, user_program_id: str):
        super().__init__(
            message=f"Program already completed: {user_program_id}",
            code="PROGRAM_COMPLETED",
            status_code=400,
            suggestion="Pick a new program to continue your practice",
            details={"user_program_id": user_program_id}
        )


# =============================================================================
# Quiz Exceptions
# =============================================================================

class QuizIncompleteError(TranquilException):
    """Raised when onboarding answers are missing or not valid options."""

    def __init__(self, reason: str, question_ids: list[str] | None = None):
        super().__init__(
            message=f"Quiz answers are incomplete: {reason}",
            code="QUIZ_INCOMPLETE",
            status_code=422,
            suggestion="Answer every question from GET /api/v1/quiz/questions",
            details={"question_ids": question_ids or []}
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class BillingNotConfiguredError(TranquilException):
    """Raised when Stripe keys are missing."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"Billing is not configured: {setting} is missing",
            code="BILLING_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {setting} in your .env file",
            details={"setting": setting}
        )


class PriceNotConfiguredError(TranquilException):
    """Raised when the Stripe price for a plan is missing."""

    def __init__(self, plan_type: str):
        super().__init__(
            message="Price ID not configured",
            code="PRICE_NOT_CONFIGURED",
            status_code=500,
            suggestion="Set STRIPE_MONTHLY_PRICE_ID and STRIPE_YEARLY_PRICE_ID",
            details={"plan_type": plan_type}
        )


class CheckoutError(TranquilException):
    """Raised when Stripe rejects a customer or checkout session call."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to create checkout session",
            code="CHECKOUT_FAILED",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class WebhookSignatureError(TranquilException):
    """Raised when a Stripe webhook signature is missing or invalid."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(
            message=message,
            code="INVALID_SIGNATURE",
            status_code=400,
        )


# =============================================================================
# Waitlist Exceptions
# =============================================================================

class WaitlistUnavailableError(TranquilException):
    """Raised when the Loops API key is not configured."""

    def __init__(self):
        super().__init__(
            message="Service temporarily unavailable",
            code="WAITLIST_UNAVAILABLE",
            status_code=500,
            suggestion="Set LOOPS_API_KEY in your .env file",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def tranquil_exception_handler(
    request: Request,
    exc: TranquilException
) -> JSONResponse:
    """
    Convert TranquilException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )

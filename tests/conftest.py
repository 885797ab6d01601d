# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides row fixtures shaped like the Supabase tables
# - Provides a chainable Supabase query mock
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_123")
os.environ.setdefault("STRIPE_MONTHLY_PRICE_ID", "price_monthly")
os.environ.setdefault("STRIPE_YEARLY_PRICE_ID", "price_yearly")
os.environ.setdefault("LOOPS_API_KEY", "loops-test-key")
os.environ.setdefault("APP_URL", "https://tranquil.test")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock, patch

import pytest

from lib.supabase_client import SupabaseClient


USER_ID = "550e8400-e29b-41d4-a716-446655440000"
PROGRAM_ID = "660e8400-e29b-41d4-a716-446655440000"
USER_PROGRAM_ID = "770e8400-e29b-41d4-a716-446655440000"
EXERCISE_ID = "880e8400-e29b-41d4-a716-446655440000"


# =============================================================================
# Supabase query mock
# =============================================================================

QUERY_METHODS = (
    "select", "eq", "lte", "order", "limit", "single", "maybe_single",
    "insert", "update",
)


def make_query(data=None):
    """
    A query builder mock: every builder method returns the same mock and
    execute() returns a response with `data`.
    """
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    query.execute.return_value = MagicMock(data=data)
    return query


@pytest.fixture
def mock_supabase():
    """
    Patch SupabaseClient.get_client with a fake client.

    Set per-table results with `mock_supabase.tables["sessions"] = make_query([...])`;
    tables that aren't set return empty data.
    """
    client = MagicMock()
    client.tables = {}

    def table(name):
        return client.tables.setdefault(name, make_query([]))

    client.table.side_effect = table
    with patch.object(SupabaseClient, "get_client", return_value=client):
        yield client


@pytest.fixture(autouse=True)
def clear_fetch_guards():
    """Module-level guards cache across tests; start each test empty."""
    from core.services.exercise_service import library_guard
    from core.services.user_context_service import user_context_guard

    library_guard.clear()
    user_context_guard.clear()
    yield
    library_guard.clear()
    user_context_guard.clear()


# =============================================================================
# Row fixtures
# =============================================================================

@pytest.fixture
def profile_row():
    """A profiles row."""
    return {
        "id": USER_ID,
        "email": "sam@example.com",
        "full_name": "Sam Rivera",
        "avatar_url": None,
        "quiz_completed": True,
        "quiz_results": None,
        "preferred_duration": 10,
        "experience_level": "beginner",
        "goals": ["better-sleep"],
        "created_at": "2024-03-01T09:00:00+00:00",
        "updated_at": "2024-03-01T09:00:00+00:00",
    }


@pytest.fixture
def subscription_row():
    """An active subscriptions row."""
    return {
        "id": "sub-row-1",
        "user_id": USER_ID,
        "stripe_customer_id": "cus_123",
        "stripe_subscription_id": "sub_123",
        "status": "active",
        "plan_type": "yearly",
        "current_period_start": "2024-03-01T00:00:00+00:00",
        "current_period_end": "2025-03-01T00:00:00+00:00",
        "cancel_at_period_end": False,
    }


@pytest.fixture
def program_row():
    """A free 7-day PMR program."""
    return {
        "id": PROGRAM_ID,
        "title": "7 Days of Release",
        "description": "A week of progressive muscle relaxation",
        "category": "pmr",
        "difficulty": "beginner",
        "duration_days": 7,
        "image_url": None,
        "is_premium": False,
        "order_index": 0,
    }


@pytest.fixture
def user_program_row():
    """An in-progress enrollment at day 3."""
    return {
        "id": USER_PROGRAM_ID,
        "user_id": USER_ID,
        "program_id": PROGRAM_ID,
        "current_day": 3,
        "started_at": "2024-03-01T09:00:00+00:00",
        "completed_at": None,
        "is_active": True,
    }


@pytest.fixture
def breathing_row():
    """A stored 4-7-8 breathing exercise."""
    return {
        "id": EXERCISE_ID,
        "program_id": None,
        "title": "4-7-8 Breathing",
        "description": "Slow breathing for sleep",
        "type": "breathing",
        "duration_seconds": 240,
        "day_number": None,
        "order_index": 0,
        "content": {},
        "audio_script": None,
        "muscle_groups": None,
        "breathing_pattern": {"name": "4-7-8", "inhale": 4, "hold": 7, "exhale": 8, "cycles": 4},
        "target_areas": ["sleep", "anxiety"],
        "is_featured": True,
    }


@pytest.fixture
def pmr_row():
    """A short stored PMR exercise on program day 3."""
    return {
        "id": "990e8400-e29b-41d4-a716-446655440000",
        "program_id": PROGRAM_ID,
        "title": "Hands and Arms",
        "description": "Tense and release your arms",
        "type": "pmr",
        "duration_seconds": 30,
        "day_number": 3,
        "order_index": 0,
        "content": {
            "steps": [
                {"muscleGroup": "arms", "phase": "tense", "instruction": "Make fists.", "duration": 10},
                {"muscleGroup": "arms", "phase": "release", "instruction": "Let go.", "duration": 15},
                {"muscleGroup": "arms", "phase": "rest", "instruction": "Rest.", "duration": 5},
            ]
        },
        "target_areas": ["arms"],
        "is_featured": False,
    }


@pytest.fixture
def session_row():
    """A sessions row for a quick exercise."""
    return {
        "id": "aa0e8400-e29b-41d4-a716-446655440000",
        "user_id": USER_ID,
        "exercise_id": None,
        "user_program_id": None,
        "completed_at": "2024-03-10T08:00:00+00:00",
        "duration_seconds": 128,
        "feedback_rating": 5,
        "notes": None,
    }

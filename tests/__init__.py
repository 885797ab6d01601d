# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Tranquil API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_player.py / test_runner.py: Timelines, playback and narration
# - test_*.py (services): Library, programs, sessions, quiz, billing, waitlist
# - test_api.py: Integration tests for HTTP and websocket endpoints
#
# Run tests with: pytest
# =============================================================================

# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - fetch_guard.py: Timeouts, de-duplication and caching for slow fetches
# - utils.py: Shared helpers (UUIDs, email checks, text clamping)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.fetch_guard import FetchGuard
from lib.utils import normalize_uuid, is_valid_email, clamp_text

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Fetch guards
    "FetchGuard",
    # Utils
    "normalize_uuid",
    "is_valid_email",
    "clamp_text",
]

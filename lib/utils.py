# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Args:
        value: UUID as string or UUID object

    Returns:
        String representation of the UUID

    Example:
        user_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        user_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Text Utilities
# =============================================================================

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Any) -> bool:
    """
    Loose email check: something@something.tld with no whitespace.

    Example:
        is_valid_email("sam@example.com")  # True
        is_valid_email("sam@example")      # False
    """
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def clamp_text(value: Any, max_length: int) -> str:
    """
    Coerce a form value to a trimmed string of at most max_length chars.

    Lists are joined with ", " (multi-select answers), None becomes "".

    Example:
        clamp_text(["yoga", "apps"], 200)  # "yoga, apps"
        clamp_text("  hello  ", 3)         # "hel"
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        text = ", ".join(str(item) for item in value)
    else:
        text = str(value)
    return text.strip()[:max_length]


def format_clock(seconds: int) -> str:
    """Format seconds as m:ss (e.g. 75 -> "1:15")."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def first_name(full_name: str | None) -> str | None:
    """Return the first word of a full name, or None when blank."""
    if not full_name or not full_name.strip():
        return None
    return full_name.split()[0]

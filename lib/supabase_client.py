# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for fetching:
# - User profiles and subscriptions (the user context)
# - Exercises and programs (the library)
# - Program enrollments (user_programs)
#
# Supabase-py is synchronous. Callers on the event loop go through
# lib.fetch_guard, which moves these calls to a worker thread.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST error code for ".single()" matching zero rows
NO_ROWS_CODE = "PGRST116"
# Postgres code for a malformed value, e.g. a non-UUID id
INVALID_TEXT_CODE = "22P02"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so callers can tell HOW to fix,
    not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        profile = SupabaseClient.fetch_profile("550e8400-...")
        subscription = SupabaseClient.fetch_subscription("550e8400-...")
        is_premium = bool(subscription) and subscription["status"] in ("active", "trialing")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every query made through it must therefore filter by user_id
        itself.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _fetch_by_id(
        cls,
        table: str,
        row_id: str | UUID,
        code: str,
        column: str = "id",
    ) -> dict[str, Any] | None:
        """Fetch one row by a unique column, None when no row matches."""
        client = cls.get_client()
        row_id_str = normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .select("*")
                .eq(column, row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e) or INVALID_TEXT_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code=code,
                suggestion=f"Check that the {table} table is reachable and {column} is correct",
                details={"table": table, column: row_id_str}
            )

    # -------------------------------------------------------------------------
    # User Context
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the profiles row for a user.

        Args:
            user_id: The auth user UUID (profiles.id)

        Returns:
            Profile dict, or None if the row doesn't exist yet

        Raises:
            SupabaseClientError: If query fails
        """
        return cls._fetch_by_id("profiles", user_id, code="FETCH_PROFILE_FAILED")

    @classmethod
    def fetch_subscription(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the subscription row for a user.

        Uses maybe_single(): a user on the free plan has no row at all,
        which is not an error.

        Args:
            user_id: The auth user UUID

        Returns:
            Subscription dict, or None for free users

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table("subscriptions")
                .select("*")
                .eq("user_id", user_id_str)
                .maybe_single()
                .execute()
            )
            # Newer supabase-py returns None instead of an empty response
            return response.data if response is not None else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch subscription: {e}",
                code="FETCH_SUBSCRIPTION_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Library
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_exercise(cls, exercise_id: str | UUID) -> dict[str, Any] | None:
        """Fetch an exercise by ID, None if not found."""
        return cls._fetch_by_id("exercises", exercise_id, code="FETCH_EXERCISE_FAILED")

    @classmethod
    def fetch_program(cls, program_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a program by ID, None if not found."""
        return cls._fetch_by_id("programs", program_id, code="FETCH_PROGRAM_FAILED")

    # -------------------------------------------------------------------------
    # Enrollments
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_program(cls, user_program_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a user_programs row by ID, None if not found."""
        return cls._fetch_by_id("user_programs", user_program_id, code="FETCH_ENROLLMENT_FAILED")

    @classmethod
    def fetch_enrollment(
        cls,
        user_id: str | UUID,
        program_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch a user's most recent enrollment in a program.

        Args:
            user_id: The auth user UUID
            program_id: The program UUID

        Returns:
            user_programs dict, or None if the user never enrolled

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("user_programs")
                .select("*")
                .eq("user_id", normalize_uuid(user_id))
                .eq("program_id", normalize_uuid(program_id))
                .order("started_at", desc=True)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch enrollment: {e}",
                code="FETCH_ENROLLMENT_FAILED",
                details={"user_id": str(user_id), "program_id": str(program_id)}
            )

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @classmethod
    def insert_row(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with generated columns.

        Args:
            table: Table name
            data: Column values

        Returns:
            Inserted row dict with generated id and timestamps

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table}
            )

    @classmethod
    def update_rows(
        cls,
        table: str,
        data: dict[str, Any],
        column: str,
        value: str | UUID,
    ) -> list[dict[str, Any]]:
        """
        Update every row where column == value.

        Returns:
            Updated rows (empty when nothing matched)

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .update(data)
                .eq(column, normalize_uuid(value))
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table, column: str(value)}
            )

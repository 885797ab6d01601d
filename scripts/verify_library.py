#!/usr/bin/env python3
# =============================================================================
# scripts/verify_library.py - Exercise Library Verification
# =============================================================================
# Checks a live Supabase project for the columns and content the library
# and recommendations depend on:
#   1. exercises.target_areas and exercises.is_featured exist
#   2. Some exercises have target_areas
#   3. Some exercises are featured
#   4. program_id is nullable (standalone library exercises)
#
# Usage:
#   python scripts/verify_library.py
#
# Exits 0 when every check passes, 1 otherwise.
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from supabase import create_client

# Postgres "undefined column"
UNDEFINED_COLUMN_CODE = "42703"


def check_columns(client) -> bool:
    print("1. Checking for columns (target_areas, is_featured)...")
    try:
        client.table("exercises").select("target_areas, is_featured").limit(1).execute()
    except Exception as e:
        if UNDEFINED_COLUMN_CODE in str(e):
            print("   FAIL: columns not found, the library migration is not applied")
        else:
            print(f"   FAIL: {e}")
        return False
    print("   OK: columns exist")
    return True


def check_target_areas(client) -> bool:
    print("\n2. Checking that target_areas are populated...")
    rows = (
        client.table("exercises")
        .select("id, title, target_areas")
        .not_.is_("target_areas", "null")
        .limit(5)
        .execute()
    ).data or []

    if not rows:
        print("   FAIL: no exercises have target_areas")
        return False

    print(f"   OK: found {len(rows)} exercises with target_areas")
    for row in rows[:3]:
        print(f"      - {row['title']}: [{', '.join(row.get('target_areas') or [])}]")
    return True


def check_featured(client) -> bool:
    print("\n3. Checking for featured exercises...")
    rows = (
        client.table("exercises")
        .select("id, title")
        .eq("is_featured", True)
        .limit(10)
        .execute()
    ).data or []

    if not rows:
        print("   FAIL: no featured exercises")
        return False

    print(f"   OK: found {len(rows)} featured exercises")
    for row in rows:
        print(f"      - {row['title']}")
    return True


def check_nullable_program(client) -> bool:
    print("\n4. Checking that program_id is nullable...")
    rows = (
        client.table("exercises")
        .select("id")
        .is_("program_id", "null")
        .limit(1)
        .execute()
    ).data or []

    if rows:
        print("   OK: found library exercises without a program")
    else:
        # The query itself succeeding means the column accepts the filter
        print("   WARN: no exercises without a program yet (column may still be nullable)")
    return True


def main() -> int:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        print("ERROR: SUPABASE_URL and SUPABASE_SERVICE_KEY (or SUPABASE_ANON_KEY) must be set")
        return 1

    client = create_client(url, key)

    print("=" * 60)
    print("  EXERCISE LIBRARY VERIFICATION")
    print("=" * 60 + "\n")

    try:
        checks = {"Columns added": check_columns(client)}
        if checks["Columns added"]:
            checks["Target areas populated"] = check_target_areas(client)
            checks["Featured exercises"] = check_featured(client)
            checks["Nullable program_id"] = check_nullable_program(client)
    except Exception as e:
        print(f"\nERROR: verification failed: {e}")
        return 1

    print("\n" + "=" * 60)
    print("  SUMMARY")
    print("=" * 60)
    for name, passed in checks.items():
        print(f"  {name:<25} {'OK' if passed else 'FAIL'}")

    if all(checks.values()) and len(checks) == 4:
        print("\nLibrary verification PASSED")
        return 0

    print("\nSome checks failed. Review the exercises table.")
    return 1


if __name__ == "__main__":
    sys.exit(main())

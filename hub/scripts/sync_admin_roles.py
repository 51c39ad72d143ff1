"""
Sync Admin Roles Script
Reconciles profiles.role with the sector_admins / subsector_admins tables:
a plain user holding an admin assignment is promoted to the matching role.
Can be run manually or as part of a nightly job.
"""

import argparse
import logging
from typing import Dict, List

from supabase import Client

from hub.database.supabase_client import SupabaseClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Sector admin wins when a user holds both kinds of assignment
ASSIGNMENT_TABLES = (
    ("sector_admins", "sector_admin"),
    ("subsector_admins", "subsector_admin"),
)


def expected_roles(supabase: Client) -> Dict[str, str]:
    """Map user_id -> role implied by its admin assignments."""
    expected: Dict[str, str] = {}
    for table, role in ASSIGNMENT_TABLES:
        rows = supabase.table(table).select("user_id").execute().data or []
        for row in rows:
            expected.setdefault(row["user_id"], role)
    return expected


def sync_roles(supabase: Client, dry_run: bool = False) -> List[Dict[str, str]]:
    logger.info("Syncing admin roles...")
    expected = expected_roles(supabase)
    if not expected:
        logger.info("No admin assignments found")
        return []

    profiles = supabase.table("profiles")\
        .select("id, email, role")\
        .in_("id", list(expected))\
        .execute().data or []

    changes = []
    for profile in profiles:
        target = expected[profile["id"]]
        if profile.get("role") != "user":
            continue
        changes.append({"id": profile["id"], "email": profile.get("email", ""), "from": "user", "to": target})
        if dry_run:
            logger.info(f"[dry-run] {profile.get('email')} would become {target}")
            continue
        try:
            supabase.table("profiles").update({"role": target}).eq("id", profile["id"]).execute()
            logger.info(f"Promoted {profile.get('email')} to {target}")
        except Exception as e:
            logger.error(f"Error promoting {profile.get('email')}: {e}")

    logger.info(f"Admin roles synced: {len(changes)} change(s){' planned' if dry_run else ''}")
    return changes


def main():
    parser = argparse.ArgumentParser(description="Promote users holding sector/subsector admin assignments")
    parser.add_argument("--dry-run", action="store_true", help="Only report the changes")
    args = parser.parse_args()

    sync_roles(SupabaseClient.create(), dry_run=args.dry_run)


if __name__ == "__main__":
    main()

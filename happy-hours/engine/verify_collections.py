"""
Database consistency check for collections.

Checks:
  1. ``active_happy_hours`` exists in the collections table with priority 1
  2. Its population against the nearby target (under or over → warning,
     empty → error)
  3. Every collection priority sits inside its band (``PRIORITY_BANDS``)
  4. Venues with no deals (warning)

Usage:
    python verify_collections.py

Exit code 0 = consistent, 1 = at least one error.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

from dotenv import load_dotenv
from supabase import create_client

from collection_resolver import members_of
from config.collections import ACTIVE_NEARBY_SLUG, NEARBY_TARGET_COUNT, check_priority_bands
from deal_store import DealStore

load_dotenv()

logger = logging.getLogger("verify")

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")
TARGET_COUNT = int(os.getenv("NEARBY_TARGET_COUNT", str(NEARBY_TARGET_COUNT)))


def verify(
    deals: list[dict[str, Any]],
    venues: list[dict[str, Any]],
    collections: list[dict[str, Any]],
    *,
    nearby_slug: str = ACTIVE_NEARBY_SLUG,
    target_count: int = NEARBY_TARGET_COUNT,
) -> dict[str, Any]:
    """Run every check over already-loaded rows.

    Returns ``{"errors": [...], "warnings": [...], "nearby_count": int,
    "venues_without_deals": [...]}``.  Nothing here touches the database.
    """
    errors: list[str] = []
    warnings: list[str] = []

    # --- Distinguished collection ---
    nearby = next((c for c in collections if c.get("slug") == nearby_slug), None)
    nearby_count = len(members_of(nearby_slug, deals))
    if nearby is None:
        errors.append(f"Collection '{nearby_slug}' does not exist")
    else:
        if nearby.get("priority") != 1:
            errors.append(
                f"Collection '{nearby_slug}' has priority {nearby.get('priority')} instead of 1"
            )
        if nearby_count == 0:
            errors.append(f"No deals tagged '{nearby_slug}'")
        elif nearby_count < target_count:
            warnings.append(
                f"Only {nearby_count} deals in '{nearby_slug}' (target is {target_count})"
            )
        elif nearby_count > target_count:
            warnings.append(
                f"{nearby_count} deals in '{nearby_slug}' (target is {target_count})"
            )

    # --- Priority bands ---
    errors.extend(check_priority_bands(collections))

    # --- Venues with no deals ---
    venue_ids_with_deals = {d.get("venue_id") for d in deals}
    idle = [v for v in venues if v.get("id") not in venue_ids_with_deals]
    if idle:
        warnings.append(f"{len(idle)} venues have no deals")

    unordered = sum(1 for d in deals if d.get("sort_order") is None)
    if unordered:
        logger.info("%d deals have no sort_order and rank after ordered ones", unordered)

    return {
        "errors": errors,
        "warnings": warnings,
        "nearby_count": nearby_count,
        "venues_without_deals": [v.get("id") for v in idle],
    }


def run_checks(store: DealStore, *, target_count: int = NEARBY_TARGET_COUNT) -> dict[str, Any]:
    """Load rows from *store* and log a report.  Returns the report dict."""
    report = verify(
        store.fetch_deals(),
        store.fetch_venues(),
        store.fetch_collections(),
        target_count=target_count,
    )

    for msg in report["warnings"]:
        logger.warning("%s", msg)
    for msg in report["errors"]:
        logger.error("%s", msg)

    if report["errors"]:
        logger.error("FAILED: %d consistency errors", len(report["errors"]))
    else:
        logger.info(
            "Consistency checks passed (%d warnings, nearby=%d/%d)",
            len(report["warnings"]), report["nearby_count"], target_count,
        )
    return report


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not SUPABASE_URL or not SUPABASE_KEY:
        logger.error("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
        return 1

    store = DealStore(create_client(SUPABASE_URL, SUPABASE_KEY))
    report = run_checks(store, target_count=TARGET_COUNT)
    return 1 if report["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())

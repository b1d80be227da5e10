"""
Post-data-refresh orchestrator.

Run after every deal import.  Loads deals and venues from Supabase,
then:

  1. Applies the registry priorities from ``config/collections.py``.
  2. Backfills ``active_happy_hours`` to its target population.
  3. Writes a ``refresh_metrics`` row.

Usage:
    python refresh.py              # full refresh
    python refresh.py --dry-run    # compute and log, skip all DB writes

Environment variables:
    SUPABASE_URL, SUPABASE_SERVICE_KEY   required
    DRY_RUN=true                         same as --dry-run
    LOCAL_TIMEZONE=Asia/Singapore        timezone deal windows are written in
    NEARBY_TARGET_COUNT=25               minimum size of the nearby collection
    NEARBY_RADIUS_KM=10                  backfill radius around the reference point
    REFERENCE_LAT / REFERENCE_LNG        reference point (default Raffles Place)

Only one refresh may run at a time; schedule it from a single cron job.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from supabase import create_client

from collection_resolver import group_all
from config.collections import (
    ACTIVE_NEARBY_SLUG,
    COLLECTIONS,
    DEFAULT_TIMEZONE,
    NEARBY_RADIUS_KM,
    NEARBY_TARGET_COUNT,
    REFERENCE_POINT,
)
from deal_activity import activity_map
from deal_schedule import schedule_for_deal
from deal_store import DealStore
from nearby_backfill import backfill
from refresh_metrics import collect_refresh_metrics

load_dotenv()

logger = logging.getLogger("orchestrator")

# ---------------------------------------------------------------------------
# Configuration from environment
# ---------------------------------------------------------------------------

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", DEFAULT_TIMEZONE)
TARGET_COUNT = int(os.getenv("NEARBY_TARGET_COUNT", str(NEARBY_TARGET_COUNT)))
RADIUS_KM = float(os.getenv("NEARBY_RADIUS_KM", str(NEARBY_RADIUS_KM)))
REFERENCE_LAT = float(os.getenv("REFERENCE_LAT", str(REFERENCE_POINT[0])))
REFERENCE_LNG = float(os.getenv("REFERENCE_LNG", str(REFERENCE_POINT[1])))


def _apply_added(deals: list[dict[str, Any]], added: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Fold backfilled tag values into the in-memory snapshot."""
    new_tags = {d.get("id"): d["collections"] for d in added}
    return [
        {**d, "collections": new_tags[d.get("id")]} if d.get("id") in new_tags else d
        for d in deals
    ]


def run_refresh(
    store: DealStore,
    *,
    now: datetime,
    tz: str = DEFAULT_TIMEZONE,
    target_count: int = NEARBY_TARGET_COUNT,
    radius_km: float = NEARBY_RADIUS_KM,
    reference_point: tuple[float, float] = REFERENCE_POINT,
    registry: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """One full post-refresh pass against *store*.  Returns the metrics dict."""
    registry = COLLECTIONS if registry is None else registry

    store.apply_priorities(registry)

    deals = store.fetch_deals()
    venues = store.fetch_venues()

    result = backfill(
        ACTIVE_NEARBY_SLUG,
        target_count,
        radius_km,
        reference_point,
        deals,
        venues,
        now=now,
        tz=tz,
        write_tags=store.update_deal_tags,
    )
    deals = _apply_added(deals, result["added"])

    unscheduled = sum(1 for d in deals if schedule_for_deal(d) is None)
    if unscheduled:
        logger.info("%d deals have no usable schedule and are never active", unscheduled)

    return collect_refresh_metrics(
        store.db,
        deals,
        group_all(deals),
        activity_map(deals, now, tz),
        registry_slugs={c["slug"] for c in registry},
        nearby_slug=ACTIVE_NEARBY_SLUG,
        nearby_target=target_count,
        backfilled=len(result["added"]),
        unscheduled=unscheduled,
        dry_run=store.dry_run,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Post-data-refresh collection maintenance")
    parser.add_argument("--dry-run", action="store_true", help="skip all DB writes")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not SUPABASE_URL or not SUPABASE_KEY:
        logger.error("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
        return 1

    try:
        ZoneInfo(LOCAL_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error("LOCAL_TIMEZONE=%r is not a known timezone", LOCAL_TIMEZONE)
        return 1

    store = DealStore(create_client(SUPABASE_URL, SUPABASE_KEY), dry_run=DRY_RUN or args.dry_run)

    started = time.monotonic()
    metrics = run_refresh(
        store,
        now=datetime.now(timezone.utc),
        tz=LOCAL_TIMEZONE,
        target_count=TARGET_COUNT,
        radius_km=RADIUS_KM,
        reference_point=(REFERENCE_LAT, REFERENCE_LNG),
    )
    logger.info(
        "Refresh finished in %ds: nearby=%d/%d, %d write failures",
        int(time.monotonic() - started),
        metrics["nearby_count"], metrics["nearby_target"], store.write_failures,
    )
    return 1 if store.write_failures else 0


if __name__ == "__main__":
    sys.exit(main())

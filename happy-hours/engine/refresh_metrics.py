"""
Post-refresh metrics collector: writes one row per day to refresh_metrics.

Called at the end of ``refresh.py`` so the admin dashboard can spot
regressions (nearby collection under target, active deal count dropping to
zero after a bad import, tags that match no registered collection).

Usage from refresh.py:
    from refresh_metrics import collect_refresh_metrics
    collect_refresh_metrics(db, deals, groups, ...)
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any

logger = logging.getLogger("metrics")


def collect_refresh_metrics(
    db: Any,
    deals: list[dict[str, Any]],
    groups: dict[str, list[dict[str, Any]]],
    activity: dict[Any, bool],
    *,
    registry_slugs: set[str] | None = None,
    nearby_slug: str = "active_happy_hours",
    nearby_target: int = 25,
    backfilled: int = 0,
    unscheduled: int = 0,
    region: str = "sg",
    run_date: str | None = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Compute and upsert refresh metrics.

    Returns the metrics dict (useful for logging / tests) regardless
    of whether the DB write succeeds.
    """
    active_count = sum(1 for d in deals if activity.get(d.get("id")))
    categories = Counter((d.get("alcohol_category") or "other").lower() for d in deals)
    venues = {d.get("venue_id") for d in deals if d.get("venue_id") is not None}

    unregistered: list[str] = []
    if registry_slugs is not None:
        unregistered = sorted(s for s in groups if s not in registry_slugs)

    nearby_count = len(groups.get(nearby_slug, []))

    metrics: dict[str, Any] = {
        "run_date": run_date or date.today().isoformat(),
        "region": region,
        "total_deals": len(deals),
        "active_deals": active_count,
        "unique_venues": len(venues),
        "unscheduled_deals": unscheduled,

        # Category breakdown
        "beer_count": categories.get("beer", 0),
        "wine_count": categories.get("wine", 0),
        "cocktail_count": categories.get("cocktail", 0),
        "spirits_count": categories.get("spirits", 0),

        # Collections
        "collection_count": len(groups),
        "collection_sizes": {slug: len(members) for slug, members in sorted(groups.items())},
        "unregistered_tags": unregistered[:20],
        "nearby_count": nearby_count,
        "nearby_target": nearby_target,
        "nearby_under_target": nearby_count < nearby_target,
        "backfilled": backfilled,
    }

    logger.info(
        "Refresh metrics: %d deals (%d active) at %d venues | "
        "%d collections | nearby=%d/%d (+%d backfilled)",
        metrics["total_deals"], active_count, metrics["unique_venues"],
        metrics["collection_count"], nearby_count, nearby_target, backfilled,
    )

    if unregistered:
        logger.info(
            "Tags with no registered collection: %s",
            ", ".join(unregistered[:10]),
        )

    if dry_run:
        logger.info("[DRY RUN] Would upsert refresh_metrics row for %s", metrics["run_date"])
        return metrics

    try:
        db.table("refresh_metrics").upsert(
            metrics,
            on_conflict="run_date,region",
        ).execute()
        logger.info("Refresh metrics saved for %s [%s]", metrics["run_date"], region)
    except Exception as e:
        # Non-fatal: a missing metrics table must not fail the refresh
        logger.warning("Failed to save refresh metrics: %s", e)

    return metrics

"""
Supabase access for the refresh jobs.

Reads ``deals``, ``venues`` and ``collections`` in pages and writes back the
only things the engine ever changes: a deal's ``collections`` tag field and
collection priorities.  With ``dry_run=True`` writes are logged and
skipped.

Usage:
    from deal_store import DealStore
    store = DealStore(db, dry_run=DRY_RUN)
    deals = store.fetch_deals()
    store.update_deal_tags(deal_id, "craft_beers,active_happy_hours")
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("store")

PAGE_SIZE = 1000

DEAL_COLUMNS = (
    "id, venue_id, alcohol_category, alcohol_subcategory, drink_name, "
    "standard_price, happy_hour_price, savings, savings_percentage, "
    "valid_days, hh_start_time, hh_end_time, collections, sort_order"
)
VENUE_COLUMNS = "id, name, latitude, longitude"
COLLECTION_COLUMNS = "id, slug, name, description, priority, is_active"


class DealStore:
    """Thin wrapper over a Supabase client."""

    def __init__(self, db: Any, *, dry_run: bool = False, page_size: int = PAGE_SIZE) -> None:
        self.db = db
        self.dry_run = dry_run
        self.page_size = page_size
        self.write_failures = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _fetch_all(self, table: str, columns: str) -> list[dict[str, Any]]:
        """Page through *table* with ``.range()``; Supabase caps rows per call."""
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            resp = (
                self.db.table(table)
                .select(columns)
                .order("id")
                .range(offset, offset + self.page_size - 1)
                .execute()
            )
            batch = resp.data or []
            rows.extend(batch)
            if len(batch) < self.page_size:
                break
            offset += self.page_size
        logger.info("Loaded %d rows from %s", len(rows), table)
        return rows

    def fetch_deals(self) -> list[dict[str, Any]]:
        return self._fetch_all("deals", DEAL_COLUMNS)

    def fetch_venues(self) -> list[dict[str, Any]]:
        return self._fetch_all("venues", VENUE_COLUMNS)

    def fetch_collections(self) -> list[dict[str, Any]]:
        return self._fetch_all("collections", COLLECTION_COLUMNS)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_deal_tags(self, deal_id: Any, tags: str) -> bool:
        """Set ``deals.collections`` for one deal.  Returns ``False`` on failure."""
        if self.dry_run:
            logger.info("[DRY RUN] Would set collections=%r on deal %s", tags, deal_id)
            return True
        try:
            self.db.table("deals").update({"collections": tags}).eq("id", deal_id).execute()
            return True
        except Exception as exc:
            self.write_failures += 1
            logger.warning("Failed to update collections on deal %s: %s", deal_id, exc)
            return False

    def apply_priorities(self, registry: list[dict[str, Any]]) -> int:
        """Upsert registry slug/name/description/priority/is_active rows.

        Returns the number of rows sent (0 in dry-run mode).
        """
        rows = [
            {
                "slug": c["slug"],
                "name": c["name"],
                "description": c.get("description"),
                "priority": c["priority"],
                "is_active": c.get("is_active", True),
            }
            for c in registry
        ]
        if self.dry_run:
            for row in rows:
                logger.info(
                    "[DRY RUN] Would set priority %d for collection %s",
                    row["priority"], row["slug"],
                )
            return 0
        try:
            self.db.table("collections").upsert(rows, on_conflict="slug").execute()
        except Exception as exc:
            self.write_failures += 1
            logger.warning("Failed to upsert collection priorities: %s", exc)
            return 0
        logger.info("Collection priorities applied (%d rows)", len(rows))
        return len(rows)

"""
Keep the "Happy Hours Nearby" collection populated.

The home page leads with ``active_happy_hours``.  Only a handful of deals
are tagged into it by hand, so after every data refresh we top it up to
``target_count`` members with the best-ranked deals near the reference
point:

  1. Count current members.  At or above target → nothing to do (extra
     members are never removed).
  2. Candidates = non-members whose venue is within ``radius_km`` of the
     reference point and which have a parseable schedule.
  3. Rank candidates with ``deal_ranking`` at ``now`` (no user location).
  4. Tag the top ``target_count - count`` candidates and hand each new
     ``collections`` value to ``write_tags``.

If the pool is smaller than the deficit every candidate is added and the
collection stays under target.  Running twice in a row writes nothing the
second time.

Callers must not run two backfills for the same collection concurrently;
both would compute the deficit from the same snapshot and overshoot.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Any, Callable

from collection_resolver import members_of
from collection_tags import add_tag
from deal_ranking import build_context, index_venues, sort_deals, venue_for
from deal_schedule import schedule_for_deal
from geo_distance import distance_to_venue

logger = logging.getLogger("backfill")

TagWriter = Callable[[Any, str], Any]


def find_candidates(
    slug: str,
    radius_km: float,
    reference_point: tuple[float, float],
    deals: list[dict[str, Any]],
    venues: dict[Any, dict[str, Any]],
    members: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Non-member deals near *reference_point* that have a schedule."""
    member_ids = {id(d) for d in members}
    candidates: list[dict[str, Any]] = []
    far = unscheduled = 0

    for deal in deals:
        if id(deal) in member_ids:
            continue
        venue = venue_for(deal, venues)
        if distance_to_venue(reference_point, venue) > radius_km:
            far += 1
            continue
        if schedule_for_deal(deal) is None:
            unscheduled += 1
            continue
        candidates.append(deal)

    logger.info(
        "[%s] %d candidates (%d outside %.1fkm, %d without schedule)",
        slug, len(candidates), far, radius_km, unscheduled,
    )
    return candidates


def backfill(
    slug: str,
    target_count: int,
    radius_km: float,
    reference_point: tuple[float, float],
    deals: list[dict[str, Any]],
    venues: list[dict[str, Any]] | dict[Any, dict[str, Any]],
    *,
    now: datetime,
    tz: tzinfo | str | None = None,
    write_tags: TagWriter | None = None,
) -> dict[str, Any]:
    """Top up collection *slug* to *target_count* members.

    Returns ``{"added": [...], "final_count": int}`` where ``added`` holds
    copies of the tagged deals with their new ``collections`` value.  A deal
    whose write returns ``False`` is left out of both.

    Raises ``ValueError`` for a non-positive *target_count* and
    ``UnknownVenueError`` when a deal's venue is missing from *venues*.
    """
    if target_count <= 0:
        raise ValueError(f"target_count must be positive, got {target_count}")

    venue_index = index_venues(venues)
    for deal in deals:
        venue_for(deal, venue_index)

    members = members_of(slug, deals)
    count = len(members)
    if count >= target_count:
        logger.info("[%s] %d/%d members, no backfill needed", slug, count, target_count)
        return {"added": [], "final_count": count}

    deficit = target_count - count
    candidates = find_candidates(slug, radius_km, reference_point, deals, venue_index, members)
    context = build_context(candidates, venue_index, now, tz)
    picks = sort_deals(candidates, context)[:deficit]

    added: list[dict[str, Any]] = []
    for deal in picks:
        new_tags = add_tag(deal.get("collections"), slug)
        if write_tags is not None and write_tags(deal.get("id"), new_tags) is False:
            logger.warning("[%s] could not tag deal %s, skipping", slug, deal.get("id"))
            continue
        added.append({**deal, "collections": new_tags})
        logger.debug("[%s] added deal %s (%s)", slug, deal.get("id"), deal.get("drink_name"))

    final_count = count + len(added)
    if final_count < target_count:
        logger.warning(
            "[%s] under target after backfill: %d/%d (candidate pool exhausted or writes failed)",
            slug, final_count, target_count,
        )
    else:
        logger.info("[%s] backfilled %d deals → %d members", slug, len(added), final_count)

    return {"added": added, "final_count": final_count}

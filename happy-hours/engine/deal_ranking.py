"""
Deal ordering for collection rows and backfill candidate pools.

Sort key, most significant first:

  1. Active right now             open deals before closed ones
  2. Explicit ``sort_order``      ascending, missing sorts last
  3. Distance to the user         ascending, only when a location is given
  4. Happy hour price             ascending, missing sorts last
  5. Savings percentage           descending
  6. Venue name                   case-insensitive, ascending

then venue name (exact), drink name and deal id so that two different
deals never compare equal and repeated sorts are identical.

Activity is evaluated once per deal when the context is built, not per
comparison.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

from deal_activity import activity_map
from deal_pricing import deal_price, savings_percentage
from geo_distance import distance_to_venue


class UnknownVenueError(KeyError):
    """A deal references a venue id that is not in the venue lookup."""

    def __init__(self, deal_id: Any, venue_id: Any) -> None:
        super().__init__(f"Deal {deal_id!r} references unknown venue {venue_id!r}")
        self.deal_id = deal_id
        self.venue_id = venue_id

    def __str__(self) -> str:
        return self.args[0]


@dataclass
class RankingContext:
    """Everything a comparison needs besides the two deals."""

    now: datetime
    activity: dict[Any, bool]
    venues: dict[Any, dict[str, Any]]
    user_location: tuple[float, float] | None = None


def index_venues(venues: list[dict[str, Any]] | dict[Any, dict[str, Any]]) -> dict[Any, dict[str, Any]]:
    if isinstance(venues, dict):
        return venues
    return {v.get("id"): v for v in venues}


def build_context(
    deals: list[dict[str, Any]],
    venues: list[dict[str, Any]] | dict[Any, dict[str, Any]],
    now: datetime,
    tz: tzinfo | str | None = None,
    user_location: tuple[float, float] | None = None,
) -> RankingContext:
    return RankingContext(
        now=now,
        activity=activity_map(deals, now, tz),
        venues=index_venues(venues),
        user_location=user_location,
    )


def venue_for(deal: dict[str, Any], venues: dict[Any, dict[str, Any]]) -> dict[str, Any]:
    """Look up a deal's venue, raising :class:`UnknownVenueError` on a miss."""
    venue_id = deal.get("venue_id")
    venue = venues.get(venue_id)
    if venue is None:
        raise UnknownVenueError(deal.get("id"), venue_id)
    return venue


def _id_key(value: Any) -> tuple:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, "" if value is None else str(value))


def _sort_order(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return math.inf
    try:
        result = float(value)
    except (TypeError, ValueError):
        return math.inf
    return result if math.isfinite(result) else math.inf


def ranking_key(deal: dict[str, Any], context: RankingContext) -> tuple:
    """Sort key for *deal*; smaller sorts first."""
    venue = venue_for(deal, context.venues)
    venue_name = venue.get("name") or ""

    explicit = _sort_order(deal.get("sort_order"))

    price = deal_price(deal)

    key: list[Any] = [
        0 if context.activity.get(deal.get("id"), False) else 1,
        explicit,
    ]
    if context.user_location is not None:
        key.append(distance_to_venue(context.user_location, venue))
    key.extend([
        price if price is not None else math.inf,
        -savings_percentage(deal),
        venue_name.casefold(),
        venue_name,
        (deal.get("drink_name") or "").casefold(),
        _id_key(deal.get("id")),
    ])
    return tuple(key)


def compare(a: dict[str, Any], b: dict[str, Any], context: RankingContext) -> int:
    """Three-way comparison: ``-1`` if *a* ranks first, ``1`` if *b* does."""
    ka = ranking_key(a, context)
    kb = ranking_key(b, context)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def sort_deals(deals: list[dict[str, Any]], context: RankingContext) -> list[dict[str, Any]]:
    """Return *deals* in ranking order (input list is not modified)."""
    return sorted(deals, key=lambda d: ranking_key(d, context))


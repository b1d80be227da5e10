"""
Collection membership and the home-page collection listing.

Membership comes only from the deal's ``collections`` tag field (parsed by
``collection_tags``).  Tags that are not in the registry still group fine,
so ad-hoc tags typed into the spreadsheet work for direct links, but only
registry collections make it into ``build_listing``.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Any

from collection_tags import normalize, parse_tags
from deal_ranking import RankingContext, sort_deals

_RE_PRICE_WORD = re.compile(r"_(under|below|above|over)_")


def members_of(slug: str, deals: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Deals tagged with *slug* (compared after normalization), in input order."""
    target = normalize(slug)
    if not target:
        return []
    return [d for d in deals if target in parse_tags(d.get("collections"))]


def group_all(deals: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Single pass: slug -> deals carrying that tag.  Empty groups never appear."""
    groups: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for deal in deals:
        for tag in parse_tags(deal.get("collections")):
            groups[tag].append(deal)
    return dict(groups)


def prettify_slug(slug: str) -> str:
    """Best-effort display name for a slug that is not in the registry.

    >>> prettify_slug("beers_under_12")
    'Beers Under $12'
    """
    if slug in ("one_for_one", "one_for_one_deals"):
        return "1-for-1 Deals"
    text = _RE_PRICE_WORD.sub(lambda m: f" {m.group(1)} $", slug)
    return " ".join(word[:1].upper() + word[1:] for word in text.replace("_", " ").split())


def display_name(slug: str, registry: list[dict[str, Any]]) -> str:
    for c in registry:
        if c.get("slug") == slug and c.get("name"):
            return c["name"]
    return prettify_slug(slug)


def build_listing(
    deals: list[dict[str, Any]],
    registry: list[dict[str, Any]],
    context: RankingContext,
) -> list[dict[str, Any]]:
    """Registry collections with their ranked deals, in display order.

    Inactive and empty collections are left out.  A registry entry with
    ``match_all`` holds every deal regardless of tags.
    """
    groups = group_all(deals)
    active = [c for c in registry if c.get("is_active", True)]
    active.sort(key=lambda c: (c.get("priority") if c.get("priority") is not None else 999, c["slug"]))

    listing: list[dict[str, Any]] = []
    for c in active:
        if c.get("match_all"):
            members = list(deals)
        else:
            members = groups.get(normalize(c["slug"]), [])
        if not members:
            continue
        listing.append({
            "slug": c["slug"],
            "name": c.get("name") or prettify_slug(c["slug"]),
            "description": c.get("description"),
            "priority": c.get("priority"),
            "deals": sort_deals(members, context),
        })
    return listing

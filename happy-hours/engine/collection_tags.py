"""
Collection tag normalization.

Deals join collections through a single comma-separated text field
(``deals.collections``) that is typed by hand in the import spreadsheet,
so the same collection shows up as ``"1-for-1"``, ``"1 for 1"`` and
``"one_for_one"``.  Every read and write of that field goes through this
module; nothing else should split it.
"""

from __future__ import annotations

import re
from typing import Iterable

_RE_SEPARATORS = re.compile(r"[\s\-]+")

# Spellings that should land on the same slug after the basic rules run.
TAG_ALIASES: dict[str, str] = {
    "1_for_1": "one_for_one",
    "1_for_1_deal": "one_for_one_deals",
    "1_for_1_deals": "one_for_one_deals",
    "1for1_deals": "one_for_one_deals",
    "freeflow_deals": "free_flow_deals",
}


def normalize(tag: str | None) -> str:
    """Canonical form of a single tag.

    >>> normalize("  1-FOR-1 ")
    'one_for_one'
    >>> normalize("Wine Deals")
    'wine_deals'
    """
    if not tag:
        return ""
    slug = _RE_SEPARATORS.sub("_", tag.strip().lower())
    return TAG_ALIASES.get(slug, slug)


def parse_tags(field: str | None) -> tuple[str, ...]:
    """Split a ``collections`` field into unique normalized tags.

    First occurrence wins, so serializing the result back keeps the
    original order.
    """
    if not field:
        return ()
    seen: dict[str, None] = {}
    for piece in str(field).split(","):
        tag = normalize(piece)
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def serialize_tags(tags: Iterable[str]) -> str:
    return ",".join(tags)


def add_tag(field: str | None, tag: str) -> str:
    """Return *field* with *tag* appended (normalized) if not already there.

    Existing text is kept as typed; only the new tag is added at the end.

    >>> add_tag("Craft Beers", "active_happy_hours")
    'Craft Beers,active_happy_hours'
    """
    current = "" if field is None else str(field)
    new_tag = normalize(tag)
    if not new_tag or new_tag in parse_tags(current):
        return current
    base = current.rstrip(", ")
    if not parse_tags(base):
        return new_tag
    return serialize_tags((base, new_tag))


def has_tag(field: str | None, tag: str) -> bool:
    return normalize(tag) in parse_tags(field)

"""
Collection registry and engine defaults.

Collections are the rows shown on the home page, ordered by ``priority``
(lower = shown earlier).  Deals join a collection through the free-text
``collections`` tag field on the deal row, so every slug here is already in
normalized form (see ``collection_tags.normalize``).

Priority bands:
  - 1        active_happy_hours (the distinguished "nearby right now" row)
  - 2        all_deals
  - 10-13    price-based beer / wine / cocktail rows under $12
  - 15-19    special deal types (1-for-1, free flow)
  - 20-22    price-based rows under $15
  - 22-25    beer buckets
  - 25-30    beers under $15
  - 40-41    spirit rows (whisky, gin)
  - 60+      location rows and everything else

Collections with ``is_active: False`` stay in the registry so that
``refresh.py`` keeps their priority rows in sync, but they are never listed.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Engine defaults
# ---------------------------------------------------------------------------

ACTIVE_NEARBY_SLUG = "active_happy_hours"
ALL_DEALS_SLUG = "all_deals"

# Minimum population of the distinguished collection and the radius (km)
# around the reference point in which backfill candidates are sought.
NEARBY_TARGET_COUNT = 25
NEARBY_RADIUS_KM = 10.0

# Raffles Place, Singapore CBD.
REFERENCE_POINT = (1.2830, 103.8513)

DEFAULT_TIMEZONE = "Asia/Singapore"

# Fallback window for deals imported with a blank start / end time.
DEFAULT_START_TIME = "16:00"
DEFAULT_END_TIME = "19:00"

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

COLLECTIONS = [
    {
        "slug": ACTIVE_NEARBY_SLUG,
        "name": "Happy Hours Nearby",
        "description": "Happy hour deals active right now near you",
        "priority": 1,
        "is_active": True,
    },
    {
        "slug": ALL_DEALS_SLUG,
        "name": "All Deals",
        "description": "Every happy hour deal we know about",
        "priority": 2,
        "is_active": True,
        "match_all": True,
    },
    # -- Price-based, under $12 (10-13) --
    {
        "slug": "beers_under_12",
        "name": "Beers Under $12",
        "description": "Great beer deals under $12",
        "priority": 10,
        "is_active": True,
    },
    {
        "slug": "wines_under_12",
        "name": "Wines Under $12",
        "description": "Great wine deals under $12",
        "priority": 10,
        "is_active": True,
    },
    {
        "slug": "cocktails_under_12",
        "name": "Cocktails Under $12",
        "description": "Excellent cocktail deals under $12",
        "priority": 10,
        "is_active": True,
    },
    {
        "slug": "craft_beers",
        "name": "Craft Beers",
        "description": "Special prices on craft beer",
        "priority": 12,
        "is_active": True,
    },
    # -- Special deal types (15-19) --
    {
        "slug": "one_for_one_deals",
        "name": "1-for-1 Deals",
        "description": "Buy one, get one free deals",
        "priority": 15,
        "is_active": True,
    },
    {
        "slug": "free_flow_deals",
        "name": "Free Flow Deals",
        "description": "Unlimited drink packages",
        "priority": 16,
        "is_active": True,
    },
    {
        "slug": "two_bottle_discounts",
        "name": "Two Bottle Discounts",
        "description": "Better prices when you buy two bottles",
        "priority": 17,
        "is_active": True,
    },
    # -- Price-based, under $15 (20-22) --
    {
        "slug": "cocktails_under_15",
        "name": "Cocktails Under $15",
        "description": "Great cocktail deals under $15",
        "priority": 20,
        "is_active": True,
    },
    {
        "slug": "wines_under_15",
        "name": "Wines Under $15",
        "description": "Great wine deals under $15",
        "priority": 21,
        "is_active": True,
    },
    {
        "slug": "bottles_under_100",
        "name": "Bottles Under $100",
        "description": "Bottle service under $100",
        "priority": 22,
        "is_active": True,
    },
    # -- Beer buckets / beers under $15 --
    {
        "slug": "beer_buckets_under_40",
        "name": "Beer Buckets Under $40",
        "description": "Beer bucket specials under $40",
        "priority": 23,
        "is_active": True,
    },
    {
        "slug": "beers_under_15",
        "name": "Beers Under $15",
        "description": "Beer deals under $15",
        "priority": 25,
        "is_active": True,
    },
    # -- Spirits (40-41) --
    {
        "slug": "whisky_deals",
        "name": "Whisky Deals",
        "description": "Whisky pours at happy hour prices",
        "priority": 40,
        "is_active": True,
    },
    {
        "slug": "gin_deals",
        "name": "Gin Deals",
        "description": "Gin and tonics for less",
        "priority": 41,
        "is_active": True,
    },
    # -- Location rows (60+) --
    {
        "slug": "cbd_deals",
        "name": "CBD Deals",
        "description": "After-work deals in the Central Business District",
        "priority": 60,
        "is_active": True,
    },
    {
        "slug": "orchard_deals",
        "name": "Orchard Deals",
        "description": "Deals along Orchard Road",
        "priority": 61,
        "is_active": True,
    },
    {
        "slug": "holland_village_deals",
        "name": "Holland Village Deals",
        "description": "Deals around Holland Village",
        "priority": 62,
        "is_active": True,
    },
    {
        "slug": "weekend_specials",
        "name": "Weekend Specials",
        "description": "Special deals available on weekends",
        "priority": 70,
        "is_active": False,
    },
]

# ---------------------------------------------------------------------------
# Priority bands as (slug fragment, min, max).  First fragment contained in a
# slug wins, so more specific fragments come first.
# ---------------------------------------------------------------------------

PRIORITY_BANDS: list[tuple[str, int, int]] = [
    (ACTIVE_NEARBY_SLUG, 1, 1),
    (ALL_DEALS_SLUG, 2, 2),
    ("beers_under_12", 10, 13),
    ("wines_under_12", 10, 13),
    ("cocktails_under_12", 10, 13),
    ("one_for_one", 15, 19),
    ("free_flow", 15, 19),
    ("cocktails_under_15", 20, 22),
    ("wines_under_15", 20, 22),
    ("beer_buckets", 22, 25),
    ("beers_under_15", 25, 30),
    ("whisky_deals", 40, 41),
    ("gin_deals", 40, 41),
]


def get_collection_by_slug(slug: str) -> dict | None:
    for c in COLLECTIONS:
        if c["slug"] == slug:
            return c
    return None


def get_active_collections() -> list[dict]:
    return [c for c in COLLECTIONS if c.get("is_active", True)]


def find_priority_band(slug: str) -> tuple[int, int] | None:
    """Return the ``(min, max)`` priority band a slug must fall in, if any."""
    for fragment, low, high in PRIORITY_BANDS:
        if fragment in slug:
            return (low, high)
    return None


def check_priority_bands(collections: list[dict]) -> list[str]:
    """Return one message per collection whose priority is outside its band.

    Collections that match no band have no requirement and are skipped.
    """
    problems: list[str] = []
    for c in collections:
        slug = c.get("slug") or ""
        band = find_priority_band(slug)
        if band is None:
            continue
        priority = c.get("priority")
        low, high = band
        if priority is None or not low <= priority <= high:
            problems.append(
                f"Collection '{slug}' has priority {priority}, "
                f"should be between {low}-{high}"
            )
    return problems

"""Tests for collection_resolver.py: membership, grouping, the home-page listing."""

from __future__ import annotations

import pytest

from collection_resolver import build_listing, display_name, group_all, members_of, prettify_slug
from config.collections import COLLECTIONS
from deal_ranking import build_context


@pytest.fixture
def venues(make_venue):
    return [make_venue(id=1, name="Alpha"), make_venue(id=2, name="Bravo")]


class TestMembership:

    def test_members_match_after_normalization(self, make_deal):
        deals = [
            make_deal(id=1, collections="1-for-1, Wine Deals"),
            make_deal(id=2, collections="craft_beers"),
            make_deal(id=3, collections="1 for 1"),
        ]
        assert [d["id"] for d in members_of("one_for_one", deals)] == [1, 3]
        assert [d["id"] for d in members_of("1-FOR-1", deals)] == [1, 3]

    def test_blank_slug_has_no_members(self, make_deal):
        assert members_of("  ", [make_deal(collections="a")]) == []

    def test_untagged_deal_in_no_collection(self, make_deal):
        assert members_of("craft_beers", [make_deal(collections=None)]) == []


class TestGroupAll:

    def test_groups_by_every_tag(self, make_deal):
        deals = [
            make_deal(id=1, collections="craft_beers, active_happy_hours"),
            make_deal(id=2, collections="Craft Beers"),
            make_deal(id=3, collections=""),
        ]
        groups = group_all(deals)
        assert set(groups) == {"craft_beers", "active_happy_hours"}
        assert [d["id"] for d in groups["craft_beers"]] == [1, 2]
        assert [d["id"] for d in groups["active_happy_hours"]] == [1]

    def test_agrees_with_members_of(self, make_deal):
        deals = [
            make_deal(id=1, collections="a, b"),
            make_deal(id=2, collections="b, c"),
            make_deal(id=3, collections="c"),
        ]
        for slug, members in group_all(deals).items():
            assert members == members_of(slug, deals)

    def test_empty_input(self):
        assert group_all([]) == {}


class TestDisplayNames:

    @pytest.mark.parametrize("slug, expected", [
        ("beers_under_12", "Beers Under $12"),
        ("craft_beers", "Craft Beers"),
        ("bottles_over_100", "Bottles Over $100"),
        ("one_for_one", "1-for-1 Deals"),
    ])
    def test_prettify_slug(self, slug, expected):
        assert prettify_slug(slug) == expected

    def test_registry_name_wins(self):
        assert display_name("active_happy_hours", COLLECTIONS) == "Happy Hours Nearby"

    def test_unregistered_falls_back(self):
        assert display_name("sake_deals", COLLECTIONS) == "Sake Deals"


# =====================================================================
# build_listing
# =====================================================================


class TestBuildListing:

    REGISTRY = [
        {"slug": "craft_beers", "name": "Craft Beers", "priority": 12, "is_active": True},
        {"slug": "active_happy_hours", "name": "Happy Hours Nearby", "priority": 1,
         "is_active": True},
        {"slug": "all_deals", "name": "All Deals", "priority": 2, "is_active": True,
         "match_all": True},
        {"slug": "weekend_specials", "name": "Weekend Specials", "priority": 5,
         "is_active": False},
        {"slug": "gin_deals", "name": "Gin Deals", "priority": 41, "is_active": True},
    ]

    def test_listing_order_and_contents(self, make_deal, venues, at, sgt):
        deals = [
            make_deal(id=1, collections="craft_beers", happy_hour_price=12),
            make_deal(id=2, collections="craft_beers, active_happy_hours", happy_hour_price=9),
            make_deal(id=3, collections="weekend_specials"),
            make_deal(id=4, collections="sake_deals", venue_id=2),
        ]
        ctx = build_context(deals, venues, at(2024, 6, 7, 17, 0), sgt)
        listing = build_listing(deals, self.REGISTRY, ctx)

        # Inactive and empty registry rows are left out; unregistered tags never listed.
        assert [c["slug"] for c in listing] == ["active_happy_hours", "all_deals", "craft_beers"]

        by_slug = {c["slug"]: c for c in listing}
        assert [d["id"] for d in by_slug["craft_beers"]["deals"]] == [2, 1]
        assert len(by_slug["all_deals"]["deals"]) == 4
        assert by_slug["active_happy_hours"]["name"] == "Happy Hours Nearby"

    def test_missing_priority_sorts_last(self, make_deal, venues, at, sgt):
        registry = [
            {"slug": "b", "name": "B"},
            {"slug": "a", "name": "A", "priority": 50},
        ]
        deals = [make_deal(id=1, collections="a, b")]
        ctx = build_context(deals, venues, at(2024, 6, 7, 17, 0), sgt)
        assert [c["slug"] for c in build_listing(deals, registry, ctx)] == ["a", "b"]

    def test_equal_priority_breaks_on_slug(self, make_deal, venues, at, sgt):
        registry = [
            {"slug": "wines_under_12", "name": "W", "priority": 10},
            {"slug": "beers_under_12", "name": "B", "priority": 10},
        ]
        deals = [make_deal(id=1, collections="wines_under_12, beers_under_12")]
        ctx = build_context(deals, venues, at(2024, 6, 7, 17, 0), sgt)
        assert [c["slug"] for c in build_listing(deals, registry, ctx)] == [
            "beers_under_12", "wines_under_12",
        ]

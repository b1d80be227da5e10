"""Shared fixtures for the happy hour engine test suite."""

from __future__ import annotations

import itertools
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure the engine modules are importable from tests/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Singapore has no DST, so a fixed offset stands in for Asia/Singapore
# without depending on the system tz database.
SGT = timezone(timedelta(hours=8), "SGT")


@pytest.fixture
def sgt():
    return SGT


@pytest.fixture
def at():
    """Build an aware SGT datetime: ``at(2024, 6, 7, 18, 30)``.

    2024-06-02 is a Sunday, so 2024-06-07 is a Friday.
    """

    def _at(year, month, day, hour=0, minute=0):
        return datetime(year, month, day, hour, minute, tzinfo=SGT)

    return _at


@pytest.fixture
def make_venue():
    """Factory that builds venue dicts; defaults sit at Raffles Place."""
    counter = itertools.count(1)

    def _make(*, id=None, name=None, latitude=1.2830, longitude=103.8513, **overrides):
        n = next(counter)
        venue = {
            "id": id if id is not None else n,
            "name": name if name is not None else f"Venue {n}",
            "latitude": latitude,
            "longitude": longitude,
        }
        venue.update(overrides)
        return venue

    return _make


@pytest.fixture
def make_deal():
    """Factory that builds deal dicts with sensible defaults.

    Any keyword argument overrides the default.  The default schedule is
    every day 16:00-19:00.
    """
    counter = itertools.count(1)

    def _make(
        *,
        id=None,
        venue_id=1,
        drink_name=None,
        alcohol_category="beer",
        standard_price=15.0,
        happy_hour_price=10.0,
        valid_days="All Days",
        hh_start_time="16:00",
        hh_end_time="19:00",
        collections="",
        sort_order=None,
        **overrides,
    ):
        n = next(counter)
        deal = {
            "id": id if id is not None else n,
            "venue_id": venue_id,
            "drink_name": drink_name if drink_name is not None else f"Drink {n}",
            "alcohol_category": alcohol_category,
            "standard_price": standard_price,
            "happy_hour_price": happy_hour_price,
            "valid_days": valid_days,
            "hh_start_time": hh_start_time,
            "hh_end_time": hh_end_time,
            "collections": collections,
            "sort_order": sort_order,
        }
        deal.update(overrides)
        return deal

    return _make

"""Tests for deal_pricing.py and geo_distance.py."""

from __future__ import annotations

import math
from decimal import Decimal

import pytest

from deal_pricing import deal_price, derive_savings, savings_percentage, with_savings
from geo_distance import (
    distance_to_venue,
    format_distance,
    haversine_km,
    venue_coordinates,
    walking_minutes,
)


# =====================================================================
# Savings
# =====================================================================


class TestDeriveSavings:

    def test_basic(self):
        assert derive_savings(20, 15) == (Decimal("5"), 25)

    def test_rounds_half_up(self):
        # 1/8 = 12.5%
        assert derive_savings(8, 7)[1] == 13

    def test_string_prices(self):
        savings, pct = derive_savings("12.0", "9.5")
        assert savings == Decimal("2.5")
        assert pct == 21

    @pytest.mark.parametrize("standard", [0, None, "", "n/a", -5])
    def test_no_usable_standard_price(self, standard):
        assert derive_savings(standard, 5) == (Decimal("0"), 0)

    def test_missing_deal_price(self):
        assert derive_savings(20, None) == (Decimal("0"), 0)

    def test_savings_invariant(self):
        for standard, price in [(15, 10), (22.5, 18), (100, 1), (9.9, 9.9)]:
            savings, pct = derive_savings(standard, price)
            assert savings == Decimal(str(standard)) - Decimal(str(price))
            assert pct == int(
                (Decimal(100) * savings / Decimal(str(standard))).to_integral_value(
                    rounding="ROUND_HALF_UP"
                )
            )


class TestDealHelpers:

    def test_savings_percentage(self, make_deal):
        assert savings_percentage(make_deal(standard_price=20, happy_hour_price=10)) == 50

    def test_with_savings_copies(self, make_deal):
        deal = make_deal(standard_price=20, happy_hour_price=15)
        result = with_savings(deal)
        assert result["savings"] == 5.0
        assert result["savings_percentage"] == 25
        assert "savings" not in deal

    def test_with_savings_zero_standard(self, make_deal):
        result = with_savings(make_deal(standard_price=0, happy_hour_price=8))
        assert result["savings"] == 0.0
        assert result["savings_percentage"] == 0

    def test_deal_price(self, make_deal):
        assert deal_price(make_deal(happy_hour_price="9.50")) == 9.5
        assert deal_price(make_deal(happy_hour_price=None)) is None
        assert deal_price(make_deal(happy_hour_price="free?")) is None


# =====================================================================
# Distance
# =====================================================================


class TestDistance:

    def test_same_point(self):
        assert haversine_km(1.2830, 103.8513, 1.2830, 103.8513) == 0

    def test_one_degree_latitude(self):
        assert haversine_km(0, 103.8, 1, 103.8) == pytest.approx(111.19, abs=0.01)

    def test_symmetric(self):
        a = haversine_km(1.2830, 103.8513, 1.3048, 103.8318)
        b = haversine_km(1.3048, 103.8318, 1.2830, 103.8513)
        assert a == pytest.approx(b)

    def test_venue_coordinates(self, make_venue):
        assert venue_coordinates(make_venue(latitude="1.3", longitude="103.8")) == (1.3, 103.8)
        assert venue_coordinates(make_venue(latitude=None)) is None
        assert venue_coordinates(make_venue(longitude="?")) is None

    @pytest.mark.parametrize("lat, lng", [("nan", "nan"), (float("nan"), 103.8), (1.3, "inf")])
    def test_non_finite_coordinates_unusable(self, make_venue, lat, lng):
        venue = make_venue(latitude=lat, longitude=lng)
        assert venue_coordinates(venue) is None
        assert distance_to_venue((1.2830, 103.8513), venue) == math.inf

    def test_non_finite_point(self, make_venue):
        assert distance_to_venue((math.nan, 103.85), make_venue()) == math.inf

    def test_distance_to_venue_without_coordinates(self, make_venue):
        assert distance_to_venue((1.2830, 103.8513), make_venue(latitude=None)) == math.inf

    def test_distance_to_venue(self, make_venue):
        # Raffles Place → Orchard Road is roughly 3 km
        orchard = make_venue(latitude=1.3048, longitude=103.8318)
        assert 2.5 < distance_to_venue((1.2830, 103.8513), orchard) < 3.5

    def test_format_distance(self):
        assert format_distance(0.35) == "350m"
        assert format_distance(2.04) == "2.0km"

    def test_walking_minutes(self):
        assert walking_minutes(1.0) == 12

"""
Derived savings fields.

``savings`` and ``savings_percentage`` are never authored; they always
come from the two prices:

    savings    = standard_price - happy_hour_price
    percentage = round(100 * savings / standard_price)   (half-up)

and both are 0 when ``standard_price`` is 0 or missing.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_ZERO = Decimal("0")


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def derive_savings(standard_price: Any, deal_price: Any) -> tuple[Decimal, int]:
    """Return ``(savings, savings_percentage)`` for a pair of prices.

    >>> derive_savings(20, 15)
    (Decimal('5'), 25)
    >>> derive_savings(0, 5)
    (Decimal('0'), 0)
    """
    standard = _to_decimal(standard_price)
    price = _to_decimal(deal_price)
    if standard is None or standard <= 0 or price is None:
        return _ZERO, 0
    savings = standard - price
    pct = (Decimal(100) * savings / standard).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return savings, int(pct)


def savings_percentage(deal: dict[str, Any]) -> int:
    return derive_savings(deal.get("standard_price"), deal.get("happy_hour_price"))[1]


def with_savings(deal: dict[str, Any]) -> dict[str, Any]:
    """Copy of *deal* with ``savings`` / ``savings_percentage`` recomputed."""
    savings, pct = derive_savings(deal.get("standard_price"), deal.get("happy_hour_price"))
    return {**deal, "savings": float(savings), "savings_percentage": pct}


def deal_price(deal: dict[str, Any]) -> float | None:
    price = _to_decimal(deal.get("happy_hour_price"))
    return float(price) if price is not None else None

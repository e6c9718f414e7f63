"""
Retail price rules for catalog products.

Retail = estimated fulfilment cost x multiplier, never below the category
floor, then rounded to a .99 price point. All amounts are integer cents.
"""

from __future__ import annotations

import math
from typing import Any

from django.conf import settings


FALLBACK_MULTIPLIER = 2.8

# Floors in USD per product category
CATEGORY_FLOORS_USD = {
    "Unisex tee": 40,
    "Heavyweight tee": 42,
    "Women’s fitted tee": 40,
    "Women’s crop tee": 38,
    "Long-sleeve tee": 48,
    "Tank top (unisex)": 36,
    "Women’s racerback tank": 36,
    "Crewneck sweatshirt": 55,
    "Hoodie (fleece pullover)": 60,
    "Premium/thick hoodie": 68,
    "Zip hoodie": 65,
    "Baby bodysuit": 28,
    "Kids tee": 32,
    "Youth hoodie": 50,
    "Dad hat": 35,
    "Beanie": 32,
    "Snapback": 38,
    "Tote bag": 30,
    "11oz mug": 22,
    "15oz mug": 24,
    "Phone case": 28,
    "Sticker (per piece)": 6,
    "Poster 12×16": 28,
}


def _round_half_up(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def _to_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def get_default_multiplier() -> float:
    return float(getattr(settings, "PRICE_MULTIPLIER", FALLBACK_MULTIPLIER))


def usd_to_cents(usd: Any) -> int:
    return _round_half_up(_to_number(usd) * 100)


def cents_to_usd_string(cents: int) -> str:
    return f"{cents / 100:.2f}"


def round_to_99(cents: Any) -> int:
    """Round down to the dollar and end in .99 (4050 -> 4099)."""
    if not isinstance(cents, (int, float)) or not math.isfinite(cents):
        return 0
    dollars = math.floor(cents / 100)
    return dollars * 100 + 99


def get_category_floor_cents(category_label: str | None) -> int:
    floor_usd = CATEGORY_FLOORS_USD.get(category_label or "")
    if not floor_usd:
        return 0
    return usd_to_cents(floor_usd)


def compute_price_cents(
    cost_cents: Any,
    category_label: str | None = None,
    multiplier: float | None = None,
) -> int:
    """Compute the retail price (cents) from an estimated cost (cents) and category."""
    if multiplier is None:
        multiplier = get_default_multiplier()
    category_floor = get_category_floor_cents(category_label)
    multiplied = _round_half_up(_to_number(cost_cents) * _to_number(multiplier))
    return round_to_99(max(multiplied, category_floor))


def format_price_usd(cents: int) -> str:
    return cents_to_usd_string(cents)

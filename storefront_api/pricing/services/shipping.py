"""
Shipping and tax estimation.

Placeholder heuristics until a fulfilment provider quote is wired in.
Results feed the ``shipping``/``tax`` fields of a price calculation and are
always flagged as estimates by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .calculator import round2


BASE_SHIPPING = 4.50
SHIPPING_PER_EXTRA_ITEM = 1.25

US_HIGH_TAX_STATES = ("CA", "NY", "WA")
US_HIGH_TAX_RATE = 0.09
US_DEFAULT_TAX_RATE = 0.07
EU_VAT_COUNTRIES = ("GB", "DE", "FR")
EU_VAT_RATE = 0.20
DEFAULT_TAX_RATE = 0.10


@dataclass(frozen=True)
class ShippingTaxEstimate:
    shipping_amount: float
    tax_amount: float

    def to_dict(self) -> dict[str, float]:
        return {"shippingAmount": self.shipping_amount, "taxAmount": self.tax_amount}


def infer_tax_rate(country_code: str | None = None, state_code: str | None = None) -> float:
    if country_code == "US":
        if state_code in US_HIGH_TAX_STATES:
            return US_HIGH_TAX_RATE
        return US_DEFAULT_TAX_RATE
    if country_code in EU_VAT_COUNTRIES:
        return EU_VAT_RATE
    return DEFAULT_TAX_RATE


def estimate_shipping_and_tax(
    items: Iterable[Mapping[str, Any]],
    country_code: str | None = None,
    state_code: str | None = None,
    zip_code: str | None = None,
) -> ShippingTaxEstimate:
    """
    Estimate shipping and tax for cart items ({"quantity", "price"}).

    Shipping: flat first item plus a per-item charge for the rest.
    Tax: destination rate applied to the items subtotal.
    ``zip_code`` is accepted for provider parity but not used by the heuristic.
    """
    quantity = 0
    items_subtotal = 0.0
    for item in items:
        item_qty = max(0, item.get("quantity") or 0)
        quantity += item_qty
        items_subtotal += (item.get("price") or 0) * item_qty

    shipping = max(0.0, BASE_SHIPPING + max(0, quantity - 1) * SHIPPING_PER_EXTRA_ITEM)
    tax = round2(items_subtotal * infer_tax_rate(country_code, state_code))

    return ShippingTaxEstimate(shipping_amount=round2(shipping), tax_amount=tax)

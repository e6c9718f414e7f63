"""
Build calculator inputs from storefront state (selected variant + design placements).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from .calculator import DEFAULT_CURRENCY, Charge, PriceCalculationInput, coerce_number


def _has_content(placement: Any) -> bool:
    if not isinstance(placement, Mapping):
        return False
    return bool(placement.get("images")) or bool(placement.get("texts"))


def count_placements(placement_data: Mapping[str, Any] | None, base_price: float) -> int:
    """
    Placements that carry at least one image or text.
    A priced product always counts one placement, even with an empty design.
    """
    with_content = sum(1 for value in (placement_data or {}).values() if _has_content(value))
    return max(with_content, 1 if base_price > 0 else 0)


def build_design_input(
    variant: Mapping[str, Any] | None,
    placement_data: Mapping[str, Any] | None = None,
    *,
    quantity: int = 1,
    has_inside_label: bool = False,
    has_outside_label: bool = False,
    is_premium_image: bool = False,
    is_embroidery: bool = False,
    embroidery_digitization_fee_applicable: bool = False,
    membership_discount_rate: float = 0.0,
) -> PriceCalculationInput:
    variant = variant or {}
    base_price = max(0.0, coerce_number(variant.get("retail_price"), 0.0))
    placement_count = count_placements(placement_data, base_price)

    return PriceCalculationInput(
        currency=variant.get("currency") or DEFAULT_CURRENCY,
        base_price=base_price,
        quantity=quantity,
        extra_placements=max(0, placement_count - 1),
        has_inside_label=has_inside_label,
        has_outside_label=has_outside_label,
        is_premium_image=is_premium_image,
        is_embroidery=is_embroidery,
        embroidery_digitization_fee_applicable=embroidery_digitization_fee_applicable,
        membership_discount_rate=membership_discount_rate,
    )


def with_estimates(
    inputs: PriceCalculationInput,
    shipping_amount: float,
    tax_amount: float,
) -> PriceCalculationInput:
    """Attach estimated shipping and tax (negative amounts clamp to 0)."""
    return replace(
        inputs,
        shipping=Charge(amount=max(0.0, shipping_amount), is_estimated=True),
        tax=Charge(amount=max(0.0, tax_amount), is_estimated=True),
    )

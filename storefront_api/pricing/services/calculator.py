"""
Storefront price calculation service.

Turns a cart/product configuration into a price breakdown:
base price, per-placement fees, label/branding fees, embroidery digitization,
membership discount, shipping and tax.

The browser runs the same computation for instant previews, so every money
value is rounded to cents at each step, with the same float arithmetic as
``Math.round(x * 100) / 100``. The server result stays authoritative.

Malformed fields never raise; they are coerced to safe defaults in
``normalize_input`` before any arithmetic happens.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any


DEFAULT_CURRENCY = "USD"

# Ceiling for coerced amounts and counts; keeps every product finite
MAX_AMOUNT = 1_000_000_000.0

BASE_LABEL = "Base (incl. 1 placement)"
DISCOUNT_LABEL = "Membership/volume discount"


@dataclass(frozen=True)
class FeeSchedule:
    """Customization fees in the order currency. All but digitization are per item."""

    extra_placement: float = 3.00
    inside_label: float = 2.00
    outside_label: float = 2.00
    premium_image: float = 1.00
    embroidery_digitization: float = 6.00  # one-time per design

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any] | None) -> FeeSchedule:
        """
        Build a schedule from the defaults plus overrides.
        Raises ValueError on unknown fee names or on negative, non-numeric
        or oversized amounts.
        """
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown fee(s): {', '.join(unknown)}")
        values = {}
        for name, value in overrides.items():
            try:
                amount = float(value)
            except (TypeError, ValueError, OverflowError):
                raise ValueError(f"Fee {name} must be a non-negative number") from None
            if not math.isfinite(amount) or amount < 0:
                raise ValueError(f"Fee {name} must be a non-negative number")
            if amount > MAX_AMOUNT:
                raise ValueError(f"Fee {name} must not exceed {MAX_AMOUNT:.0f}")
            values[name] = amount
        return replace(cls(), **values)


DEFAULT_FEES = FeeSchedule()


@dataclass(frozen=True)
class Charge:
    """A shipping or tax amount supplied by the caller."""

    amount: float = 0.0
    is_estimated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, "isEstimated": self.is_estimated}


@dataclass(frozen=True)
class PriceCalculationInput:
    currency: str = DEFAULT_CURRENCY
    base_price: float = 0.0
    quantity: float = 1
    extra_placements: float = 0
    has_inside_label: bool = False
    has_outside_label: bool = False
    is_premium_image: bool = False
    is_embroidery: bool = False
    embroidery_digitization_fee_applicable: bool = False
    membership_discount_rate: float = 0.0
    shipping: Charge = field(default_factory=Charge)
    tax: Charge = field(default_factory=Charge)

    def to_dict(self) -> dict[str, Any]:
        """Wire (camelCase) representation, as posted to the quote endpoint."""
        return {
            "currency": self.currency,
            "basePrice": self.base_price,
            "quantity": self.quantity,
            "extraPlacements": self.extra_placements,
            "hasInsideLabel": self.has_inside_label,
            "hasOutsideLabel": self.has_outside_label,
            "isPremiumImage": self.is_premium_image,
            "isEmbroidery": self.is_embroidery,
            "embroideryDigitizationFeeApplicable": self.embroidery_digitization_fee_applicable,
            "membershipDiscountRate": self.membership_discount_rate,
            "shipping": self.shipping.to_dict(),
            "tax": self.tax.to_dict(),
        }


@dataclass(frozen=True)
class PriceLine:
    label: str
    amount: float
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"label": self.label, "amount": self.amount}
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class PriceBreakdown:
    currency: str
    lines: tuple[PriceLine, ...]
    subtotal: float
    discounts: float
    shipping: float
    tax: float
    total: float
    is_estimate: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "lines": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "discounts": self.discounts,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
            "isEstimate": self.is_estimate,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PriceBreakdown:
        """
        Rebuild a breakdown from its wire form (e.g. a quote endpoint response).
        Raises KeyError, TypeError or ValueError when the payload is not a breakdown.
        """
        lines = tuple(
            PriceLine(
                label=str(line["label"]),
                amount=float(line["amount"]),
                note=line.get("note"),
            )
            for line in data["lines"]
        )
        return cls(
            currency=str(data["currency"]),
            lines=lines,
            subtotal=float(data["subtotal"]),
            discounts=float(data["discounts"]),
            shipping=float(data["shipping"]),
            tax=float(data["tax"]),
            total=float(data["total"]),
            is_estimate=bool(data["isEstimate"]),
        )


def round2(value: float) -> float:
    """Round to cents, half away from zero."""
    scaled = value * 100
    if not math.isfinite(scaled):
        return value
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 100


def coerce_number(value: Any, fallback: float = 0.0) -> float:
    # Same acceptance as JavaScript's Number(): numeric strings parse,
    # blank strings are 0, booleans are 1/0, everything else falls back.
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return fallback
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return fallback
    else:
        return fallback
    return number if math.isfinite(number) else fallback


def _clamp(number: float, low: float) -> float:
    return min(max(number, low), MAX_AMOUNT)


def _coerce_bool(value: Any, fallback: bool = False) -> bool:
    return value if isinstance(value, bool) else fallback


def _coerce_charge(value: Any) -> Charge:
    if isinstance(value, Charge):
        value = value.to_dict()
    if not isinstance(value, Mapping):
        return Charge()
    return Charge(
        amount=_clamp(coerce_number(value.get("amount"), 0.0), 0.0),
        is_estimated=bool(value.get("isEstimated")),
    )


def normalize_input(raw: Any) -> PriceCalculationInput:
    """
    Coerce a loosely-typed input (wire mapping, PriceCalculationInput or None)
    into a fully populated PriceCalculationInput. Never raises.
    """
    if isinstance(raw, PriceCalculationInput):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raw = {}

    currency = raw.get("currency")
    rate = coerce_number(raw.get("membershipDiscountRate"), 0.0)

    return PriceCalculationInput(
        currency=currency if isinstance(currency, str) and currency else DEFAULT_CURRENCY,
        base_price=_clamp(coerce_number(raw.get("basePrice"), 0.0), 0.0),
        quantity=_clamp(coerce_number(raw.get("quantity"), 1.0), 1.0),
        extra_placements=_clamp(coerce_number(raw.get("extraPlacements"), 0.0), 0.0),
        has_inside_label=_coerce_bool(raw.get("hasInsideLabel")),
        has_outside_label=_coerce_bool(raw.get("hasOutsideLabel")),
        is_premium_image=_coerce_bool(raw.get("isPremiumImage")),
        is_embroidery=_coerce_bool(raw.get("isEmbroidery")),
        embroidery_digitization_fee_applicable=_coerce_bool(
            raw.get("embroideryDigitizationFeeApplicable")
        ),
        membership_discount_rate=min(max(rate, 0.0), 1.0),
        shipping=_coerce_charge(raw.get("shipping")),
        tax=_coerce_charge(raw.get("tax")),
    )


def _format_count(count: float) -> str:
    return str(int(count)) if float(count).is_integer() else str(count)


def calculate_price(raw_input: Any, fees: FeeSchedule | None = None) -> PriceBreakdown:
    """
    Calculate a price breakdown.

    Order of operations (each money value rounded to cents):
    base -> customization fees -> digitization -> discount -> subtotal
    -> shipping/tax -> total.
    """
    fees = fees or DEFAULT_FEES
    data = normalize_input(raw_input)
    qty = data.quantity

    base = round2(data.base_price * qty)

    per_item = (
        (fees.extra_placement * data.extra_placements if data.extra_placements > 0 else 0)
        + (fees.inside_label if data.has_inside_label else 0)
        + (fees.outside_label if data.has_outside_label else 0)
        + (fees.premium_image if data.is_premium_image else 0)
    )
    customization_fees = round2(per_item * qty)

    digitization = (
        fees.embroidery_digitization
        if data.is_embroidery and data.embroidery_digitization_fee_applicable
        else 0
    )

    subtotal_before_discount = round2(base + customization_fees + digitization)
    discount = round2(subtotal_before_discount * data.membership_discount_rate)
    subtotal = round2(subtotal_before_discount - discount)

    shipping = round2(data.shipping.amount)
    tax = round2(data.tax.amount)
    total = round2(subtotal + shipping + tax)

    lines = [PriceLine(BASE_LABEL, base)]
    if per_item > 0:
        if data.extra_placements > 0:
            lines.append(PriceLine(
                f"Extra placements ×{_format_count(data.extra_placements)} (per item)",
                round2(fees.extra_placement * data.extra_placements * qty),
            ))
        if data.has_inside_label:
            lines.append(PriceLine("Inside label (per item)", round2(fees.inside_label * qty)))
        if data.has_outside_label:
            lines.append(PriceLine("Outside label (per item)", round2(fees.outside_label * qty)))
        if data.is_premium_image:
            lines.append(PriceLine("Premium image (per item)", round2(fees.premium_image * qty)))
    if digitization > 0:
        lines.append(PriceLine("Embroidery digitization (one-time)", round2(digitization)))
    if discount > 0:
        lines.append(PriceLine(DISCOUNT_LABEL, -round2(discount)))
    if shipping > 0:
        label = "Shipping (estimated)" if data.shipping.is_estimated else "Shipping"
        lines.append(PriceLine(label, shipping))
    if tax > 0:
        label = "Tax (estimated)" if data.tax.is_estimated else "Tax"
        lines.append(PriceLine(label, tax))

    return PriceBreakdown(
        currency=data.currency,
        lines=tuple(lines),
        subtotal=subtotal,
        discounts=discount,
        shipping=shipping,
        tax=tax,
        total=total,
        is_estimate=data.shipping.is_estimated or data.tax.is_estimated,
    )

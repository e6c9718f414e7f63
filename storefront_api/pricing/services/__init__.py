from .calculator import (
    DEFAULT_FEES,
    MAX_AMOUNT,
    Charge,
    FeeSchedule,
    PriceBreakdown,
    PriceCalculationInput,
    PriceLine,
    calculate_price,
    normalize_input,
    round2,
)

__all__ = [
    "DEFAULT_FEES",
    "MAX_AMOUNT",
    "Charge",
    "FeeSchedule",
    "PriceBreakdown",
    "PriceCalculationInput",
    "PriceLine",
    "calculate_price",
    "normalize_input",
    "round2",
]

# pricing/conf.py
"""Settings-driven pricing configuration."""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .services.calculator import DEFAULT_FEES, FeeSchedule


def get_fee_schedule() -> FeeSchedule:
    """
    Fee schedule for server-side quotes.
    settings.PRICING_FEES holds overrides keyed by FeeSchedule field name.
    """
    overrides = getattr(settings, "PRICING_FEES", None)
    if not overrides:
        return DEFAULT_FEES
    try:
        return FeeSchedule.from_mapping(overrides)
    except (TypeError, ValueError) as e:
        raise ImproperlyConfigured(f"Invalid PRICING_FEES setting: {e}") from e

# pricing/client.py
"""
Client-side price estimator.

Shows an instant local estimate, then reconciles with the authoritative
quote endpoint. When the server cannot be reached the local computation is
returned instead, so a price is always available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests
import structlog
from django.conf import settings

from .services.calculator import (
    FeeSchedule,
    PriceBreakdown,
    PriceCalculationInput,
    calculate_price,
)


logger = structlog.get_logger(__name__)

QUOTE_PATH = "/api/pricing/quote"


@dataclass(frozen=True)
class QuoteResult:
    breakdown: PriceBreakdown
    is_authoritative: bool


class PricingClient:
    """Talks to POST /api/pricing/quote with a local fallback."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10,
        session: requests.Session | None = None,
        fees: FeeSchedule | None = None,
    ):
        if base_url is None:
            base_url = getattr(settings, "PRICING_API_URL", "http://localhost:8000")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.fees = fees

    @property
    def quote_url(self) -> str:
        return f"{self.base_url}{QUOTE_PATH}"

    def estimate(self, inputs: PriceCalculationInput | dict[str, Any]) -> PriceBreakdown:
        """Local computation for zero-latency previews."""
        return calculate_price(inputs, fees=self.fees)

    def quote(self, inputs: PriceCalculationInput | dict[str, Any]) -> QuoteResult:
        """
        Fetch the server's breakdown. The server result wins whenever it
        arrives; any transport or payload failure falls back to ``estimate``.
        """
        payload = inputs.to_dict() if isinstance(inputs, PriceCalculationInput) else inputs
        log = logger.bind(url=self.quote_url)
        try:
            response = self.session.post(self.quote_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            breakdown = PriceBreakdown.from_dict(response.json())
        except requests.RequestException as e:
            log.warning("pricing_quote_unavailable", error=str(e))
        except (KeyError, TypeError, ValueError) as e:
            log.warning("pricing_quote_malformed", error=str(e))
        else:
            return QuoteResult(breakdown=breakdown, is_authoritative=True)

        return QuoteResult(breakdown=self.estimate(inputs), is_authoritative=False)

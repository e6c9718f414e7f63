# pricing/views.py

from collections.abc import Mapping

import structlog
from rest_framework import permissions
from rest_framework.exceptions import ParseError
from rest_framework.response import Response
from rest_framework.views import APIView

from .conf import get_fee_schedule
from .serializers import RetailPriceSerializer, ShippingTaxEstimateSerializer
from .services.calculator import calculate_price
from .services.retail import compute_price_cents, format_price_usd, get_category_floor_cents
from .services.shipping import estimate_shipping_and_tax


logger = structlog.get_logger(__name__)


class PublicPricingView(APIView):
    """Base for public pricing endpoints: no auth, inputs are not account data."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []


class PriceQuoteView(PublicPricingView):
    """
    Authoritative price breakdown.
    Endpoint: POST /api/pricing/quote

    Body: PriceCalculationInput (camelCase, any field may be omitted)
    {
        "currency": "USD",
        "basePrice": 40,
        "quantity": 2,
        "extraPlacements": 1,
        "hasInsideLabel": true,
        "membershipDiscountRate": 0.1,
        "shipping": {"amount": 5, "isEstimated": true},
        "tax": {"amount": 4, "isEstimated": false}
    }

    Only a body that is not a JSON object is rejected; field values are coerced.
    """

    error_message = "Invalid pricing input"

    def post(self, request):
        data = request.data
        if not isinstance(data, Mapping):
            raise ParseError("Request body must be a JSON object.")

        breakdown = calculate_price(data, fees=get_fee_schedule())
        logger.info(
            "quote_calculated",
            currency=breakdown.currency,
            total=breakdown.total,
            is_estimate=breakdown.is_estimate,
        )
        return Response(breakdown.to_dict())


class ShippingTaxEstimateView(PublicPricingView):
    """
    Placeholder shipping/tax estimate for a destination and cart.
    Endpoint: POST /api/pricing/estimate/
    """

    error_message = "Invalid estimate input"

    def post(self, request):
        serializer = ShippingTaxEstimateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        estimate = estimate_shipping_and_tax(
            data["items"],
            country_code=data.get("countryCode") or None,
            state_code=data.get("stateCode") or None,
            zip_code=data.get("zip") or None,
        )
        return Response(estimate.to_dict())


class RetailPriceView(PublicPricingView):
    """
    Retail price for a catalog product from its estimated cost.
    Endpoint: POST /api/pricing/retail-price/

    Input:  {"costCents": 1250, "category": "Unisex tee"}
    Output: {"priceCents": 4099, "price": "40.99", "categoryFloorCents": 4000}
    """

    error_message = "Invalid retail price input"

    def post(self, request):
        serializer = RetailPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        category = data.get("category") or None
        price_cents = compute_price_cents(
            data["costCents"],
            category,
            multiplier=data.get("multiplier"),
        )
        return Response({
            "priceCents": price_cents,
            "price": format_price_usd(price_cents),
            "categoryFloorCents": get_category_floor_cents(category),
        })

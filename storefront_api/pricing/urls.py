# pricing/urls.py
"""
URL patterns for the public pricing API (mounted at /api/pricing/).

- POST /api/pricing/quote          - Authoritative price breakdown
- POST /api/pricing/estimate/      - Shipping/tax estimate
- POST /api/pricing/retail-price/  - Retail price from product cost
"""

from django.urls import path, re_path

from .views import PriceQuoteView, RetailPriceView, ShippingTaxEstimateView

app_name = "pricing"

urlpatterns = [
    # POST bodies are lost on an APPEND_SLASH redirect, so accept both forms
    re_path(r"^quote/?$", PriceQuoteView.as_view(), name="quote"),
    path("estimate/", ShippingTaxEstimateView.as_view(), name="estimate"),
    path("retail-price/", RetailPriceView.as_view(), name="retail-price"),
]

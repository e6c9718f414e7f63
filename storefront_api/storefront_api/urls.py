# storefront_api/urls.py

"""
Root URL configuration for the storefront_api project.

API Structure:
- /api/pricing/quote          - Price breakdown (server-side source of truth)
- /api/pricing/estimate/      - Shipping/tax estimate for a destination + cart
- /api/pricing/retail-price/  - Retail price rules for catalog products
"""

from django.urls import include, path

urlpatterns = [
    path("api/pricing/", include("pricing.urls", namespace="pricing")),
]

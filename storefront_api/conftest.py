# conftest.py - Shared pytest fixtures for all apps

from unittest import mock
from urllib.parse import urlsplit

import pytest
import requests


# =============================================================================
# Pricing Fixtures
# =============================================================================

@pytest.fixture
def quote_payload():
    """A design with every fee line and estimated shipping/tax."""
    return {
        "currency": "USD",
        "basePrice": 24.99,
        "quantity": 3,
        "extraPlacements": 1,
        "hasInsideLabel": True,
        "hasOutsideLabel": False,
        "isPremiumImage": True,
        "isEmbroidery": True,
        "embroideryDigitizationFeeApplicable": True,
        "membershipDiscountRate": 0.1,
        "shipping": {"amount": 7.0, "isEstimated": True},
        "tax": {"amount": 6.25, "isEstimated": True},
    }


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Return a DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def http_session():
    """A requests.Session stand-in with no network access."""
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def served_session(api_client):
    """
    A requests.Session whose POSTs are answered by this project's URLconf,
    so PricingClient can talk to the real quote endpoint in-process.
    """

    def post(url, json=None, timeout=None, **kwargs):
        django_response = api_client.post(urlsplit(url).path, json, format="json")
        response = requests.Response()
        response.status_code = django_response.status_code
        response.url = url
        response.headers["Content-Type"] = django_response["Content-Type"]
        response._content = django_response.content
        return response

    session = mock.Mock(spec=requests.Session)
    session.post.side_effect = post
    return session

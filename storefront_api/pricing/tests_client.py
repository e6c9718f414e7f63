"""
Tests for the client-side estimator and its reconciliation with the quote endpoint.
"""

from unittest import mock

import pytest
import requests
from structlog.testing import capture_logs

from pricing.client import PricingClient
from pricing.services.calculator import FeeSchedule, PriceCalculationInput, calculate_price


def _response(status_code=200, payload=None):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    return response


def test_quote_url_from_base_url(http_session):
    client = PricingClient(base_url="https://shop.example.com/", session=http_session)
    assert client.quote_url == "https://shop.example.com/api/pricing/quote"


def test_base_url_defaults_to_settings(settings, http_session):
    settings.PRICING_API_URL = "https://pricing.internal"
    client = PricingClient(session=http_session)
    assert client.quote_url == "https://pricing.internal/api/pricing/quote"


def test_estimate_is_local(http_session, quote_payload):
    client = PricingClient(base_url="https://shop.example.com", session=http_session)
    assert client.estimate(quote_payload) == calculate_price(quote_payload)
    http_session.post.assert_not_called()


def test_server_result_wins(http_session, quote_payload):
    """A server breakdown replaces the local estimate, even when they differ."""
    server_breakdown = calculate_price({"basePrice": 99, "currency": "USD"})
    http_session.post.return_value = _response(payload=server_breakdown.to_dict())
    client = PricingClient(base_url="https://shop.example.com", timeout=3, session=http_session)

    result = client.quote(quote_payload)

    assert result.is_authoritative
    assert result.breakdown == server_breakdown
    http_session.post.assert_called_once_with(
        "https://shop.example.com/api/pricing/quote",
        json=quote_payload,
        timeout=3,
    )


def test_dataclass_input_posted_as_wire_format(http_session):
    inputs = PriceCalculationInput(base_price=40, quantity=2)
    http_session.post.return_value = _response(payload=calculate_price(inputs).to_dict())
    client = PricingClient(base_url="https://shop.example.com", session=http_session)

    client.quote(inputs)

    posted = http_session.post.call_args.kwargs["json"]
    assert posted["basePrice"] == 40
    assert posted["quantity"] == 2


@pytest.mark.parametrize(
    "failure",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
    ],
)
def test_network_failure_falls_back_to_local(http_session, quote_payload, failure):
    http_session.post.side_effect = failure
    client = PricingClient(base_url="https://shop.example.com", session=http_session)

    with capture_logs() as logs:
        result = client.quote(quote_payload)

    assert not result.is_authoritative
    assert result.breakdown == calculate_price(quote_payload)
    assert logs[0]["event"] == "pricing_quote_unavailable"
    assert logs[0]["log_level"] == "warning"


def test_server_error_falls_back_to_local(http_session, quote_payload):
    http_session.post.return_value = _response(status_code=500)
    client = PricingClient(base_url="https://shop.example.com", session=http_session)

    result = client.quote(quote_payload)

    assert not result.is_authoritative
    assert result.breakdown == calculate_price(quote_payload)


def test_malformed_payload_falls_back_to_local(http_session, quote_payload):
    http_session.post.return_value = _response(payload={"unexpected": True})
    client = PricingClient(base_url="https://shop.example.com", session=http_session)

    with capture_logs() as logs:
        result = client.quote(quote_payload)

    assert not result.is_authoritative
    assert logs[0]["event"] == "pricing_quote_malformed"


def test_fallback_uses_client_fees(http_session):
    http_session.post.side_effect = requests.ConnectionError("down")
    client = PricingClient(
        base_url="https://shop.example.com",
        session=http_session,
        fees=FeeSchedule(extra_placement=10),
    )

    result = client.quote({"basePrice": 10, "extraPlacements": 1})

    assert result.breakdown.total == 20.00


def test_client_and_server_agree(served_session, quote_payload):
    """Local preview and the authoritative endpoint produce identical breakdowns."""
    client = PricingClient(base_url="http://testserver", session=served_session)

    result = client.quote(quote_payload)

    assert result.is_authoritative
    assert result.breakdown == client.estimate(quote_payload)
    # 74.97 + (3 + 2 + 1) x 3 + 6 = 98.97; 10% off = 9.90
    assert result.breakdown.discounts == 9.90
    assert result.breakdown.subtotal == 89.07
    assert result.breakdown.total == 102.32


def test_served_bad_request_falls_back(served_session):
    client = PricingClient(base_url="http://testserver", session=served_session)

    result = client.quote([{"basePrice": 40}])

    assert not result.is_authoritative
    assert result.breakdown.total == 0

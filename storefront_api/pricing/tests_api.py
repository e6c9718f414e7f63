"""
API tests for the public pricing endpoints.
"""

from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APISimpleTestCase

from pricing.services.calculator import BASE_LABEL, MAX_AMOUNT, calculate_price


QUOTE_URL = "/api/pricing/quote"
ESTIMATE_URL = "/api/pricing/estimate/"
RETAIL_URL = "/api/pricing/retail-price/"


class PriceQuoteAPITests(APISimpleTestCase):
    """Tests for POST /api/pricing/quote."""

    def setUp(self):
        self.client = APIClient()

    def test_quote_public_access(self):
        """Quote is available without authentication."""
        response = self.client.post(QUOTE_URL, {"basePrice": 40}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["total"], 40.00)

    def test_quote_breakdown(self):
        data = {
            "basePrice": 40,
            "quantity": 2,
            "extraPlacements": 1,
            "hasInsideLabel": True,
        }
        response = self.client.post(QUOTE_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        body = response.json()
        self.assertEqual(body["currency"], "USD")
        self.assertEqual(body["subtotal"], 90.00)
        self.assertEqual(body["discounts"], 0)
        self.assertEqual(body["total"], 90.00)
        self.assertFalse(body["isEstimate"])
        self.assertEqual(
            body["lines"],
            [
                {"label": BASE_LABEL, "amount": 80.00},
                {"label": "Extra placements ×1 (per item)", "amount": 6.00},
                {"label": "Inside label (per item)", "amount": 4.00},
            ],
        )

    def test_trailing_slash_accepted(self):
        response = self.client.post(QUOTE_URL + "/", {"basePrice": 12.5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["total"], 12.50)

    def test_empty_object_uses_defaults(self):
        response = self.client.post(QUOTE_URL, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["total"], 0)
        self.assertEqual(body["lines"], [{"label": BASE_LABEL, "amount": 0}])

    def test_malformed_fields_are_coerced(self):
        data = {
            "basePrice": "40",
            "quantity": -3,
            "hasInsideLabel": "yes",
            "membershipDiscountRate": 7,
            "shipping": "free",
        }
        response = self.client.post(QUOTE_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["discounts"], 40.00)
        self.assertEqual(body["total"], 0)

    def test_array_body_rejected(self):
        response = self.client.post(QUOTE_URL, [{"basePrice": 40}], format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["message"], "Invalid pricing input")
        self.assertIn("JSON object", body["error"])

    def test_scalar_body_rejected(self):
        response = self.client.post(QUOTE_URL, "40", content_type="application/json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "Invalid pricing input")

    def test_malformed_json_rejected(self):
        response = self.client.post(QUOTE_URL, "{basePrice: 40", content_type="application/json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["message"], "Invalid pricing input")
        self.assertIn("JSON parse error", body["error"])

    def test_get_not_allowed(self):
        response = self.client.get(QUOTE_URL)
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertIn("error", response.json())

    @override_settings(PRICING_FEES={"extra_placement": 5, "premium_image": 0.5})
    def test_fee_overrides_from_settings(self):
        data = {"basePrice": 10, "extraPlacements": 1, "isPremiumImage": True}
        response = self.client.post(QUOTE_URL, data, format="json")
        lines = response.json()["lines"]
        self.assertEqual(lines[1]["amount"], 5.00)
        self.assertEqual(lines[2]["amount"], 0.50)
        self.assertEqual(response.json()["total"], 15.50)

    def test_matches_in_process_calculation(self):
        """The endpoint and the in-process estimator agree to the cent."""
        payloads = [
            {"basePrice": 19.99, "quantity": 3, "membershipDiscountRate": 0.15},
            {
                "currency": "GBP",
                "basePrice": 27.49,
                "quantity": 11,
                "extraPlacements": 2,
                "hasOutsideLabel": True,
                "isPremiumImage": True,
                "isEmbroidery": True,
                "embroideryDigitizationFeeApplicable": True,
                "membershipDiscountRate": 0.333,
                "shipping": {"amount": 6.125, "isEstimated": True},
                "tax": {"amount": 2.675, "isEstimated": False},
            },
            {"basePrice": 0.1, "quantity": 7, "tax": {"amount": 0.005, "isEstimated": True}},
        ]
        for payload in payloads:
            response = self.client.post(QUOTE_URL, payload, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.json(), calculate_price(payload).to_dict())

    def test_oversized_numbers_priced(self):
        response = self.client.post(QUOTE_URL, {"basePrice": 1e308, "quantity": 10}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["total"], MAX_AMOUNT * 10)

    def test_integer_too_large_for_float_uses_default(self):
        data = {"basePrice": 40, "quantity": 10 ** 400}
        response = self.client.post(QUOTE_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["total"], 40.00)


class ShippingTaxEstimateAPITests(APISimpleTestCase):
    """Tests for POST /api/pricing/estimate/."""

    def setUp(self):
        self.client = APIClient()

    def test_estimate(self):
        data = {
            "countryCode": "us",
            "stateCode": "ca",
            "zip": "94107",
            "items": [{"quantity": 2, "price": 40}],
        }
        response = self.client.post(ESTIMATE_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # 4.50 + 1.25; 80 x 9%
        self.assertEqual(response.json(), {"shippingAmount": 5.75, "taxAmount": 7.20})

    def test_estimate_without_destination(self):
        response = self.client.post(ESTIMATE_URL, {"items": [{"quantity": 1, "price": 10}]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"shippingAmount": 4.50, "taxAmount": 1.00})

    def test_items_required(self):
        response = self.client.post(ESTIMATE_URL, {"countryCode": "US"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["message"], "Invalid estimate input")
        self.assertIn("items", body["error"])

    def test_negative_price_rejected(self):
        data = {"items": [{"quantity": 1, "price": -5}]}
        response = self.client.post(ESTIMATE_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_oversized_item_rejected(self):
        for item in ({"quantity": 10 ** 400, "price": 10}, {"quantity": 1, "price": 10 ** 400}):
            response = self.client.post(ESTIMATE_URL, {"items": [item]}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.json()["message"], "Invalid estimate input")


class RetailPriceAPITests(APISimpleTestCase):
    """Tests for POST /api/pricing/retail-price/."""

    def setUp(self):
        self.client = APIClient()

    def test_category_floor_applied(self):
        data = {"costCents": 1250, "category": "Unisex tee"}
        response = self.client.post(RETAIL_URL, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.json(),
            {"priceCents": 4099, "price": "40.99", "categoryFloorCents": 4000},
        )

    def test_explicit_multiplier(self):
        data = {"costCents": 1000, "multiplier": 3}
        response = self.client.post(RETAIL_URL, data, format="json")
        self.assertEqual(response.json()["priceCents"], 3099)
        self.assertEqual(response.json()["categoryFloorCents"], 0)

    def test_negative_cost_rejected(self):
        response = self.client.post(RETAIL_URL, {"costCents": -1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "Invalid retail price input")

    def test_oversized_inputs_rejected(self):
        for data in (
            {"costCents": 10 ** 400},
            {"costCents": 1000, "multiplier": 10 ** 400},
            {"costCents": 1000, "multiplier": 1e300},
        ):
            response = self.client.post(RETAIL_URL, data, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.json()["message"], "Invalid retail price input")

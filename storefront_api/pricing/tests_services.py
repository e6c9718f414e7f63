"""
Tests for retail price rules, shipping/tax estimation and input building.
"""

from django.test import SimpleTestCase, override_settings

from pricing.services.calculator import Charge, calculate_price
from pricing.services.inputs import build_design_input, count_placements, with_estimates
from pricing.services.retail import (
    compute_price_cents,
    format_price_usd,
    get_category_floor_cents,
    round_to_99,
    usd_to_cents,
)
from pricing.services.shipping import estimate_shipping_and_tax, infer_tax_rate


class RetailPriceRuleTests(SimpleTestCase):
    """Tests for cost x multiplier pricing with category floors."""

    def test_round_to_99(self):
        self.assertEqual(round_to_99(4050), 4099)
        self.assertEqual(round_to_99(4000), 4099)
        self.assertEqual(round_to_99(99), 99)

    def test_round_to_99_non_finite(self):
        self.assertEqual(round_to_99(float("nan")), 0)
        self.assertEqual(round_to_99(float("inf")), 0)
        self.assertEqual(round_to_99("4050"), 0)

    def test_usd_to_cents(self):
        self.assertEqual(usd_to_cents(19.99), 1999)
        self.assertEqual(usd_to_cents("40"), 4000)
        self.assertEqual(usd_to_cents(None), 0)

    def test_category_floor(self):
        self.assertEqual(get_category_floor_cents("Unisex tee"), 4000)
        self.assertEqual(get_category_floor_cents("Sticker (per piece)"), 600)
        self.assertEqual(get_category_floor_cents("Unknown thing"), 0)
        self.assertEqual(get_category_floor_cents(None), 0)

    def test_floor_wins_over_low_cost(self):
        # 1250 x 2.8 = 3500 < 4000 floor
        self.assertEqual(compute_price_cents(1250, "Unisex tee", multiplier=2.8), 4099)

    def test_multiplied_cost_wins_over_floor(self):
        # 2000 x 2.8 = 5600 > 4000 floor
        self.assertEqual(compute_price_cents(2000, "Unisex tee", multiplier=2.8), 5699)

    def test_unparsable_cost_uses_floor(self):
        self.assertEqual(compute_price_cents("abc", "Beanie", multiplier=2.8), 3299)

    def test_oversized_cost_uses_floor(self):
        # neither converts to a finite cent amount
        self.assertEqual(compute_price_cents(10 ** 400, "Beanie", multiplier=2.8), 3299)
        self.assertEqual(compute_price_cents(1e308, "Beanie", multiplier=10), 3299)

    @override_settings(PRICE_MULTIPLIER=2)
    def test_default_multiplier_from_settings(self):
        self.assertEqual(compute_price_cents(1000), 2099)

    def test_format_price_usd(self):
        self.assertEqual(format_price_usd(4099), "40.99")
        self.assertEqual(format_price_usd(0), "0.00")


class ShippingTaxEstimateTests(SimpleTestCase):
    """Tests for the placeholder shipping/tax estimator."""

    def test_tax_rates(self):
        self.assertEqual(infer_tax_rate("US", "CA"), 0.09)
        self.assertEqual(infer_tax_rate("US", "NY"), 0.09)
        self.assertEqual(infer_tax_rate("US", "TX"), 0.07)
        self.assertEqual(infer_tax_rate("DE"), 0.20)
        self.assertEqual(infer_tax_rate("JP"), 0.10)
        self.assertEqual(infer_tax_rate(), 0.10)

    def test_single_item(self):
        estimate = estimate_shipping_and_tax(
            [{"quantity": 1, "price": 40}],
            country_code="US",
            state_code="TX",
        )
        self.assertEqual(estimate.shipping_amount, 4.50)
        self.assertEqual(estimate.tax_amount, 2.80)

    def test_additional_items(self):
        estimate = estimate_shipping_and_tax(
            [{"quantity": 2, "price": 40}, {"quantity": 1, "price": 20}],
            country_code="GB",
        )
        # 4.50 + 2 x 1.25; (80 + 20) x 20%
        self.assertEqual(estimate.shipping_amount, 7.00)
        self.assertEqual(estimate.tax_amount, 20.00)

    def test_empty_cart(self):
        estimate = estimate_shipping_and_tax([])
        self.assertEqual(estimate.shipping_amount, 4.50)
        self.assertEqual(estimate.tax_amount, 0.0)

    def test_negative_quantities_ignored(self):
        estimate = estimate_shipping_and_tax(
            [{"quantity": -3, "price": 10}, {"quantity": 1, "price": 10}],
            country_code="US",
            state_code="WA",
        )
        self.assertEqual(estimate.shipping_amount, 4.50)
        self.assertEqual(estimate.tax_amount, 0.90)

    def test_to_dict(self):
        estimate = estimate_shipping_and_tax([{"quantity": 1, "price": 10}], country_code="FR")
        self.assertEqual(estimate.to_dict(), {"shippingAmount": 4.50, "taxAmount": 2.00})


class DesignInputTests(SimpleTestCase):
    """Tests for building calculator inputs from variant + placement state."""

    def setUp(self):
        self.variant = {"retail_price": "24.50", "currency": "EUR"}

    def test_placements_with_content(self):
        placement_data = {
            "front": {"images": ["art.png"], "texts": []},
            "back": {"texts": ["Hello"]},
            "sleeve_left": {"images": [], "texts": []},
        }
        self.assertEqual(count_placements(placement_data, 24.5), 2)

        inputs = build_design_input(self.variant, placement_data)
        self.assertEqual(inputs.base_price, 24.5)
        self.assertEqual(inputs.currency, "EUR")
        self.assertEqual(inputs.quantity, 1)
        self.assertEqual(inputs.extra_placements, 1)

    def test_empty_design_counts_included_placement(self):
        self.assertEqual(count_placements({}, 24.5), 1)
        self.assertEqual(build_design_input(self.variant, {}).extra_placements, 0)

    def test_unpriced_variant(self):
        self.assertEqual(count_placements(None, 0), 0)
        inputs = build_design_input({"retail_price": "n/a"})
        self.assertEqual(inputs.base_price, 0)
        self.assertEqual(inputs.currency, "USD")
        self.assertEqual(inputs.extra_placements, 0)

    def test_malformed_placements_ignored(self):
        placement_data = {"front": "not-a-dict", "back": None, "pocket": {"images": ["a"]}}
        self.assertEqual(count_placements(placement_data, 10), 1)

    def test_flags_passed_through(self):
        inputs = build_design_input(
            self.variant,
            quantity=4,
            is_embroidery=True,
            embroidery_digitization_fee_applicable=True,
        )
        self.assertEqual(inputs.quantity, 4)
        self.assertTrue(inputs.is_embroidery)
        self.assertFalse(inputs.has_inside_label)

    def test_with_estimates(self):
        inputs = with_estimates(build_design_input(self.variant), 5.0, -2.0)
        self.assertEqual(inputs.shipping, Charge(amount=5.0, is_estimated=True))
        self.assertEqual(inputs.tax, Charge(amount=0.0, is_estimated=True))

    def test_design_to_breakdown(self):
        """Three filled placements on a 24.50 tee with an estimated shipping."""
        placement_data = {
            "front": {"images": ["a"]},
            "back": {"images": ["b"]},
            "sleeve_left": {"texts": ["c"]},
        }
        inputs = with_estimates(build_design_input(self.variant, placement_data), 4.5, 0)
        breakdown = calculate_price(inputs)
        # 24.50 + 2 extra placements x 3.00 + 4.50 shipping
        self.assertEqual(breakdown.subtotal, 30.50)
        self.assertEqual(breakdown.total, 35.00)
        self.assertTrue(breakdown.is_estimate)
        self.assertEqual(breakdown.currency, "EUR")

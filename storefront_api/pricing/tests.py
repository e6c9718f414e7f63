# pricing/tests.py

from django.test import SimpleTestCase

from pricing.services.calculator import (
    BASE_LABEL,
    DEFAULT_FEES,
    DISCOUNT_LABEL,
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


def _line_amount(breakdown, prefix):
    for line in breakdown.lines:
        if line.label.startswith(prefix):
            return line.amount
    return None


def _customization_total(breakdown):
    per_item = ("Extra placements", "Inside label", "Outside label", "Premium image")
    return round2(sum(line.amount for line in breakdown.lines if line.label.startswith(per_item)))


# =============================================================================
# Scenario Tests
# =============================================================================


class CalculatePriceScenarioTests(SimpleTestCase):
    """Worked examples for the storefront price breakdown."""

    def test_plain_product(self):
        """One blank product with its included placement and nothing else."""
        breakdown = calculate_price({
            "basePrice": 40,
            "quantity": 1,
            "extraPlacements": 0,
            "shipping": {"amount": 0, "isEstimated": False},
            "tax": {"amount": 0, "isEstimated": False},
        })
        self.assertEqual(breakdown.total, 40.00)
        self.assertEqual(breakdown.lines, (PriceLine(BASE_LABEL, 40.00),))
        self.assertFalse(breakdown.is_estimate)

    def test_extra_placement_and_inside_label(self):
        """Per-item fees are multiplied by quantity."""
        breakdown = calculate_price({
            "basePrice": 40,
            "quantity": 2,
            "extraPlacements": 1,
            "hasInsideLabel": True,
        })
        # base 40 x 2 = 80; fees (3 + 2) x 2 = 10
        self.assertEqual(_line_amount(breakdown, "Base"), 80.00)
        self.assertEqual(_customization_total(breakdown), 10.00)
        self.assertEqual(breakdown.subtotal, 90.00)
        self.assertEqual(breakdown.total, 90.00)
        self.assertEqual(
            [line.label for line in breakdown.lines],
            [BASE_LABEL, "Extra placements ×1 (per item)", "Inside label (per item)"],
        )
        self.assertEqual(_line_amount(breakdown, "Extra placements"), 6.00)
        self.assertEqual(_line_amount(breakdown, "Inside label"), 4.00)

    def test_embroidery_digitization(self):
        breakdown = calculate_price({
            "basePrice": 20,
            "quantity": 1,
            "isEmbroidery": True,
            "embroideryDigitizationFeeApplicable": True,
        })
        self.assertEqual(breakdown.subtotal, 26.00)
        self.assertEqual(_line_amount(breakdown, "Embroidery digitization"), 6.00)

    def test_membership_discount(self):
        breakdown = calculate_price({
            "basePrice": 100,
            "quantity": 1,
            "membershipDiscountRate": 0.1,
        })
        self.assertEqual(breakdown.discounts, 10.00)
        self.assertEqual(breakdown.subtotal, 90.00)
        self.assertEqual(breakdown.lines[-1], PriceLine(DISCOUNT_LABEL, -10.00))

    def test_estimated_shipping_marks_breakdown_estimate(self):
        """Shipping is estimated even though tax is final."""
        breakdown = calculate_price({
            "basePrice": 50,
            "quantity": 1,
            "shipping": {"amount": 5, "isEstimated": True},
            "tax": {"amount": 4, "isEstimated": False},
        })
        self.assertEqual(breakdown.total, 59.00)
        self.assertTrue(breakdown.is_estimate)
        self.assertEqual(
            breakdown.lines,
            (
                PriceLine(BASE_LABEL, 50.00),
                PriceLine("Shipping (estimated)", 5.00),
                PriceLine("Tax", 4.00),
            ),
        )

    def test_estimated_tax_label(self):
        breakdown = calculate_price({
            "basePrice": 10,
            "shipping": {"amount": 2, "isEstimated": False},
            "tax": {"amount": 1, "isEstimated": True},
        })
        self.assertEqual(_line_amount(breakdown, "Shipping"), 2.00)
        self.assertEqual(breakdown.lines[1].label, "Shipping")
        self.assertEqual(breakdown.lines[2].label, "Tax (estimated)")
        self.assertTrue(breakdown.is_estimate)

    def test_full_line_order(self):
        """Every line present, in display order."""
        breakdown = calculate_price({
            "basePrice": 30,
            "quantity": 3,
            "extraPlacements": 2,
            "hasInsideLabel": True,
            "hasOutsideLabel": True,
            "isPremiumImage": True,
            "isEmbroidery": True,
            "embroideryDigitizationFeeApplicable": True,
            "membershipDiscountRate": 0.2,
            "shipping": {"amount": 7.5, "isEstimated": True},
            "tax": {"amount": 3.25, "isEstimated": True},
        })
        self.assertEqual(
            [line.label for line in breakdown.lines],
            [
                BASE_LABEL,
                "Extra placements ×2 (per item)",
                "Inside label (per item)",
                "Outside label (per item)",
                "Premium image (per item)",
                "Embroidery digitization (one-time)",
                DISCOUNT_LABEL,
                "Shipping (estimated)",
                "Tax (estimated)",
            ],
        )
        # base 90; fees (6 + 2 + 2 + 1) x 3 = 33; digitization 6 -> 129
        # discount 25.8 -> subtotal 103.2; + 7.5 + 3.25
        self.assertEqual(breakdown.discounts, 25.80)
        self.assertEqual(breakdown.subtotal, 103.20)
        self.assertEqual(breakdown.total, 113.95)

    def test_empty_input(self):
        """An empty configuration still prices at zero."""
        breakdown = calculate_price({})
        self.assertEqual(breakdown.currency, "USD")
        self.assertEqual(breakdown.lines, (PriceLine(BASE_LABEL, 0.0),))
        self.assertEqual(breakdown.subtotal, 0.0)
        self.assertEqual(breakdown.total, 0.0)
        self.assertFalse(breakdown.is_estimate)


# =============================================================================
# Invariant Tests
# =============================================================================


class CalculatePriceInvariantTests(SimpleTestCase):
    """Properties that hold for every input."""

    samples = [
        {},
        {"basePrice": 19.99, "quantity": 3},
        {"basePrice": 12.34, "quantity": 7, "extraPlacements": 3, "isPremiumImage": True},
        {"basePrice": 0.1, "quantity": 3, "membershipDiscountRate": 0.333},
        {
            "basePrice": 27.49,
            "quantity": 11,
            "hasOutsideLabel": True,
            "isEmbroidery": True,
            "embroideryDigitizationFeeApplicable": True,
            "membershipDiscountRate": 0.15,
            "shipping": {"amount": 6.125, "isEstimated": True},
            "tax": {"amount": 2.675, "isEstimated": False},
        },
    ]

    def test_deterministic(self):
        for payload in self.samples:
            self.assertEqual(calculate_price(payload), calculate_price(payload))

    def test_total_is_sum_of_parts(self):
        for payload in self.samples:
            breakdown = calculate_price(payload)
            self.assertEqual(
                breakdown.total,
                round2(breakdown.subtotal + breakdown.shipping + breakdown.tax),
            )

    def test_amounts_non_negative(self):
        for payload in self.samples:
            breakdown = calculate_price(payload)
            for amount in (
                breakdown.total,
                breakdown.subtotal,
                breakdown.shipping,
                breakdown.tax,
                breakdown.discounts,
            ):
                self.assertGreaterEqual(amount, 0)

    def test_amounts_rounded_to_cents(self):
        for payload in self.samples:
            breakdown = calculate_price(payload)
            amounts = [line.amount for line in breakdown.lines] + [
                breakdown.subtotal,
                breakdown.discounts,
                breakdown.total,
            ]
            for amount in amounts:
                self.assertEqual(amount, round2(amount))

    def test_discount_bounded_by_subtotal(self):
        for rate in (0, 0.25, 0.5, 1):
            breakdown = calculate_price({
                "basePrice": 33.33,
                "quantity": 3,
                "extraPlacements": 1,
                "membershipDiscountRate": rate,
            })
            before_discount = round2(breakdown.subtotal + breakdown.discounts)
            self.assertLessEqual(breakdown.discounts, before_discount)

    def test_quantity_never_decreases_fees(self):
        payload = {"basePrice": 14.99, "extraPlacements": 2, "hasInsideLabel": True}
        previous_base = previous_fees = 0
        for quantity in range(1, 8):
            breakdown = calculate_price({**payload, "quantity": quantity})
            base = _line_amount(breakdown, "Base")
            fees = _customization_total(breakdown)
            self.assertGreaterEqual(base, previous_base)
            self.assertGreaterEqual(fees, previous_fees)
            previous_base, previous_fees = base, fees

    def test_digitization_independent_of_quantity(self):
        payload = {
            "basePrice": 20,
            "isEmbroidery": True,
            "embroideryDigitizationFeeApplicable": True,
        }
        one = calculate_price({**payload, "quantity": 1})
        ten = calculate_price({**payload, "quantity": 10})
        self.assertEqual(_line_amount(one, "Embroidery digitization"), 6.00)
        self.assertEqual(_line_amount(ten, "Embroidery digitization"), 6.00)

    def test_digitization_requires_embroidery(self):
        breakdown = calculate_price({
            "basePrice": 20,
            "isEmbroidery": False,
            "embroideryDigitizationFeeApplicable": True,
        })
        self.assertIsNone(_line_amount(breakdown, "Embroidery digitization"))
        self.assertEqual(breakdown.subtotal, 20.00)

    def test_no_zero_amount_conditional_lines(self):
        breakdown = calculate_price({"basePrice": 15, "quantity": 2})
        self.assertEqual(len(breakdown.lines), 1)


# =============================================================================
# Rounding Tests
# =============================================================================


class RoundingTests(SimpleTestCase):
    """Cent rounding must agree with the browser's Math.round(x * 100) / 100."""

    def test_half_rounds_away_from_zero(self):
        self.assertEqual(round2(0.125), 0.13)
        self.assertEqual(round2(-0.125), -0.13)

    def test_binary_float_representation_respected(self):
        # 1.005 * 100 is 100.49999999999999 in binary floating point
        self.assertEqual(round2(1.005), 1.0)

    def test_values_beyond_cent_precision_unchanged(self):
        self.assertEqual(round2(1e307), 1e307)
        self.assertEqual(round2(float("inf")), float("inf"))

    def test_each_step_rounded(self):
        breakdown = calculate_price({"basePrice": 19.99, "quantity": 3})
        self.assertEqual(breakdown.subtotal, 59.97)
        self.assertEqual(breakdown.total, 59.97)

    def test_discount_rounded_before_subtraction(self):
        breakdown = calculate_price({"basePrice": 9.99, "membershipDiscountRate": 0.5})
        self.assertEqual(breakdown.discounts, 5.00)
        self.assertEqual(breakdown.subtotal, 4.99)


# =============================================================================
# Input Coercion Tests
# =============================================================================


class NormalizeInputTests(SimpleTestCase):
    """Malformed fields fall back to safe defaults instead of raising."""

    def test_quantity_floor(self):
        for quantity in (0, -5, float("nan"), float("inf"), "abc", None, [2]):
            self.assertEqual(normalize_input({"quantity": quantity}).quantity, 1)

    def test_numeric_strings_accepted(self):
        data = normalize_input({"quantity": "3", "basePrice": " 12.50 "})
        self.assertEqual(data.quantity, 3)
        self.assertEqual(data.base_price, 12.5)

    def test_flags_must_be_booleans(self):
        data = normalize_input({
            "hasInsideLabel": "true",
            "hasOutsideLabel": 1,
            "isPremiumImage": True,
        })
        self.assertFalse(data.has_inside_label)
        self.assertFalse(data.has_outside_label)
        self.assertTrue(data.is_premium_image)

    def test_discount_rate_clamped(self):
        self.assertEqual(normalize_input({"membershipDiscountRate": 5}).membership_discount_rate, 1)
        self.assertEqual(normalize_input({"membershipDiscountRate": -1}).membership_discount_rate, 0)

    def test_full_discount_prices_at_zero(self):
        breakdown = calculate_price({"basePrice": 40, "membershipDiscountRate": 3})
        self.assertEqual(breakdown.discounts, 40.00)
        self.assertEqual(breakdown.subtotal, 0.0)

    def test_negative_shipping_and_tax_clamp_to_zero(self):
        breakdown = calculate_price({
            "basePrice": 10,
            "shipping": {"amount": -5, "isEstimated": True},
            "tax": {"amount": -1},
        })
        self.assertEqual(breakdown.shipping, 0.0)
        self.assertEqual(breakdown.tax, 0.0)
        self.assertEqual(breakdown.total, 10.00)
        self.assertEqual(len(breakdown.lines), 1)
        # the estimate flag still follows the caller
        self.assertTrue(breakdown.is_estimate)

    def test_charge_not_an_object(self):
        data = normalize_input({"shipping": 5, "tax": "4"})
        self.assertEqual(data.shipping, Charge())
        self.assertEqual(data.tax, Charge())

    def test_negative_counts_clamp(self):
        data = normalize_input({"basePrice": -10, "extraPlacements": -2})
        self.assertEqual(data.base_price, 0)
        self.assertEqual(data.extra_placements, 0)

    def test_currency_default_and_echo(self):
        self.assertEqual(calculate_price({"currency": ""}).currency, "USD")
        self.assertEqual(calculate_price({"currency": "EUR"}).currency, "EUR")

    def test_non_string_currency_uses_default(self):
        for currency in (5, {"x": 1}, ["EUR"], True):
            self.assertEqual(calculate_price({"currency": currency}).currency, "USD")

    def test_oversized_numbers_capped(self):
        data = normalize_input({
            "basePrice": 1e308,
            "extraPlacements": "1e300",
            "shipping": {"amount": 5e20},
        })
        self.assertEqual(data.base_price, MAX_AMOUNT)
        self.assertEqual(data.extra_placements, MAX_AMOUNT)
        self.assertEqual(data.shipping.amount, MAX_AMOUNT)

    def test_integers_too_large_for_float_fall_back(self):
        data = normalize_input({"quantity": 10 ** 400, "basePrice": 10 ** 400})
        self.assertEqual(data.quantity, 1)
        self.assertEqual(data.base_price, 0)

    def test_huge_product_stays_finite(self):
        breakdown = calculate_price({"basePrice": 1e308, "quantity": 10})
        self.assertEqual(breakdown.lines[0].amount, MAX_AMOUNT * 10)
        self.assertEqual(breakdown.total, MAX_AMOUNT * 10)

    def test_non_mapping_input(self):
        for raw in (None, [], "basePrice=40", 42):
            breakdown = calculate_price(raw)
            self.assertEqual(breakdown.total, 0.0)
            self.assertEqual(breakdown.lines, (PriceLine(BASE_LABEL, 0.0),))

    def test_dataclass_input(self):
        inputs = PriceCalculationInput(
            base_price=40,
            quantity=2,
            extra_placements=1,
            has_inside_label=True,
        )
        self.assertEqual(calculate_price(inputs).total, 90.00)

    def test_fractional_placement_count_label(self):
        breakdown = calculate_price({"basePrice": 10, "extraPlacements": 1.5})
        self.assertEqual(breakdown.lines[1].label, "Extra placements ×1.5 (per item)")
        self.assertEqual(breakdown.lines[1].amount, 4.50)


# =============================================================================
# Fee Schedule Tests
# =============================================================================


class FeeScheduleTests(SimpleTestCase):

    def test_defaults(self):
        self.assertEqual(DEFAULT_FEES.extra_placement, 3.00)
        self.assertEqual(DEFAULT_FEES.inside_label, 2.00)
        self.assertEqual(DEFAULT_FEES.outside_label, 2.00)
        self.assertEqual(DEFAULT_FEES.premium_image, 1.00)
        self.assertEqual(DEFAULT_FEES.embroidery_digitization, 6.00)

    def test_injected_schedule(self):
        fees = FeeSchedule(extra_placement=10, embroidery_digitization=50)
        breakdown = calculate_price(
            {
                "basePrice": 100,
                "extraPlacements": 2,
                "isEmbroidery": True,
                "embroideryDigitizationFeeApplicable": True,
            },
            fees=fees,
        )
        self.assertEqual(_line_amount(breakdown, "Extra placements"), 20.00)
        self.assertEqual(_line_amount(breakdown, "Embroidery digitization"), 50.00)
        self.assertEqual(breakdown.total, 170.00)

    def test_from_mapping_overrides(self):
        fees = FeeSchedule.from_mapping({"inside_label": "2.5"})
        self.assertEqual(fees.inside_label, 2.5)
        self.assertEqual(fees.outside_label, 2.00)

    def test_from_mapping_empty(self):
        self.assertEqual(FeeSchedule.from_mapping(None), DEFAULT_FEES)

    def test_from_mapping_rejects_unknown_fee(self):
        with self.assertRaises(ValueError):
            FeeSchedule.from_mapping({"gift_wrap": 1})

    def test_from_mapping_rejects_negative_fee(self):
        with self.assertRaises(ValueError):
            FeeSchedule.from_mapping({"premium_image": -1})

    def test_from_mapping_rejects_unusable_fee(self):
        for amount in ("abc", None, 10 ** 400, MAX_AMOUNT * 2):
            with self.assertRaises(ValueError):
                FeeSchedule.from_mapping({"premium_image": amount})


# =============================================================================
# Wire Format Tests
# =============================================================================


class BreakdownWireFormatTests(SimpleTestCase):

    def test_to_dict_shape(self):
        data = calculate_price({"basePrice": 100, "membershipDiscountRate": 0.1}).to_dict()
        self.assertEqual(
            data,
            {
                "currency": "USD",
                "lines": [
                    {"label": BASE_LABEL, "amount": 100.00},
                    {"label": DISCOUNT_LABEL, "amount": -10.00},
                ],
                "subtotal": 90.00,
                "discounts": 10.00,
                "shipping": 0.0,
                "tax": 0.0,
                "total": 90.00,
                "isEstimate": False,
            },
        )

    def test_note_only_when_set(self):
        self.assertEqual(PriceLine("Tax", 1.0).to_dict(), {"label": "Tax", "amount": 1.0})
        self.assertEqual(
            PriceLine("Tax", 1.0, note="VAT").to_dict(),
            {"label": "Tax", "amount": 1.0, "note": "VAT"},
        )

    def test_from_dict_restores_breakdown(self):
        breakdown = calculate_price({
            "basePrice": 25,
            "quantity": 2,
            "isPremiumImage": True,
            "shipping": {"amount": 4.5, "isEstimated": True},
        })
        self.assertEqual(PriceBreakdown.from_dict(breakdown.to_dict()), breakdown)

    def test_from_dict_rejects_other_payloads(self):
        with self.assertRaises(KeyError):
            PriceBreakdown.from_dict({"message": "Invalid pricing input"})

    def test_input_to_dict_uses_wire_names(self):
        data = PriceCalculationInput(base_price=12, has_inside_label=True).to_dict()
        self.assertEqual(data["basePrice"], 12)
        self.assertTrue(data["hasInsideLabel"])
        self.assertEqual(data["shipping"], {"amount": 0.0, "isEstimated": False})

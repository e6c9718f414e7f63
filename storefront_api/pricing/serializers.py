# pricing/serializers.py
"""
Request serializers for the pricing endpoints.

The quote endpoint takes its body as-is (the calculator coerces every field);
only the shipping/tax estimator and the retail price lookup validate strictly.
"""

from rest_framework import serializers


# Upper bounds on numeric inputs
MAX_ITEM_QUANTITY = 10_000
MAX_ITEM_PRICE = 1_000_000
MAX_COST_CENTS = 1_000_000
MAX_MULTIPLIER = 100


class BoundedFloatField(serializers.FloatField):
    """FloatField that reports integers too large for a float as invalid."""

    def to_internal_value(self, data):
        try:
            return super().to_internal_value(data)
        except OverflowError:
            self.fail("invalid")


class EstimateItemSerializer(serializers.Serializer):
    """One cart line for shipping/tax estimation."""

    quantity = serializers.IntegerField(max_value=MAX_ITEM_QUANTITY)
    price = BoundedFloatField(min_value=0, max_value=MAX_ITEM_PRICE)
    weightGrams = BoundedFloatField(required=False, allow_null=True, min_value=0)


class ShippingTaxEstimateSerializer(serializers.Serializer):
    """
    Destination + cart contents.

    {
        "countryCode": "US",
        "stateCode": "CA",
        "zip": "94107",
        "items": [{"quantity": 2, "price": 40.0}]
    }
    """

    countryCode = serializers.CharField(required=False, allow_blank=True, max_length=2)
    stateCode = serializers.CharField(required=False, allow_blank=True, max_length=3)
    zip = serializers.CharField(required=False, allow_blank=True, max_length=20)
    items = EstimateItemSerializer(many=True)

    def validate_countryCode(self, value):
        return value.upper()

    def validate_stateCode(self, value):
        return value.upper()


class RetailPriceSerializer(serializers.Serializer):
    """Estimated fulfilment cost (cents) and optional product category."""

    costCents = serializers.IntegerField(min_value=0, max_value=MAX_COST_CENTS)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100)
    multiplier = BoundedFloatField(required=False, min_value=0, max_value=MAX_MULTIPLIER)

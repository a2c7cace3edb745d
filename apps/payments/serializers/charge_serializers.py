"""
Storefront payment input serializers.
"""
from rest_framework import serializers


class TokenizeSerializer(serializers.Serializer):
    """
    Card details to exchange for a provider token.
    Used for: POST /api/shops/{slug}/payments/tokenize/
    """
    card_number = serializers.RegexField(r'^\d{12,19}$')
    expiry_month = serializers.RegexField(r'^(0?[1-9]|1[0-2])$')
    expiry_year = serializers.RegexField(r'^\d{2}(\d{2})?$')
    cvv = serializers.RegexField(r'^\d{3,4}$', write_only=True)
    holder_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    holder_id = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class ChargeSerializer(serializers.Serializer):
    """
    Charge a token for an order.
    Used for: POST /api/shops/{slug}/payments/charge/
    """
    token = serializers.CharField(max_length=200)
    order_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    card_mask = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    card_type = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')

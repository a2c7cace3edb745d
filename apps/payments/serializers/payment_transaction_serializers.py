"""
Payment transaction output serializers.
"""
from rest_framework import serializers
from ..models import PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    """
    Payment attempt as shown to store staff.
    Used for: GET /api/orders/{id}/ (nested under ``payments``)
    """
    provider_display = serializers.CharField(source='provider_config.display_name', read_only=True, default='')

    class Meta:
        model = PaymentTransaction
        fields = [
            'transaction_id', 'provider', 'provider_display', 'transaction_type', 'status',
            'amount', 'currency', 'provider_transaction_id', 'provider_approval_num',
            'card_brand', 'card_last_four', 'error_code', 'error_message',
            'processed_at', 'created_at'
        ]
        read_only_fields = fields

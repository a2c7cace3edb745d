"""
Payment serializers module.
"""
from .payment_transaction_serializers import PaymentTransactionSerializer
from .charge_serializers import TokenizeSerializer, ChargeSerializer

__all__ = [
    'PaymentTransactionSerializer',
    'TokenizeSerializer',
    'ChargeSerializer',
]

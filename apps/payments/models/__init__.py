"""
Payment models module.
"""
from .payment_provider import PaymentProvider
from .payment_transaction import PaymentTransaction
from .payment_callback import PaymentCallback

__all__ = [
    'PaymentProvider',
    'PaymentTransaction',
    'PaymentCallback',
]

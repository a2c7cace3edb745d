"""
Payment views module.
"""
from .charge_views import tokenize_card, charge_order
from .callback_views import payment_callback

__all__ = [
    'tokenize_card',
    'charge_order',
    'payment_callback',
]

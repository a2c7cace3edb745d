"""
Discount models module.
"""
from .discount import Discount, AutomaticDiscount
from .gift_card import GiftCard, GiftCardTransaction

__all__ = [
    'Discount',
    'AutomaticDiscount',
    'GiftCard',
    'GiftCardTransaction',
]

"""
Discount services module.
"""
from .coupon_service import CouponService
from .automatic_discount_service import AutomaticDiscountService
from .gift_card_service import GiftCardService

__all__ = [
    'CouponService',
    'AutomaticDiscountService',
    'GiftCardService',
]

"""
Coupon lookup, valuation and the usage counter.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.utils import timezone

from apps.common.db import increment_within_limit
from ..models import Discount

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def percentage_of(amount, percent):
    return (Decimal(amount) * Decimal(percent) / Decimal('100')).quantize(CENT, rounding=ROUND_HALF_UP)


class CouponService:
    """Service for code-activated discounts"""

    @staticmethod
    def normalize_code(code):
        return (code or '').strip().upper()

    @staticmethod
    def find_valid(store, code, subtotal, now=None) -> Optional[Discount]:
        """
        Return the coupon if it may apply to a cart with catalog ``subtotal``.

        Unknown, inactive, out-of-window, exhausted or below-minimum coupons
        return None; the checkout continues without them.
        """
        code = CouponService.normalize_code(code)
        if not code:
            return None

        discount = Discount.objects.filter(store=store, code=code).first()
        if discount is None:
            return None

        if not discount.is_live(now or timezone.now()):
            logger.info(f"Coupon {code} not live for store {store.id}")
            return None

        if discount.is_exhausted:
            logger.info(f"Coupon {code} exhausted ({discount.usage_count}/{discount.usage_limit})")
            return None

        if discount.minimum_amount is not None and Decimal(subtotal) < discount.minimum_amount:
            logger.info(f"Coupon {code} below minimum: {subtotal} < {discount.minimum_amount}")
            return None

        return discount

    @staticmethod
    def calculate(discount, base_amount, shipping=Decimal('0')):
        """
        Value of ``discount`` against ``base_amount``.

        Returns ``(amount, shipping_discount)``. Fixed amounts are capped at
        the base so the remainder never goes negative.
        """
        base_amount = max(Decimal(base_amount), Decimal('0'))
        if discount.discount_type == 'percentage':
            return min(percentage_of(base_amount, discount.value), base_amount), Decimal('0')
        if discount.discount_type == 'fixed_amount':
            return min(discount.value, base_amount), Decimal('0')
        if discount.discount_type == 'free_shipping':
            return Decimal('0'), Decimal(shipping)
        # buy_x_get_y needs line targeting, which this pass does not do
        return Decimal('0'), Decimal('0')

    @staticmethod
    def try_increment_usage(discount) -> bool:
        """
        Count one redemption if the coupon is still under its limit.

        The guard and the increment are one statement; a False result means
        another checkout took the last redemption and the coupon must not be
        applied.
        """
        accepted = increment_within_limit(
            Discount.objects.filter(pk=discount.pk), 'usage_count', 'usage_limit'
        )
        if accepted:
            discount.usage_count += 1
        else:
            logger.info(f"Coupon {discount.code} increment rejected: limit {discount.usage_limit} reached")
        return accepted

"""
Automatic (code-less) discounts.
"""
import logging
from decimal import Decimal

from django.db.models import F, Q
from django.utils import timezone

from ..models import AutomaticDiscount
from .coupon_service import percentage_of

logger = logging.getLogger(__name__)


class AutomaticDiscountService:

    @staticmethod
    def live_for_store(store, now=None):
        now = now or timezone.now()
        return AutomaticDiscount.objects.filter(
            Q(starts_at__isnull=True) | Q(starts_at__lte=now),
            Q(ends_at__isnull=True) | Q(ends_at__gte=now),
            store=store,
            is_active=True,
            applies_to='all',
        ).order_by('-priority', 'id')

    @staticmethod
    def apply(store, subtotal, total_quantity, now=None):
        """
        Evaluate storewide discounts in priority order.

        Percentages are taken from the full ``subtotal``; fixed amounts are
        capped at what is left after the discounts before them. Returns
        ``(total, applied)`` where ``applied`` lists dicts for the breakdown.
        """
        subtotal = Decimal(subtotal)
        remaining = subtotal
        applied = []

        for discount in AutomaticDiscountService.live_for_store(store, now):
            if discount.minimum_amount is not None and subtotal < discount.minimum_amount:
                continue
            if discount.minimum_quantity is not None and total_quantity < discount.minimum_quantity:
                continue

            if discount.discount_type == 'percentage':
                amount = percentage_of(subtotal, discount.value)
            else:
                amount = discount.value
            amount = min(amount, remaining)
            if amount <= 0:
                continue

            remaining -= amount
            applied.append({
                'type': 'automatic',
                'id': discount.id,
                'name': discount.name,
                'discount_type': discount.discount_type,
                'value': str(discount.value),
                'amount': amount,
            })

        return subtotal - remaining, applied

    @staticmethod
    def record_usage(discount_ids):
        if not discount_ids:
            return 0
        return AutomaticDiscount.objects.filter(pk__in=discount_ids).update(usage_count=F('usage_count') + 1)

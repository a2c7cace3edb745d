"""
Points service for loyalty accounts and order accrual.
"""
import logging
from decimal import Decimal, ROUND_FLOOR

from ..models import PointsAccount, PointsTransaction

logger = logging.getLogger(__name__)


class PointsService:
    """Service for handling points operations"""

    @staticmethod
    def get_or_create_account(customer):
        """Get or create points account for customer"""
        account, created = PointsAccount.objects.get_or_create(
            customer=customer,
            defaults={'total_points': 0, 'available_points': 0}
        )
        if created:
            logger.info(f"Loyalty account opened for customer {customer.pk}")
        return account

    @staticmethod
    def calculate_order_points(total, points_per_unit):
        """Points for an order total, rounded down"""
        points = (Decimal(total) * Decimal(points_per_unit)).to_integral_value(rounding=ROUND_FLOOR)
        return max(int(points), 0)

    @staticmethod
    def award_order_points(order):
        """
        Award purchase points for a paid order.

        Only club members (customers with an account) earn points. Returns the
        transaction, or None when nothing was awarded. Safe to call twice for
        the same order.
        """
        customer = order.customer
        if customer is None:
            return None

        account = PointsAccount.objects.filter(customer=customer).first()
        if account is None:
            return None

        reference_id = f'order_{order.pk}'
        if PointsTransaction.objects.filter(account=account, reference_id=reference_id).exists():
            logger.info(f"Points already awarded for order {order.pk}")
            return None

        points = PointsService.calculate_order_points(order.total, order.store.points_per_unit)
        if points <= 0:
            return None

        return account.add_points(
            amount=points,
            transaction_type='earning',
            description=f'Order #{order.order_number}',
            reference_id=reference_id,
        )

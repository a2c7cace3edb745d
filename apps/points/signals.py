import logging

from django.db import transaction
from django.dispatch import receiver

from apps.orders.signals import order_paid
from .services import PointsService

logger = logging.getLogger(__name__)


@receiver(order_paid)
def award_points_for_paid_order(sender, order, **kwargs):
    """Accrue loyalty points once an order is paid"""
    with transaction.atomic():
        points_transaction = PointsService.award_order_points(order)
    if points_transaction:
        logger.info(f"Awarded {points_transaction.amount} points for order #{order.order_number}")
    return points_transaction

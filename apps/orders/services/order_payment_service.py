"""
Order payment status transitions.
"""
import logging

from django.db import transaction
from django.utils import timezone

from ..models import Order

logger = logging.getLogger(__name__)


class OrderPaymentService:
    """Service for moving orders between financial states"""

    @staticmethod
    @transaction.atomic
    def mark_paid(order) -> bool:
        """
        Transition ``order`` from pending to paid.

        The transition is a conditional update, so of several concurrent or
        repeated confirmations exactly one returns True and schedules the
        post-payment side effects (after commit).
        """
        now = timezone.now()
        updated = Order.objects.filter(pk=order.pk, financial_status='pending').update(
            financial_status='paid',
            status='processing',
            paid_at=now,
            updated_at=now,
        )
        if not updated:
            logger.info(f"Order #{order.order_number} already settled; paid transition skipped")
            return False

        order.financial_status = 'paid'
        order.status = 'processing'
        order.paid_at = now

        from .post_payment import PostPaymentDispatcher
        PostPaymentDispatcher.schedule(order.pk)

        logger.info(f"Order #{order.order_number} marked paid")
        return True

    @staticmethod
    def mark_refunded(order) -> bool:
        """Move a paid order to refunded; returns False if it was not paid"""
        updated = Order.objects.filter(pk=order.pk, financial_status='paid').update(
            financial_status='refunded',
            updated_at=timezone.now(),
        )
        if updated:
            order.financial_status = 'refunded'
            logger.info(f"Order #{order.order_number} marked refunded")
        return bool(updated)

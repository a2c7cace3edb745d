"""
Post-payment dispatcher.

Side effects of a paid order run after the paid transition commits, off the
request path when ``POST_PAYMENT_ASYNC`` is set. Every step is isolated: a
failing step is logged and the others still run; nothing here can undo the
payment.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.core.mail import send_mail
from django.db import close_old_connections, connection, transaction
from django.template.loader import render_to_string
from django.utils.translation import gettext as _

from apps.discounts.services import AutomaticDiscountService, GiftCardService
from apps.products.services import InventoryService
from ..models import Order
from ..signals import order_paid

logger = logging.getLogger(__name__)

_executor = None


def get_executor():
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=settings.POST_PAYMENT_MAX_WORKERS,
            thread_name_prefix='post-payment',
        )
    return _executor


def send_confirmation_email(order):
    items = list(order.items.all())
    body = render_to_string('orders/confirmation_email.txt', {
        'order': order,
        'items': items,
        'store': order.store,
    })
    send_mail(
        subject=_('Order #%(number)s confirmation') % {'number': order.order_number},
        message=body,
        from_email=order.store.email or settings.DEFAULT_FROM_EMAIL,
        recipient_list=[order.customer_email],
    )


def check_low_stock(order):
    InventoryService.check_low_stock(order)


def record_automatic_discount_usage(order):
    ids = [
        discount.discount_details.get('id')
        for discount in order.discounts.filter(discount_type='automatic')
    ]
    AutomaticDiscountService.record_usage([pk for pk in ids if pk])


def issue_gift_cards(order):
    """One card per purchased gift-card unit, emailed to the recipient"""
    if order.issued_gift_cards.exists():
        return
    for item in order.items.filter(is_gift_card=True):
        recipient = (item.properties or {}).get('recipient_email') or order.customer_email
        for _unit in range(item.quantity):
            card = GiftCardService.issue(
                order.store,
                item.price,
                purchaser_email=order.customer_email,
                recipient_email=recipient,
                order=order,
            )
            send_mail(
                subject=_('Your gift card from %(store)s') % {'store': order.store.name},
                message=render_to_string('orders/gift_card_email.txt', {'card': card, 'store': order.store}),
                from_email=order.store.email or settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient],
            )


class PostPaymentDispatcher:
    """Fan-out of side effects for a newly paid order"""

    STEPS = [
        ('confirmation_email', send_confirmation_email),
        ('low_stock_check', check_low_stock),
        ('automatic_discount_usage', record_automatic_discount_usage),
        ('gift_card_issuance', issue_gift_cards),
    ]

    @staticmethod
    def schedule(order_id):
        """Run side effects for ``order_id`` once the current transaction commits"""
        transaction.on_commit(lambda: PostPaymentDispatcher.submit(order_id))

    @staticmethod
    def submit(order_id):
        if settings.POST_PAYMENT_ASYNC:
            get_executor().submit(PostPaymentDispatcher._run_in_worker, order_id)
        else:
            PostPaymentDispatcher.dispatch(order_id)

    @staticmethod
    def _run_in_worker(order_id):
        close_old_connections()
        try:
            PostPaymentDispatcher.dispatch(order_id)
        except Exception:
            logger.exception(f"Post-payment dispatch crashed for order {order_id}")
        finally:
            connection.close()

    @staticmethod
    def dispatch(order_id):
        """
        Run every step for the order. Returns {step name: succeeded}.
        """
        order = Order.objects.select_related('store', 'customer').get(pk=order_id)
        results = {}

        for name, step in PostPaymentDispatcher.STEPS:
            try:
                with transaction.atomic():
                    step(order)
                results[name] = True
            except Exception:
                logger.exception(f"Post-payment step {name} failed for order #{order.order_number}")
                results[name] = False

        for receiver, response in order_paid.send_robust(sender=Order, order=order):
            name = getattr(receiver, '__name__', repr(receiver))
            if isinstance(response, Exception):
                logger.error(
                    f"order_paid receiver {name} failed for order #{order.order_number}: {response}",
                    exc_info=response,
                )
                results[name] = False
            else:
                results[name] = True

        logger.info(f"Post-payment actions for order #{order.order_number}: {results}")
        return results

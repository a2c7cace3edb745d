"""
Order repository: turns a priced cart into a durable order.
"""
import logging
from decimal import Decimal
from typing import Dict, Optional, Tuple

from django.db import transaction
from django.utils.translation import gettext_lazy as _

from apps.common.db import increment_and_fetch
from apps.common.exceptions import CheckoutError, NotFound, ValidationFailed
from apps.common.models import Store
from apps.customers.services import CreditLedgerService, CustomerService
from apps.discounts.services import CouponService, GiftCardService
from apps.products.services import CatalogService, InventoryService
from ..models import Order, OrderDiscount, OrderItem
from .order_payment_service import OrderPaymentService
from .pricing_service import PricingService, money

logger = logging.getLogger(__name__)


class OrderService:
    """Service class for order creation"""

    @staticmethod
    def get_store(store_id=None, store_slug=None) -> Store:
        if not store_id and not store_slug:
            raise ValidationFailed(_('Store is missing'), code='store_missing')
        queryset = Store.objects.filter(is_active=True)
        store = queryset.filter(pk=store_id).first() if store_id else queryset.filter(slug=store_slug).first()
        if store is None:
            raise NotFound(_('Store not found'), code='store_not_found')
        return store

    @staticmethod
    def allocate_order_number(store) -> int:
        """
        Take the next order number for ``store``.

        Increment and read-back run in the caller's transaction while the
        store row is locked by the update, so two checkouts never share a
        number.
        """
        number = increment_and_fetch(Store.objects.filter(pk=store.pk), 'order_counter')
        store.order_counter = number
        return number

    @staticmethod
    def build_address_line(address) -> str:
        """'<street> <number>, Apt <n>, Floor <n>, <city>' from structured parts"""
        if not address:
            return ''
        line = ' '.join(
            part for part in (address.get('street', ''), str(address.get('house_number') or '')) if part
        ).strip()
        if address.get('apartment'):
            line += f", Apt {address['apartment']}"
        if address.get('floor'):
            line += f", Floor {address['floor']}"
        if address.get('city'):
            line += f", {address['city']}"
        return line.strip(', ')

    @staticmethod
    def _log_price_anomaly(store, breakdown, client_totals):
        if not client_totals:
            return
        server = {
            'subtotal': breakdown.subtotal,
            'discount': breakdown.discount_total,
            'total': breakdown.total,
        }
        mismatched = {}
        for key, server_value in server.items():
            if client_totals.get(key) is None:
                continue
            if money(client_totals[key]) != money(server_value):
                mismatched[key] = {'client': str(client_totals[key]), 'server': str(server_value)}
        if mismatched:
            logger.warning(f"Client totals differ from server pricing for store {store.id}: {mismatched}")

    @staticmethod
    def _apply_totals(order, breakdown):
        order.subtotal = breakdown.subtotal
        order.discount_amount = breakdown.discount_total
        order.discount_code = breakdown.code
        order.discount_details = breakdown.details()
        order.gift_card_amount = breakdown.gift_card_amount
        order.credit_used = breakdown.credit_used
        order.shipping = breakdown.shipping_charged
        order.total = breakdown.total

    @staticmethod
    def _create_discount_rows(order, breakdown):
        rows = [
            OrderDiscount(
                order=order,
                discount_type='automatic',
                discount_amount=entry['amount'],
                description=entry['name'],
                discount_details={'id': entry['id'], 'discount_type': entry['discount_type'], 'value': entry['value']},
            )
            for entry in breakdown.auto_discounts
        ]
        if breakdown.coupon is not None:
            coupon = breakdown.coupon
            rows.append(OrderDiscount(
                order=order,
                discount_type='free_shipping' if coupon.discount_type == 'free_shipping' else 'coupon',
                code=coupon.code,
                discount_amount=breakdown.coupon_discount + breakdown.shipping_discount,
                description=coupon.title or coupon.code,
                discount_details={'id': coupon.id, 'discount_type': coupon.discount_type, 'value': str(coupon.value)},
            ))
        if breakdown.gift_card is not None:
            rows.append(OrderDiscount(
                order=order,
                discount_type='gift_card',
                code=breakdown.gift_card.code,
                discount_amount=breakdown.gift_card_amount,
                description=f'Gift card {breakdown.gift_card.code}',
                discount_details={'id': breakdown.gift_card.id},
            ))
        OrderDiscount.objects.bulk_create(rows)

    @staticmethod
    def create_order(data: Dict) -> Tuple[Optional[Order], str]:
        """
        Create an order from validated checkout data.

        Returns (order, message). Validation and inventory problems abort
        before any write with a specific message; anything unexpected rolls
        back the whole order and returns a generic failure.
        """
        try:
            store = OrderService.get_store(data.get('store_id'), data.get('store_slug'))
            items = data.get('items') or []
            if not items:
                raise ValidationFailed(_('Cart is empty'), code='cart_empty')

            lines = CatalogService.resolve_lines(store, items)
            breakdown = PricingService.calculate(
                store, lines, coupon_code=data.get('coupon_code'), shipping=data.get('shipping') or 0
            )
            InventoryService.check_availability(lines)

            with transaction.atomic():
                order = OrderService._persist(store, lines, breakdown, data)

        except CheckoutError as e:
            logger.info(f"Order rejected: {e.code} {e.message}")
            return None, e.message
        except Exception as e:
            logger.exception(
                f"Order creation failed: store={data.get('store_id') or data.get('store_slug')} "
                f"customer={(data.get('customer') or {}).get('email')} items={data.get('items')}"
            )
            return None, _('Failed to create order: %(error)s') % {'error': str(e)}

        logger.info(f"Order #{order.order_number} created for store {store.id}: total={order.total}")
        return order, _('Order created')

    @staticmethod
    def _persist(store, lines, breakdown, data) -> Order:
        contact = data.get('customer') or {}
        shipping_address = data.get('shipping_address') or {}

        customer, _created = CustomerService.upsert(
            store,
            contact,
            address=shipping_address,
            create_account=data.get('create_account', False),
            password=data.get('password'),
            accepts_marketing=data.get('accepts_marketing', False),
            join_club=data.get('join_club', False),
        )
        PricingService.apply_credit(breakdown, data.get('credit_to_apply') or 0, customer)
        OrderService._log_price_anomaly(store, breakdown, data.get('client_totals'))

        order_number = OrderService.allocate_order_number(store)

        # The coupon only counts if this checkout wins a redemption slot
        if breakdown.coupon is not None and not CouponService.try_increment_usage(breakdown.coupon):
            breakdown.drop_coupon()
            PricingService.apply_credit(breakdown, data.get('credit_to_apply') or 0, customer)

        order = Order(
            store=store,
            customer=customer,
            order_number=order_number,
            currency=store.currency,
            customer_email=customer.email,
            customer_name=' '.join(
                part for part in (contact.get('first_name', ''), contact.get('last_name', '')) if part
            ),
            customer_phone=contact.get('phone', ''),
            shipping_address=shipping_address,
            billing_address=data.get('billing_address') or shipping_address,
            address_line=OrderService.build_address_line(shipping_address),
            note=data.get('note', ''),
            client_totals={k: str(v) for k, v in (data.get('client_totals') or {}).items()},
        )
        OrderService._apply_totals(order, breakdown)
        order.save()

        # Balance mutations; a rejected debit leaves the order un-debited
        changed = False
        if breakdown.gift_card is not None and breakdown.gift_card_amount > 0:
            if GiftCardService.redeem(breakdown.gift_card, breakdown.gift_card_amount, order) is None:
                breakdown.drop_gift_card()
                PricingService.apply_credit(breakdown, data.get('credit_to_apply') or 0, customer)
                changed = True
        if breakdown.credit_used > 0:
            if CreditLedgerService.debit(customer, breakdown.credit_used, order) is None:
                breakdown.drop_credit()
                changed = True
        if changed:
            OrderService._apply_totals(order, breakdown)
            order.save()

        OrderService._create_discount_rows(order, breakdown)

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=line.product,
                variant=line.variant,
                name=line.name,
                variant_title=line.variant_title,
                sku=(line.variant.sku if line.variant is not None else '') or line.product.sku,
                price=line.unit_price,
                quantity=line.quantity,
                total=line.line_total,
                is_gift_card=line.product.is_gift_card,
                properties=line.properties,
            )
            for line in lines
        ])

        for line in lines:
            InventoryService.decrement(line.product, line.variant, line.quantity, order=order)

        CustomerService.record_order(customer, order.total)

        if order.total <= Decimal('0'):
            OrderPaymentService.mark_paid(order)

        return order

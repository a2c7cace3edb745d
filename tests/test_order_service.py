"""
Order repository tests: end-to-end order creation and its invariants
"""
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.test import TestCase
from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase as HypothesisTestCase

from apps.common.models import Store
from apps.customers.models import CreditTransaction, Customer
from apps.discounts.models import Discount, GiftCard
from apps.orders.models import Order, OrderDiscount
from apps.orders.services import OrderService
from apps.points.models import PointsAccount
from apps.products.models import InventoryLog, Product
from tests.factories import (
    CustomerFactory, DiscountFactory, GiftCardFactory, ProductFactory, StoreFactory,
    cart_item, checkout_payload,
)


class TestOrderNumberProperties(HypothesisTestCase):

    @given(count=st.integers(min_value=1, max_value=15))
    @settings(max_examples=15, deadline=None)
    def test_order_numbers_unique_and_increasing(self, count):
        """
        For any number of orders in a store, numbers are distinct and strictly
        increasing, continuing from the store counter.
        """
        store = StoreFactory()
        start = store.order_counter

        numbers = [OrderService.allocate_order_number(store) for _ in range(count)]

        assert len(set(numbers)) == count
        assert numbers == sorted(numbers)
        assert numbers[0] == start + 1
        assert Store.objects.get(pk=store.pk).order_counter == numbers[-1]


class TestCreateOrder(TestCase):

    def setUp(self):
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, name='Notebook', price=Decimal('100.00'), inventory=10)

    def create(self, items=None, **extra):
        items = items if items is not None else [cart_item(self.product, 2)]
        return OrderService.create_order(checkout_payload(self.store, items, **extra))

    def test_save10_end_to_end(self):
        DiscountFactory(store=self.store, code='SAVE10', discount_type='percentage', value=Decimal('10'),
                        minimum_amount=Decimal('100'), usage_limit=5)

        order, message = self.create(coupon_code='SAVE10', shipping=Decimal('20'))

        self.assertIsNotNone(order, message)
        self.assertEqual(order.subtotal, Decimal('200.00'))
        self.assertEqual(order.discount_amount, Decimal('20.00'))
        self.assertEqual(order.shipping, Decimal('20.00'))
        self.assertEqual(order.total, Decimal('200.00'))
        self.assertEqual(order.discount_code, 'SAVE10')
        self.assertEqual(Discount.objects.get(code='SAVE10').usage_count, 1)
        self.assertEqual(order.discounts.get().discount_type, 'coupon')

    def test_order_persists_items_customer_and_inventory(self):
        order, _message = self.create()

        self.assertEqual(order.order_number, self.store.order_counter + 1)
        self.assertEqual(order.financial_status, 'pending')
        self.assertEqual(order.address_line, 'Herzl 12, Tel Aviv')
        item = order.items.get()
        self.assertEqual((item.name, item.quantity, item.total), ('Notebook', 2, Decimal('200.00')))
        self.assertEqual(Product.objects.get(pk=self.product.pk).inventory, 8)
        self.assertEqual(InventoryLog.objects.get(order=order).change_amount, -2)

        customer = Customer.objects.get(store=self.store, email='buyer@example.com')
        self.assertEqual(order.customer, customer)
        self.assertEqual(customer.total_orders, 1)
        self.assertEqual(customer.total_spent, Decimal('200.00'))

    def test_client_prices_are_ignored(self):
        order, _message = self.create(items=[cart_item(self.product, 1, price='1.00')])

        self.assertEqual(order.total, Decimal('100.00'))

    def test_price_anomaly_logged(self):
        with self.assertLogs('apps.orders.services.order_service', level='WARNING') as logs:
            self.create(client_totals={'total': Decimal('150.00')})

        self.assertIn('Client totals differ', logs.output[0])

    def test_insufficient_inventory_aborts_without_writes(self):
        order, message = self.create(items=[cart_item(self.product, 11)])

        self.assertIsNone(order)
        self.assertIn('Notebook', str(message))
        self.assertFalse(Order.objects.exists())
        self.assertFalse(Customer.objects.exists())
        self.assertEqual(Store.objects.get(pk=self.store.pk).order_counter, self.store.order_counter)

    def test_empty_cart_rejected(self):
        order, message = self.create(items=[])

        self.assertIsNone(order)
        self.assertEqual(str(message), 'Cart is empty')

    def test_exhausted_coupon_dropped_at_commit(self):
        coupon = DiscountFactory(store=self.store, code='LAST', usage_limit=1)
        # Another checkout takes the last slot after pricing has read the coupon
        original = OrderService.allocate_order_number

        def allocate_and_steal(store):
            Discount.objects.filter(pk=coupon.pk).update(usage_count=1)
            return original(store)

        with patch.object(OrderService, 'allocate_order_number', side_effect=allocate_and_steal):
            order, _message = self.create(coupon_code='LAST')

        self.assertEqual(order.discount_amount, Decimal('0.00'))
        self.assertEqual(order.total, Decimal('200.00'))
        self.assertEqual(Discount.objects.get(pk=coupon.pk).usage_count, 1)

    def test_single_use_coupon_discounts_one_order(self):
        DiscountFactory(store=self.store, code='ONCE', discount_type='fixed_amount', value=Decimal('50'),
                        usage_limit=1)

        first, _message = self.create(coupon_code='ONCE')
        second, _message = self.create(coupon_code='ONCE', customer={'email': 'other@example.com'})

        self.assertIsNotNone(first)
        self.assertIsNotNone(second)
        discounted = [order for order in (first, second) if order.discount_amount > 0]
        self.assertEqual(len(discounted), 1)
        self.assertEqual(discounted[0].total, Decimal('150.00'))
        self.assertEqual(OrderDiscount.objects.filter(code='ONCE').count(), 1)
        self.assertEqual(Discount.objects.get(code='ONCE').usage_count, 1)

    def test_gift_card_redeemed_with_order(self):
        card = GiftCardFactory(store=self.store, initial_balance=Decimal('50.00'))

        order, _message = self.create(coupon_code=card.code)

        card.refresh_from_db()
        self.assertEqual(order.gift_card_amount, Decimal('50.00'))
        self.assertEqual(order.total, Decimal('150.00'))
        self.assertEqual(card.current_balance, Decimal('0.00'))
        self.assertEqual(card.status, 'used')
        self.assertEqual(card.transactions.get(transaction_type='redemption').order, order)

    def test_gift_card_drained_concurrently_is_dropped(self):
        card = GiftCardFactory(store=self.store, initial_balance=Decimal('50.00'))
        original = OrderService.allocate_order_number

        def allocate_and_drain(store):
            GiftCard.objects.filter(pk=card.pk).update(current_balance=Decimal('5.00'))
            return original(store)

        with patch.object(OrderService, 'allocate_order_number', side_effect=allocate_and_drain):
            order, _message = self.create(coupon_code=card.code)

        order.refresh_from_db()
        self.assertEqual(order.gift_card_amount, Decimal('0.00'))
        self.assertEqual(order.total, Decimal('200.00'))
        self.assertEqual(GiftCard.objects.get(pk=card.pk).current_balance, Decimal('5.00'))
        self.assertFalse(OrderDiscount.objects.filter(order=order, discount_type='gift_card').exists())

    def test_store_credit_debited(self):
        CustomerFactory(store=self.store, email='buyer@example.com', credit_balance=Decimal('30.00'))

        order, _message = self.create(credit_to_apply=Decimal('100.00'))

        self.assertEqual(order.credit_used, Decimal('30.00'))
        self.assertEqual(order.total, Decimal('170.00'))
        entry = CreditTransaction.objects.get(order=order)
        self.assertEqual((entry.amount, entry.balance_after), (Decimal('-30.00'), Decimal('0.00')))

    def test_account_and_club_membership(self):
        order, _message = self.create(create_account=True, password='s3cret-pass', join_club=True,
                                      accepts_marketing=True)

        customer = order.customer
        self.assertTrue(customer.has_account)
        self.assertTrue(customer.check_password('s3cret-pass'))
        self.assertTrue(customer.accepts_marketing)
        self.assertTrue(PointsAccount.objects.filter(customer=customer).exists())

    def test_existing_customer_updated_not_duplicated(self):
        existing = CustomerFactory(store=self.store, email='buyer@example.com', first_name='Old', phone='')

        order, _message = self.create()

        existing.refresh_from_db()
        self.assertEqual(order.customer, existing)
        self.assertEqual(existing.first_name, 'Dana')
        self.assertEqual(existing.phone, '0501234567')
        self.assertEqual(Customer.objects.filter(store=self.store).count(), 1)

    def test_zero_total_order_paid_and_dispatched(self):
        card = GiftCardFactory(store=self.store, initial_balance=Decimal('500.00'))

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            order, _message = self.create(coupon_code=card.code)

        order.refresh_from_db()
        self.assertEqual(order.total, Decimal('0.00'))
        self.assertEqual(order.financial_status, 'paid')
        self.assertIsNotNone(order.paid_at)
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(len(mail.outbox), 1)

    def test_unexpected_error_rolls_back_and_reports(self):
        with patch('apps.orders.services.order_service.CustomerService.record_order',
                   side_effect=RuntimeError('db gone')):
            order, message = self.create()

        self.assertIsNone(order)
        self.assertIn('db gone', str(message))
        self.assertFalse(Order.objects.exists())
        self.assertEqual(Product.objects.get(pk=self.product.pk).inventory, 10)

    def test_build_address_line(self):
        line = OrderService.build_address_line({
            'street': 'Rothschild', 'house_number': 5, 'apartment': '3', 'floor': '2', 'city': 'Haifa'
        })

        self.assertEqual(line, 'Rothschild 5, Apt 3, Floor 2, Haifa')
        self.assertEqual(OrderService.build_address_line({}), '')

"""
Property-based tests for the pricing engine
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase as DjangoTestCase
from django.utils import timezone
from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase

from apps.customers.models import Customer
from apps.orders.services import PricingService
from apps.products.services import CatalogService
from tests.factories import (
    AutomaticDiscountFactory, CustomerFactory, DiscountFactory, GiftCardFactory,
    ProductFactory, StoreFactory, cart_item,
)

prices = st.decimals(min_value=Decimal('0.01'), max_value=Decimal('999.99'), places=2)
quantities = st.integers(min_value=1, max_value=10)


def price(store, items, **kwargs):
    lines = CatalogService.resolve_lines(store, items)
    return PricingService.calculate(store, lines, **kwargs)


class TestPriceIntegrityProperties(TestCase):
    """Server totals derive from catalog data only"""

    @given(
        catalog_price=prices,
        client_price=prices,
        quantity=quantities,
        shipping=st.decimals(min_value=Decimal('0'), max_value=Decimal('100'), places=2),
    )
    @settings(max_examples=50, deadline=None)
    def test_subtotal_ignores_client_price(self, catalog_price, client_price, quantity, shipping):
        """
        For any client-submitted price, the subtotal is catalog price x quantity
        and the total is subtotal + shipping when no discounts apply.
        """
        store = StoreFactory()
        product = ProductFactory(store=store, price=catalog_price, track_inventory=False, inventory=None)

        breakdown = price(store, [cart_item(product, quantity, price=str(client_price))], shipping=shipping)

        assert breakdown.subtotal == catalog_price * quantity
        assert breakdown.total == breakdown.subtotal + shipping

    @given(
        catalog_price=prices,
        quantity=quantities,
        auto_percent=st.decimals(min_value=Decimal('0'), max_value=Decimal('100'), places=0),
        coupon_amount=prices,
        shipping=st.decimals(min_value=Decimal('0'), max_value=Decimal('50'), places=2),
        credit=st.decimals(min_value=Decimal('0'), max_value=Decimal('5000'), places=2),
    )
    @settings(max_examples=50, deadline=None)
    def test_total_identity_and_non_negative(self, catalog_price, quantity, auto_percent,
                                             coupon_amount, shipping, credit):
        """
        total == max(subtotal - discounts + shipping - credit, 0) and never negative
        """
        store = StoreFactory()
        product = ProductFactory(store=store, price=catalog_price, track_inventory=False, inventory=None)
        AutomaticDiscountFactory(store=store, value=auto_percent)
        DiscountFactory(store=store, code='FLAT', discount_type='fixed_amount', value=coupon_amount)
        customer = CustomerFactory(store=store, credit_balance=Decimal('10000.00'))

        breakdown = price(store, [cart_item(product, quantity)], coupon_code='flat', shipping=shipping)
        PricingService.apply_credit(breakdown, credit, customer)

        expected = max(breakdown.subtotal - breakdown.discount_total + shipping - breakdown.credit_used,
                       Decimal('0'))
        assert breakdown.total == expected
        assert breakdown.total >= 0
        assert breakdown.discount_total <= breakdown.subtotal
        assert breakdown.credit_used <= credit

    @given(
        balance=st.decimals(min_value=Decimal('0'), max_value=Decimal('500'), places=2),
        requested=st.decimals(min_value=Decimal('0'), max_value=Decimal('500'), places=2),
    )
    @settings(max_examples=50, deadline=None)
    def test_credit_is_clamped(self, balance, requested):
        """Credit used is min(requested, balance, payable)"""
        store = StoreFactory()
        product = ProductFactory(store=store, price=Decimal('120.00'), track_inventory=False, inventory=None)
        customer = CustomerFactory(store=store, credit_balance=balance)

        breakdown = price(store, [cart_item(product)])
        PricingService.apply_credit(breakdown, requested, customer)

        assert breakdown.credit_used == min(requested, balance, Decimal('120.00'))


class TestDiscountOrdering(DjangoTestCase):

    def setUp(self):
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, price=Decimal('1000.00'))
        AutomaticDiscountFactory(store=self.store, discount_type='percentage', value=Decimal('10'))

    def test_fixed_coupon_applies_after_automatic_discount(self):
        DiscountFactory(store=self.store, code='FIFTY', discount_type='fixed_amount', value=Decimal('50'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='FIFTY')

        self.assertEqual(breakdown.auto_discount_total, Decimal('100.00'))
        self.assertEqual(breakdown.coupon_discount, Decimal('50.00'))
        self.assertEqual(breakdown.total, Decimal('850.00'))

    def test_percentage_coupon_uses_post_automatic_base(self):
        DiscountFactory(store=self.store, code='TENOFF', discount_type='percentage', value=Decimal('10'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='tenoff')

        self.assertEqual(breakdown.coupon_discount, Decimal('90.00'))
        self.assertEqual(breakdown.total, Decimal('810.00'))

    def test_coupon_minimum_checked_against_original_subtotal(self):
        DiscountFactory(store=self.store, code='BIG', discount_type='fixed_amount', value=Decimal('50'),
                        minimum_amount=Decimal('950'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='BIG')

        # 900 after automatic discounts, but the gate sees 1000
        self.assertEqual(breakdown.coupon_discount, Decimal('50.00'))

    def test_automatic_discounts_stack_by_priority(self):
        AutomaticDiscountFactory(store=self.store, discount_type='fixed_amount', value=Decimal('30'), priority=5)

        breakdown = price(self.store, [cart_item(self.product)])

        self.assertEqual(breakdown.auto_discount_total, Decimal('130.00'))
        self.assertEqual([d['discount_type'] for d in breakdown.auto_discounts], ['fixed_amount', 'percentage'])

    def test_out_of_window_automatic_discount_is_skipped(self):
        AutomaticDiscountFactory(store=self.store, value=Decimal('50'),
                                 ends_at=timezone.now() - timedelta(days=1))

        breakdown = price(self.store, [cart_item(self.product)])

        self.assertEqual(breakdown.auto_discount_total, Decimal('100.00'))

    def test_minimum_quantity_gate(self):
        AutomaticDiscountFactory(store=self.store, discount_type='fixed_amount', value=Decimal('25'),
                                 minimum_quantity=3)

        one = price(self.store, [cart_item(self.product, 1)])
        three = price(self.store, [cart_item(self.product, 3)])

        self.assertEqual(one.auto_discount_total, Decimal('100.00'))
        self.assertEqual(three.auto_discount_total, Decimal('325.00'))


class TestCodeResolution(DjangoTestCase):

    def setUp(self):
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, price=Decimal('200.00'))

    def test_invalid_coupon_contributes_zero(self):
        DiscountFactory(store=self.store, code='OLD', is_active=False)

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='OLD')

        self.assertIsNone(breakdown.coupon)
        self.assertEqual(breakdown.total, Decimal('200.00'))

    def test_exhausted_coupon_contributes_zero(self):
        DiscountFactory(store=self.store, code='ONCE', usage_limit=1, usage_count=1)

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='ONCE')

        self.assertIsNone(breakdown.coupon)

    def test_gift_card_used_when_no_coupon_matches(self):
        card = GiftCardFactory(store=self.store, initial_balance=Decimal('80.00'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code=card.code.lower())

        self.assertEqual(breakdown.gift_card, card)
        self.assertEqual(breakdown.gift_card_amount, Decimal('80.00'))
        self.assertEqual(breakdown.total, Decimal('120.00'))

    def test_gift_card_capped_at_remaining_amount(self):
        card = GiftCardFactory(store=self.store, initial_balance=Decimal('500.00'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code=card.code)

        self.assertEqual(breakdown.gift_card_amount, Decimal('200.00'))
        self.assertEqual(breakdown.total, Decimal('0.00'))

    def test_free_shipping_coupon_zeroes_shipping(self):
        DiscountFactory(store=self.store, code='SHIPFREE', discount_type='free_shipping', value=Decimal('0'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='SHIPFREE', shipping=Decimal('25'))

        self.assertEqual(breakdown.shipping_charged, Decimal('0.00'))
        self.assertEqual(breakdown.total, Decimal('200.00'))

    def test_buy_x_get_y_accepted_without_effect(self):
        DiscountFactory(store=self.store, code='B2G1', discount_type='buy_x_get_y', value=Decimal('1'))

        breakdown = price(self.store, [cart_item(self.product)], coupon_code='B2G1')

        self.assertEqual(breakdown.coupon_discount, Decimal('0.00'))
        self.assertEqual(breakdown.total, Decimal('200.00'))

    def test_credit_without_customer_is_ignored(self):
        breakdown = price(self.store, [cart_item(self.product)])
        PricingService.apply_credit(breakdown, Decimal('50'), None)

        self.assertEqual(breakdown.credit_used, Decimal('0.00'))

    def test_credit_limited_by_balance(self):
        customer = Customer.objects.create(store=self.store, email='c@example.com', credit_balance=Decimal('30'))

        breakdown = price(self.store, [cart_item(self.product)])
        PricingService.apply_credit(breakdown, Decimal('50'), customer)

        self.assertEqual(breakdown.credit_used, Decimal('30.00'))
        self.assertEqual(breakdown.total, Decimal('170.00'))

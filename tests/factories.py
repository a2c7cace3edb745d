"""
Test factories for creating test data using factory_boy.
"""
import factory
from factory.django import DjangoModelFactory
from factory import Faker, SubFactory, LazyAttribute
from decimal import Decimal
from django.contrib.auth import get_user_model

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Store staff user."""

    class Meta:
        model = User
        django_get_or_create = ('username',)

    username = factory.Sequence(lambda n: f"staff{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    is_active = True


class StoreFactory(DjangoModelFactory):

    class Meta:
        model = 'common.Store'
        django_get_or_create = ('slug',)

    name = factory.Sequence(lambda n: f"Store {n}")
    slug = factory.Sequence(lambda n: f"store-{n}")
    email = LazyAttribute(lambda obj: f"{obj.slug}@shop.example.com")
    currency = 'ILS'
    is_active = True


class ProductFactory(DjangoModelFactory):

    class Meta:
        model = 'products.Product'

    store = SubFactory(StoreFactory)
    name = Faker('word')
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    price = Decimal('100.00')
    status = 'active'
    track_inventory = True
    inventory = 100


class ProductVariantFactory(DjangoModelFactory):

    class Meta:
        model = 'products.ProductVariant'

    product = SubFactory(ProductFactory)
    title = factory.Sequence(lambda n: f"Option {n}")
    price = None
    inventory = None
    is_active = True


class CustomerFactory(DjangoModelFactory):

    class Meta:
        model = 'customers.Customer'

    store = SubFactory(StoreFactory)
    email = factory.Sequence(lambda n: f"buyer{n}@example.com")
    first_name = Faker('first_name')
    last_name = Faker('last_name')
    credit_balance = Decimal('0.00')


class DiscountFactory(DjangoModelFactory):
    """Coupon; 10% off by default."""

    class Meta:
        model = 'discounts.Discount'

    store = SubFactory(StoreFactory)
    code = factory.Sequence(lambda n: f"CODE{n}")
    discount_type = 'percentage'
    value = Decimal('10')
    is_active = True


class AutomaticDiscountFactory(DjangoModelFactory):

    class Meta:
        model = 'discounts.AutomaticDiscount'

    store = SubFactory(StoreFactory)
    name = factory.Sequence(lambda n: f"Automatic {n}")
    discount_type = 'percentage'
    value = Decimal('10')
    is_active = True


class GiftCardFactory(DjangoModelFactory):

    class Meta:
        model = 'discounts.GiftCard'

    store = SubFactory(StoreFactory)
    code = factory.Sequence(lambda n: f"GIFT-CARD-TEST-{n:04d}")
    initial_balance = Decimal('100.00')
    current_balance = LazyAttribute(lambda obj: obj.initial_balance)
    status = 'active'


class PaymentProviderFactory(DjangoModelFactory):

    class Meta:
        model = 'payments.PaymentProvider'

    store = SubFactory(StoreFactory)
    provider = 'quick_payments'
    is_active = True
    test_mode = False
    credentials = factory.LazyFunction(lambda: {'seller_id': 'MPL-TEST-0001', 'api_key': 'test-key'})
    settings = factory.LazyFunction(dict)


class OrderFactory(DjangoModelFactory):
    """Pending order with a fixed total; bypasses the pricing engine."""

    class Meta:
        model = 'orders.Order'

    store = SubFactory(StoreFactory)
    order_number = factory.Sequence(lambda n: 5000 + n)
    subtotal = Decimal('100.00')
    total = Decimal('100.00')
    currency = 'ILS'
    customer_email = factory.Sequence(lambda n: f"orderer{n}@example.com")
    customer_name = Faker('name')


def cart_item(product, quantity=1, **extra):
    """Storefront cart line for ``product``."""
    item = {'product_id': str(product.id), 'quantity': quantity, 'name': product.name,
            'price': str(product.price)}
    item.update(extra)
    return item


def checkout_payload(store, items, email='buyer@example.com', **extra):
    """Validated create-order data as the view hands it to OrderService."""
    data = {
        'store_id': store.id,
        'items': items,
        'customer': {'email': email, 'first_name': 'Dana', 'last_name': 'Levi', 'phone': '0501234567'},
        'shipping_address': {'street': 'Herzl', 'house_number': '12', 'city': 'Tel Aviv'},
        'shipping': Decimal('0'),
        'credit_to_apply': Decimal('0'),
    }
    data.update(extra)
    return data

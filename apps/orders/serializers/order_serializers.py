"""
Order serializers for checkout input and order output.
"""
from rest_framework import serializers
from ..models import Order, OrderItem, OrderDiscount


class CartItemSerializer(serializers.Serializer):
    """Cart line as sent by the storefront; price and name are display-only"""
    product_id = serializers.CharField(max_length=100)
    variant_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    properties = serializers.JSONField(required=False)


class CustomerContactSerializer(serializers.Serializer):
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    house_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    apartment = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    floor = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=2, required=False, allow_blank=True, default='')


class ClientTotalsSerializer(serializers.Serializer):
    """Totals computed by the storefront; logged when they disagree with the server"""
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    shipping = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    total = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class OrderCreateSerializer(serializers.Serializer):
    """Serializer for the checkout 'create order' call"""
    store_id = serializers.IntegerField(required=False)
    store_slug = serializers.SlugField(required=False)
    items = CartItemSerializer(many=True, allow_empty=True)
    customer = CustomerContactSerializer()
    shipping_address = AddressSerializer(required=False)
    billing_address = AddressSerializer(required=False)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    shipping = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    credit_to_apply = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    client_totals = ClientTotalsSerializer(required=False)
    discount_details = serializers.ListField(child=serializers.DictField(), required=False)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    create_account = serializers.BooleanField(required=False, default=False)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, min_length=8)
    accepts_marketing = serializers.BooleanField(required=False, default=False)
    join_club = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get('store_id') and not attrs.get('store_slug'):
            raise serializers.ValidationError({'store_id': 'Store is missing'})
        if attrs.get('create_account') and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'Password is required to create an account'})
        return attrs


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for order items"""

    class Meta:
        model = OrderItem
        fields = [
            'id', 'product', 'variant', 'name', 'variant_title', 'sku',
            'price', 'quantity', 'total', 'properties'
        ]


class OrderDiscountSerializer(serializers.ModelSerializer):
    """Serializer for order discounts"""

    class Meta:
        model = OrderDiscount
        fields = [
            'discount_type', 'code', 'discount_amount', 'description', 'discount_details'
        ]


class OrderSerializer(serializers.ModelSerializer):
    """Full order for store staff"""

    items = OrderItemSerializer(many=True, read_only=True)
    discounts = OrderDiscountSerializer(many=True, read_only=True)
    payments = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'store', 'customer', 'order_number', 'status', 'financial_status',
            'fulfillment_status', 'currency', 'subtotal', 'discount_amount', 'discount_code',
            'discount_details', 'gift_card_amount', 'credit_used', 'shipping', 'tax', 'total',
            'client_totals', 'customer_email', 'customer_name', 'customer_phone',
            'shipping_address', 'billing_address', 'address_line', 'note',
            'paid_at', 'created_at', 'items', 'discounts', 'payments'
        ]
        read_only_fields = fields

    def get_payments(self, obj):
        from apps.payments.serializers import PaymentTransactionSerializer
        return PaymentTransactionSerializer(obj.payment_transactions.all(), many=True).data

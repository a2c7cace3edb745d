import uuid
from decimal import Decimal
from django.db import models


class Order(models.Model):
    """Order header. Totals are server-computed; contact and address are snapshots."""

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    FINANCIAL_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('partially_refunded', 'Partially Refunded'),
        ('refunded', 'Refunded'),
        ('voided', 'Voided'),
    ]

    FULFILLMENT_STATUS_CHOICES = [
        ('unfulfilled', 'Unfulfilled'),
        ('partial', 'Partially Fulfilled'),
        ('fulfilled', 'Fulfilled'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey('common.Store', on_delete=models.PROTECT, related_name='orders')
    customer = models.ForeignKey('customers.Customer', null=True, blank=True, on_delete=models.SET_NULL,
                                 related_name='orders')
    order_number = models.PositiveIntegerField(help_text="Sequential per store")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    financial_status = models.CharField(max_length=20, choices=FINANCIAL_STATUS_CHOICES, default='pending')
    fulfillment_status = models.CharField(max_length=20, choices=FULFILLMENT_STATUS_CHOICES, default='unfulfilled')

    # Money
    currency = models.CharField(max_length=3, default='ILS')
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, help_text="Catalog price x quantity")
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
                                          help_text="Automatic + coupon + gift card")
    discount_code = models.CharField(max_length=50, blank=True, default='')
    discount_details = models.JSONField(default=list, help_text="Itemized discount breakdown")
    gift_card_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    credit_used = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    shipping = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
                                   help_text="Shipping charged after free-shipping coupons")
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Client-submitted figures, kept for anomaly review only
    client_totals = models.JSONField(default=dict, blank=True)

    # Snapshots
    customer_email = models.EmailField()
    customer_name = models.CharField(max_length=200, blank=True, default='')
    customer_phone = models.CharField(max_length=30, blank=True, default='')
    shipping_address = models.JSONField(default=dict, blank=True)
    billing_address = models.JSONField(default=dict, blank=True)
    address_line = models.CharField(max_length=500, blank=True, default='', help_text="Display form of shipping address")
    note = models.TextField(blank=True, default='')

    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['store', 'order_number'], name='orders_store_number_uniq'),
        ]
        indexes = [
            models.Index(fields=['store', 'financial_status']),
            models.Index(fields=['customer']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return f"Order #{self.order_number} ({self.store_id})"

    @property
    def is_paid(self):
        return self.financial_status == 'paid'

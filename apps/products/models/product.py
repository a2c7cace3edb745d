import uuid
from django.db import models


class Product(models.Model):
    """Catalog product; its price is the only price checkout trusts"""

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('draft', 'Draft'),
        ('archived', 'Archived'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=100, blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')

    # Inventory
    track_inventory = models.BooleanField(default=True, help_text="Untracked products are never stock-checked")
    inventory = models.IntegerField(null=True, blank=True, help_text="Stock quantity (null when untracked)")

    # Purchasing a gift-card product issues a card per unit after payment
    is_gift_card = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['store', 'status']),
        ]

    def __str__(self):
        return f"{self.name} (id: {self.id})"

    @property
    def is_active(self):
        return self.status == 'active'


class ProductVariant(models.Model):
    """Purchasable option of a product; overrides price and stock when set"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    title = models.CharField(max_length=200, help_text="e.g. 'Red / XL'")
    sku = models.CharField(max_length=100, blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
                                help_text="Falls back to product price when empty")
    inventory = models.IntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'product_variants'
        indexes = [
            models.Index(fields=['product']),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.title}"

    @property
    def effective_price(self):
        return self.price if self.price is not None else self.product.price

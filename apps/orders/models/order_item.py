from django.db import models


class OrderItem(models.Model):
    """Order line; name, title and price are captured at creation time"""

    order = models.ForeignKey('Order', on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('products.Product', null=True, blank=True, on_delete=models.SET_NULL,
                                related_name='order_items')
    variant = models.ForeignKey('products.ProductVariant', null=True, blank=True, on_delete=models.SET_NULL,
                                related_name='order_items')
    name = models.CharField(max_length=200)
    variant_title = models.CharField(max_length=200, blank=True, default='')
    sku = models.CharField(max_length=100, blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2, help_text="Unit price")
    quantity = models.PositiveIntegerField()
    total = models.DecimalField(max_digits=10, decimal_places=2, help_text="Line total (quantity * price)")
    is_gift_card = models.BooleanField(default=False)

    # Add-ons, bundle components, gift card recipient; stored as given
    properties = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_items'
        indexes = [
            models.Index(fields=['order']),
            models.Index(fields=['product']),
        ]

    def __str__(self):
        return f"{self.name} x{self.quantity}"

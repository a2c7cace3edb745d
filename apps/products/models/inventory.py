from django.db import models


class InventoryLog(models.Model):
    """Audit row for every stock movement"""

    REASON_CHOICES = [
        ('order', 'Order'),
        ('restock', 'Restock'),
        ('adjustment', 'Manual Adjustment'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='inventory_logs')
    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='inventory_logs')
    variant = models.ForeignKey('products.ProductVariant', null=True, blank=True, on_delete=models.CASCADE,
                                related_name='inventory_logs')
    order = models.ForeignKey('orders.Order', null=True, blank=True, on_delete=models.SET_NULL,
                              related_name='inventory_logs')
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    change_amount = models.IntegerField(help_text="Applied change; smaller than requested when clamped at zero")
    reason = models.CharField(max_length=20, choices=REASON_CHOICES, default='order')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'inventory_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'created_at']),
        ]


class StockAlert(models.Model):
    """Low or depleted stock noticed after a paid order"""

    ALERT_TYPES = [
        ('low_stock', 'Low Stock'),
        ('out_of_stock', 'Out of Stock'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='stock_alerts')
    product = models.ForeignKey('products.Product', on_delete=models.CASCADE, related_name='stock_alerts')
    variant = models.ForeignKey('products.ProductVariant', null=True, blank=True, on_delete=models.CASCADE)
    order = models.ForeignKey('orders.Order', null=True, blank=True, on_delete=models.SET_NULL)
    alert_type = models.CharField(max_length=20, choices=ALERT_TYPES)
    inventory = models.IntegerField()
    threshold = models.IntegerField()
    is_resolved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_alerts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['store', 'is_resolved']),
        ]

    def __str__(self):
        return f"{self.get_alert_type_display()}: {self.product_id} ({self.inventory})"

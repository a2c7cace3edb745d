from django.db import models


class OrderDiscount(models.Model):
    """One applied discount on an order"""

    DISCOUNT_TYPE_CHOICES = [
        ('automatic', 'Automatic Discount'),
        ('coupon', 'Coupon'),
        ('gift_card', 'Gift Card'),
        ('free_shipping', 'Free Shipping'),
    ]

    order = models.ForeignKey('Order', on_delete=models.CASCADE, related_name='discounts')
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES)
    code = models.CharField(max_length=50, blank=True, default='')
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.CharField(max_length=200, help_text="Discount description")

    # Source row id, type and value at the time of the order
    discount_details = models.JSONField(default=dict, help_text="Additional discount information")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_discounts'
        indexes = [
            models.Index(fields=['order']),
            models.Index(fields=['discount_type']),
        ]

    def __str__(self):
        return f"Discount {self.discount_type} - {self.discount_amount}"

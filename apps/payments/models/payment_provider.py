from decimal import Decimal
from django.db import models


class PaymentProvider(models.Model):
    """Store-level configuration of an external payment processor"""

    PROVIDER_CHOICES = [
        ('quick_payments', 'Quick Payments'),
        ('sandbox', 'Sandbox'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='payment_providers')
    provider = models.CharField(max_length=50, choices=PROVIDER_CHOICES)
    display_name = models.CharField(max_length=100, blank=True, default='')
    is_active = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)

    # test_mode short-circuits provider calls with synthetic approvals
    test_mode = models.BooleanField(default=False)
    credentials = models.JSONField(default=dict, blank=True, help_text="e.g. {'seller_id': ...}")
    settings = models.JSONField(default=dict, blank=True, help_text="e.g. {'minimum_amount': '5.00'}")

    # Only approved transactions are counted
    total_transactions = models.PositiveIntegerField(default=0)
    total_volume = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payment_providers'
        ordering = ['-is_default', 'id']
        constraints = [
            models.UniqueConstraint(fields=['store', 'provider'], name='payment_providers_store_provider_uniq'),
        ]

    def __str__(self):
        return f"{self.get_provider_display()} ({self.store_id})"

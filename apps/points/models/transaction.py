from django.db import models


class PointsTransaction(models.Model):
    """Individual points transactions"""
    TRANSACTION_TYPES = [
        ('earning', 'Points Earned'),
        ('redemption', 'Points Redeemed'),
        ('expiration', 'Points Expired'),
        ('adjustment', 'Manual Adjustment'),
    ]

    account = models.ForeignKey('PointsAccount', on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    amount = models.IntegerField()  # Positive for earning, negative for spending/expiration
    balance_after = models.IntegerField()
    description = models.CharField(max_length=200, blank=True)
    reference_id = models.CharField(max_length=100, blank=True, null=True)  # e.g. order_<id>
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'points_transactions'
        ordering = ['-created_at']
        verbose_name = 'Points Transaction'
        verbose_name_plural = 'Points Transactions'
        indexes = [
            models.Index(fields=['account', 'reference_id']),
        ]

    def __str__(self):
        return f"{self.account.customer.email} - {self.amount} points ({self.get_transaction_type_display()})"

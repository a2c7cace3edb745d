from django.db import models


class CreditTransaction(models.Model):
    """Append-only store-credit ledger entry"""

    TRANSACTION_TYPES = [
        ('credit', 'Credit'),
        ('debit', 'Debit'),
        ('refund', 'Refund'),
        ('adjustment', 'Manual Adjustment'),
    ]

    customer = models.ForeignKey('customers.Customer', on_delete=models.CASCADE, related_name='credit_transactions')
    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='credit_transactions')
    order = models.ForeignKey(
        'orders.Order',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='credit_transactions',
    )
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text="Signed: negative for debits")
    balance_after = models.DecimalField(max_digits=10, decimal_places=2, help_text="Customer balance after this entry")
    reason = models.CharField(max_length=200, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'customer_credit_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['customer', 'created_at']),
        ]

    def __str__(self):
        return f"{self.customer_id} {self.transaction_type} {self.amount}"

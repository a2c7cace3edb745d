from django.db import models
from django.utils import timezone


class GiftCard(models.Model):
    """Stored-value card; current_balance never goes negative"""

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('used', 'Used'),
        ('expired', 'Expired'),
        ('disabled', 'Disabled'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='gift_cards')
    code = models.CharField(max_length=32, help_text="Stored upper-case, e.g. ABCD-EFGH-JKLM-NPQR")
    initial_balance = models.DecimalField(max_digits=10, decimal_places=2)
    current_balance = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='ILS')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    recipient_email = models.EmailField(blank=True, default='')
    purchased_by_email = models.EmailField(blank=True, default='')
    source_order = models.ForeignKey('orders.Order', null=True, blank=True, on_delete=models.SET_NULL,
                                     related_name='issued_gift_cards')
    expires_at = models.DateTimeField(null=True, blank=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'gift_cards'
        constraints = [
            models.UniqueConstraint(fields=['store', 'code'], name='gift_cards_store_code_uniq'),
        ]
        indexes = [
            models.Index(fields=['store', 'code']),
        ]

    def __str__(self):
        return f"{self.code} ({self.current_balance}/{self.initial_balance})"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at < timezone.now()


class GiftCardTransaction(models.Model):
    """Append-only gift-card ledger entry"""

    TRANSACTION_TYPES = [
        ('issue', 'Issue'),
        ('redemption', 'Redemption'),
        ('refund', 'Refund'),
        ('adjustment', 'Manual Adjustment'),
    ]

    gift_card = models.ForeignKey(GiftCard, on_delete=models.CASCADE, related_name='transactions')
    order = models.ForeignKey('orders.Order', null=True, blank=True, on_delete=models.SET_NULL,
                              related_name='gift_card_transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text="Signed: negative for redemptions")
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    note = models.CharField(max_length=200, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'gift_card_transactions'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.gift_card_id} {self.transaction_type} {self.amount}"

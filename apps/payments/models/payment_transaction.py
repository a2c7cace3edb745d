from django.db import models
from django.utils import timezone
import uuid


class PaymentTransaction(models.Model):
    """One provider interaction (charge attempt or refund) for an order"""

    STATUS_CHOICES = [
        ('initiated', 'Initiated'),
        ('requires_3ds', 'Requires 3-D Secure'),
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('declined', 'Declined'),
        ('error', 'Error'),
        ('refunded', 'Refunded'),
    ]

    TERMINAL_STATUSES = ('approved', 'declined', 'refunded')

    # Statuses a transaction may still leave, and where to
    TRANSITIONS = {
        'initiated': {'requires_3ds', 'pending', 'approved', 'declined', 'error', 'refunded'},
        'requires_3ds': {'pending', 'approved', 'declined', 'error'},
        'pending': {'requires_3ds', 'approved', 'declined', 'error'},
        'error': {'pending', 'approved', 'declined'},
        'approved': {'refunded'},
        'declined': set(),
        'refunded': set(),
    }

    TYPE_CHOICES = [
        ('charge', 'Charge'),
        ('refund', 'Refund'),
    ]

    transaction_id = models.CharField(max_length=100, unique=True, help_text="Internal transaction ID")
    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='payment_transactions')
    order = models.ForeignKey('orders.Order', null=True, blank=True, on_delete=models.SET_NULL,
                              related_name='payment_transactions')
    provider_config = models.ForeignKey('PaymentProvider', null=True, blank=True, on_delete=models.SET_NULL,
                                        related_name='transactions')
    provider = models.CharField(max_length=50)
    transaction_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='charge')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='initiated')

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='ILS')

    # Provider identifiers; provider_transaction_id is the idempotency key for callbacks
    provider_transaction_id = models.CharField(max_length=200, null=True, blank=True, unique=True)
    provider_approval_num = models.CharField(max_length=100, blank=True, default='')
    redirect_url = models.URLField(max_length=1000, blank=True, default='')

    card_brand = models.CharField(max_length=30, blank=True, default='')
    card_last_four = models.CharField(max_length=4, blank=True, default='')

    provider_response = models.JSONField(default=dict, blank=True)
    callback_data = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    error_code = models.CharField(max_length=50, blank=True, default='')
    error_message = models.TextField(blank=True, default='')

    processed_at = models.DateTimeField(null=True, blank=True, help_text="When the transaction settled")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payment_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['order']),
            models.Index(fields=['status']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return f"Payment {self.transaction_id} - {self.status}"

    def save(self, *args, **kwargs):
        if not self.transaction_id:
            self.transaction_id = f"pay_{uuid.uuid4().hex[:16]}"
        if self.status in self.TERMINAL_STATUSES and not self.processed_at:
            self.processed_at = timezone.now()
        super().save(*args, **kwargs)

    def can_transition_to(self, status):
        return status in self.TRANSITIONS.get(self.status, set())

from decimal import Decimal
from django.contrib.auth.hashers import check_password, make_password
from django.db import models


class Customer(models.Model):
    """Storefront buyer, unique per (store, email)"""

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='customers')
    email = models.EmailField(help_text="Normalized (lower-case) email")
    first_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')

    # Optional storefront account credential (hashed)
    password_hash = models.CharField(max_length=256, blank=True, default='')
    accepts_marketing = models.BooleanField(default=False)

    # Live store-credit balance; CreditTransaction rows are its audit trail
    credit_balance = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    # Lifetime aggregates
    total_orders = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    default_address = models.JSONField(default=dict, blank=True, help_text="Last used structured address")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['store', 'email'], name='customers_store_email_uniq'),
        ]
        indexes = [
            models.Index(fields=['store', 'email']),
        ]

    def __str__(self):
        return f"{self.full_name or self.email} ({self.store_id})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_account(self):
        return bool(self.password_hash)

    def set_password(self, raw_password):
        self.password_hash = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password_hash:
            return False
        return check_password(raw_password, self.password_hash)

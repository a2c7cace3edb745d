from django.db import models
from django.utils import timezone


class ActiveWindowMixin(models.Model):
    """Activity flag plus optional [starts_at, ends_at] window"""

    is_active = models.BooleanField(default=True)
    starts_at = models.DateTimeField(null=True, blank=True, help_text="Null means no lower bound")
    ends_at = models.DateTimeField(null=True, blank=True, help_text="Null means no upper bound")

    class Meta:
        abstract = True

    def is_live(self, now=None):
        now = now or timezone.now()
        if not self.is_active:
            return False
        if self.starts_at and self.starts_at > now:
            return False
        if self.ends_at and self.ends_at < now:
            return False
        return True


class Discount(ActiveWindowMixin):
    """Code-activated coupon"""

    TYPE_CHOICES = [
        ('percentage', 'Percentage'),
        ('fixed_amount', 'Fixed Amount'),
        ('free_shipping', 'Free Shipping'),
        ('buy_x_get_y', 'Buy X Get Y'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='discounts')
    code = models.CharField(max_length=50, help_text="Stored upper-case")
    title = models.CharField(max_length=200, blank=True, default='')
    discount_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    value = models.DecimalField(max_digits=10, decimal_places=2, default=0,
                                help_text="Percent for percentage coupons, amount for fixed coupons")
    minimum_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
                                         help_text="Checked against the catalog subtotal")

    # usage_count never exceeds usage_limit; see CouponService.try_increment_usage
    usage_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Null means unlimited")
    usage_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'discounts'
        constraints = [
            models.UniqueConstraint(fields=['store', 'code'], name='discounts_store_code_uniq'),
        ]
        indexes = [
            models.Index(fields=['store', 'code']),
        ]

    def __str__(self):
        return f"{self.code} ({self.discount_type} {self.value})"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_exhausted(self):
        return self.usage_limit is not None and self.usage_count >= self.usage_limit


class AutomaticDiscount(ActiveWindowMixin):
    """Storewide rule applied without a code"""

    TYPE_CHOICES = [
        ('percentage', 'Percentage'),
        ('fixed_amount', 'Fixed Amount'),
    ]

    APPLIES_TO_CHOICES = [
        ('all', 'All Products'),
        ('category', 'Specific Categories'),
        ('product', 'Specific Products'),
    ]

    store = models.ForeignKey('common.Store', on_delete=models.CASCADE, related_name='automatic_discounts')
    name = models.CharField(max_length=200)
    discount_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    applies_to = models.CharField(max_length=20, choices=APPLIES_TO_CHOICES, default='all')
    priority = models.IntegerField(default=0, help_text="Higher priority is evaluated first")
    minimum_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    minimum_quantity = models.PositiveIntegerField(null=True, blank=True)
    usage_count = models.PositiveIntegerField(default=0, help_text="Paid orders this discount was applied to")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'automatic_discounts'
        ordering = ['-priority', 'id']
        indexes = [
            models.Index(fields=['store', 'is_active']),
        ]

    def __str__(self):
        return f"{self.name} ({self.discount_type} {self.value})"

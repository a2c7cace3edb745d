"""
Store (tenant) model.

Every checkout resource is scoped to a store; the store also owns the
sequential order counter.
"""
from django.conf import settings
from django.db import models


def default_order_counter():
    return settings.ORDER_COUNTER_START


def default_points_per_unit():
    return settings.LOYALTY_POINTS_PER_UNIT


class Store(models.Model):
    """A storefront tenant"""

    name = models.CharField(max_length=200, help_text="Store display name")
    slug = models.SlugField(max_length=100, unique=True, help_text="Public store identifier used in URLs")
    email = models.EmailField(blank=True, default='', help_text="Contact/sender address for store emails")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='stores',
        help_text="Staff user managing this store",
    )
    currency = models.CharField(max_length=3, default='ILS', help_text="ISO currency code")

    # Last allocated order number; incremented atomically per order
    order_counter = models.PositiveIntegerField(
        default=default_order_counter,
        help_text="Last allocated order number",
    )

    points_per_unit = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=default_points_per_unit,
        help_text="Loyalty points earned per currency unit spent",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        verbose_name = 'Store'
        verbose_name_plural = 'Stores'
        indexes = [
            models.Index(fields=['slug']),
            models.Index(fields=['is_active']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.slug})"

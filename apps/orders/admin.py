from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from .models import Order, OrderItem, OrderDiscount


class OrderItemInline(admin.TabularInline):
    """Inline admin for order items"""
    model = OrderItem
    extra = 0
    readonly_fields = ['total']
    fields = ['name', 'variant_title', 'sku', 'quantity', 'price', 'total', 'is_gift_card']


class OrderDiscountInline(admin.TabularInline):
    """Inline admin for order discounts"""
    model = OrderDiscount
    extra = 0
    readonly_fields = ['created_at']
    fields = ['discount_type', 'code', 'discount_amount', 'description']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'order_number', 'store', 'customer_link', 'total', 'currency',
        'status', 'financial_status', 'created_at', 'paid_at'
    ]
    list_filter = ['status', 'financial_status', 'fulfillment_status', 'store', 'created_at']
    search_fields = ['order_number', 'customer_email', 'customer_name', 'discount_code']
    readonly_fields = ['id', 'order_number', 'created_at', 'updated_at', 'paid_at']
    ordering = ['-created_at']
    inlines = [OrderItemInline, OrderDiscountInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'store', 'order_number', 'customer', 'status', 'financial_status',
                       'fulfillment_status')
        }),
        ('Amounts', {
            'fields': ('currency', 'subtotal', 'discount_amount', 'discount_code', 'gift_card_amount',
                       'credit_used', 'shipping', 'tax', 'total')
        }),
        ('Customer', {
            'fields': ('customer_email', 'customer_name', 'customer_phone', 'address_line', 'note')
        }),
        ('Additional Data', {
            'fields': ('discount_details', 'client_totals', 'shipping_address', 'billing_address'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'paid_at'),
            'classes': ('collapse',)
        }),
    )

    def customer_link(self, obj):
        if obj.customer_id:
            url = reverse('admin:customers_customer_change', args=[obj.customer_id])
            return format_html('<a href="{}">{}</a>', url, obj.customer_email)
        return obj.customer_email
    customer_link.short_description = 'Customer'

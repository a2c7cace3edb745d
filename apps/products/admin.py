from django.contrib import admin
from .models import Product, ProductVariant, InventoryLog, StockAlert


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ['title', 'sku', 'price', 'inventory', 'is_active']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'store', 'sku', 'price', 'status', 'track_inventory', 'inventory', 'is_gift_card']
    list_filter = ['status', 'track_inventory', 'is_gift_card', 'store']
    search_fields = ['name', 'sku']
    inlines = [ProductVariantInline]


@admin.register(InventoryLog)
class InventoryLogAdmin(admin.ModelAdmin):
    list_display = ['product', 'variant', 'order', 'previous_quantity', 'new_quantity',
                    'change_amount', 'reason', 'created_at']
    list_filter = ['reason', 'store', 'created_at']
    search_fields = ['product__name', 'product__sku']
    readonly_fields = ['created_at']

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(StockAlert)
class StockAlertAdmin(admin.ModelAdmin):
    list_display = ['product', 'variant', 'alert_type', 'inventory', 'threshold', 'is_resolved', 'created_at']
    list_filter = ['alert_type', 'is_resolved', 'store']
    search_fields = ['product__name']

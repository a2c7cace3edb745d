from django.contrib import admin
from .models import Discount, AutomaticDiscount, GiftCard, GiftCardTransaction


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ['code', 'store', 'discount_type', 'value', 'usage_count', 'usage_limit',
                    'is_active', 'starts_at', 'ends_at']
    list_filter = ['discount_type', 'is_active', 'store']
    search_fields = ['code', 'title']
    readonly_fields = ['usage_count']


@admin.register(AutomaticDiscount)
class AutomaticDiscountAdmin(admin.ModelAdmin):
    list_display = ['name', 'store', 'discount_type', 'value', 'priority', 'usage_count', 'is_active']
    list_filter = ['discount_type', 'is_active', 'store']
    search_fields = ['name']
    readonly_fields = ['usage_count']


class GiftCardTransactionInline(admin.TabularInline):
    model = GiftCardTransaction
    extra = 0
    readonly_fields = ['transaction_type', 'amount', 'balance_after', 'order', 'note', 'created_at']
    can_delete = False


@admin.register(GiftCard)
class GiftCardAdmin(admin.ModelAdmin):
    list_display = ['code', 'store', 'initial_balance', 'current_balance', 'status', 'expires_at']
    list_filter = ['status', 'store']
    search_fields = ['code', 'recipient_email', 'purchased_by_email']
    readonly_fields = ['current_balance', 'last_used_at', 'created_at']
    inlines = [GiftCardTransactionInline]

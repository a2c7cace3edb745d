from django.contrib import admin
from .models import PointsAccount, PointsTransaction


@admin.register(PointsAccount)
class PointsAccountAdmin(admin.ModelAdmin):
    list_display = ['customer', 'available_points', 'total_points', 'lifetime_earned', 'created_at']
    list_filter = ['created_at', 'updated_at']
    search_fields = ['customer__email', 'customer__phone']
    readonly_fields = ['total_points', 'lifetime_earned', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False  # Points accounts are created automatically


@admin.register(PointsTransaction)
class PointsTransactionAdmin(admin.ModelAdmin):
    list_display = ['account', 'transaction_type', 'amount', 'balance_after', 'reference_id', 'created_at']
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['account__customer__email', 'reference_id', 'description']
    readonly_fields = ['created_at']

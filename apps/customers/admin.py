from django.contrib import admin
from .models import Customer, CreditTransaction


class CreditTransactionInline(admin.TabularInline):
    model = CreditTransaction
    extra = 0
    readonly_fields = ['transaction_type', 'amount', 'balance_after', 'reason', 'order', 'created_at']
    can_delete = False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['email', 'store', 'first_name', 'last_name', 'credit_balance',
                    'total_orders', 'total_spent', 'created_at']
    list_filter = ['store', 'accepts_marketing']
    search_fields = ['email', 'first_name', 'last_name', 'phone']
    readonly_fields = ['credit_balance', 'total_orders', 'total_spent', 'created_at', 'updated_at']
    exclude = ['password_hash']
    inlines = [CreditTransactionInline]

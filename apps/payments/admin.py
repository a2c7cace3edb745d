from django.contrib import admin
from .models import PaymentProvider, PaymentTransaction, PaymentCallback


@admin.register(PaymentProvider)
class PaymentProviderAdmin(admin.ModelAdmin):
    list_display = ['store', 'provider', 'display_name', 'is_active', 'test_mode',
                    'total_transactions', 'total_volume']
    list_filter = ['provider', 'is_active', 'test_mode']
    search_fields = ['store__name', 'store__slug', 'display_name']
    readonly_fields = ['total_transactions', 'total_volume', 'created_at', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('store', 'provider', 'display_name', 'is_active', 'is_default', 'test_mode')
        }),
        ('Configuration', {
            'fields': ('credentials', 'settings'),
            'classes': ('collapse',)
        }),
        ('Statistics', {
            'fields': ('total_transactions', 'total_volume', 'created_at', 'updated_at'),
        }),
    )


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = [
        'transaction_id', 'order', 'store', 'provider',
        'amount', 'currency', 'status', 'created_at', 'processed_at'
    ]
    list_filter = ['status', 'provider', 'transaction_type', 'created_at']
    search_fields = ['transaction_id', 'provider_transaction_id', 'order__customer_email']
    readonly_fields = ['transaction_id', 'created_at', 'updated_at', 'processed_at']
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('transaction_id', 'store', 'order', 'provider_config', 'provider', 'transaction_type')
        }),
        ('Payment Details', {
            'fields': ('amount', 'currency', 'status', 'card_brand', 'card_last_four',
                       'created_at', 'processed_at')
        }),
        ('Provider', {
            'fields': ('provider_transaction_id', 'provider_approval_num', 'redirect_url'),
            'classes': ('collapse',)
        }),
        ('Additional Data', {
            'fields': ('provider_response', 'callback_data', 'metadata'),
            'classes': ('collapse',)
        }),
        ('Error Information', {
            'fields': ('error_code', 'error_message'),
            'classes': ('collapse',)
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        if obj:  # Editing existing object
            return self.readonly_fields + ['store', 'order', 'amount', 'provider_transaction_id']
        return self.readonly_fields


@admin.register(PaymentCallback)
class PaymentCallbackAdmin(admin.ModelAdmin):
    list_display = [
        'provider', 'transaction_id', 'processed', 'duplicate',
        'response_status', 'received_at'
    ]
    list_filter = ['provider', 'processed', 'duplicate', 'response_status', 'received_at']
    search_fields = ['transaction_id', 'request_path']
    readonly_fields = ['received_at']
    ordering = ['-received_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('provider', 'transaction_id')
        }),
        ('Request Details', {
            'fields': ('request_method', 'request_path', 'request_ip'),
        }),
        ('Processing', {
            'fields': ('processed', 'duplicate', 'processing_error', 'response_status'),
        }),
        ('Request Data', {
            'fields': ('request_headers', 'request_body'),
            'classes': ('collapse',)
        }),
        ('Response Data', {
            'fields': ('response_body',),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        # Created by the callback endpoint only
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser

from django.contrib import admin
from .models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'owner', 'currency', 'order_counter', 'is_active', 'created_at']
    list_filter = ['is_active', 'currency']
    search_fields = ['name', 'slug', 'email']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['order_counter', 'created_at', 'updated_at']

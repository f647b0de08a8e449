"""
Django Admin configuration for Exchange app.
Rates saved here go through the rate store and are recorded as manual overrides.
"""

from django.contrib import admin
from django.utils.html import format_html

from apps.exchange.application.factories import get_rate_store
from apps.exchange.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
)

METADATA = ('Metadata', {
    'fields': ('id', 'created_at', 'updated_at'),
    'classes': ('collapse',)
})


def _badge(color: str, label: str, bold: bool = False):
    weight = ' font-weight: bold;' if bold else ''
    return format_html('<span style="color: {};{}">{}</span>', color, weight, label)


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):

    list_display = ('code', 'name', 'symbol', 'has_rate')
    search_fields = ('code', 'name')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('code',)
    fieldsets = ((None, {'fields': ('code', 'name', 'symbol')}), METADATA)

    @admin.display(boolean=True, description='Rate stored')
    def has_rate(self, obj):
        return CurrencyExchangeRate.objects.filter(currency_code=obj.code).exists()


@admin.register(CurrencyExchangeRate)
class CurrencyExchangeRateAdmin(admin.ModelAdmin):

    list_display = ('currency_code', 'rate', 'get_origin', 'last_updated')
    list_filter = ('is_manual',)
    search_fields = ('currency_code',)
    readonly_fields = ('id', 'last_updated', 'is_manual', 'created_at', 'updated_at')
    ordering = ('currency_code',)
    actions = ['clear_manual_overrides']
    fieldsets = ((None, {'fields': ('currency_code', 'rate', 'is_manual', 'last_updated')}), METADATA)

    @admin.display(description='Origin')
    def get_origin(self, obj):
        if obj.is_manual:
            return _badge('orange', '● Manual', bold=True)
        return _badge('green', '○ Automatic')

    def save_model(self, request, obj, form, change):
        rate = get_rate_store().set_rate(obj.currency_code, obj.rate, is_manual=True)
        stored = CurrencyExchangeRate.objects.get(currency_code=rate.currency_code)
        obj.id = stored.id
        obj.refresh_from_db()

    @admin.action(description='Clear manual override for selected rates')
    def clear_manual_overrides(self, request, queryset):
        store = get_rate_store()
        codes = list(queryset.filter(is_manual=True).values_list('currency_code', flat=True))
        for code in codes:
            store.clear_manual_override(code)
        self.message_user(request, f'{len(codes)} rate(s) handed back to automatic sync.')


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    """Sync order follows `priority`; only active providers are tried."""

    list_display = ('name', 'priority', 'get_status')
    list_editable = ('priority',)
    list_filter = ('is_active',)
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('priority',)
    actions = ['activate_providers', 'deactivate_providers']
    fieldsets = ((None, {'fields': ('name', 'priority', 'is_active')}), METADATA)

    @admin.display(description='Status')
    def get_status(self, obj):
        if obj.is_active:
            return _badge('green', '● Active', bold=True)
        return _badge('red', '○ Inactive')

    def _set_active(self, request, queryset, is_active: bool):
        updated = queryset.update(is_active=is_active)
        state = 'activated' if is_active else 'deactivated'
        self.message_user(request, f'{updated} provider(s) {state}.')

    @admin.action(description='Activate selected providers')
    def activate_providers(self, request, queryset):
        self._set_active(request, queryset, True)

    @admin.action(description='Deactivate selected providers')
    def deactivate_providers(self, request, queryset):
        self._set_active(request, queryset, False)

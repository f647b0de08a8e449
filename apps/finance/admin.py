"""
Django Admin configuration for the finance ledger.
Base currency amounts are computed at write time and shown read-only.
"""

from django.contrib import admin

from apps.finance.application.use_cases import ConvertingUseCase
from apps.finance.infrastructure.persistence.models import (
    Expense,
    Income,
    Investment,
    Notification,
    Saving,
)

METADATA = ('Metadata', {
    'fields': ('id', 'created_at', 'updated_at'),
    'classes': ('collapse',)
})


class ConvertedRecordAdmin(admin.ModelAdmin):
    """Recomputes the base currency amount on every save."""

    readonly_fields = ('id', 'amount_in_base', 'base_currency', 'created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        for field_name, value in ConvertingUseCase().normalize_amount(obj.amount, obj.currency).items():
            setattr(obj, field_name, value)
        super().save_model(request, obj, form, change)


@admin.register(Income)
class IncomeAdmin(ConvertedRecordAdmin):

    list_display = ('source_name', 'user', 'amount', 'currency', 'amount_in_base', 'recurrence', 'is_active')
    list_filter = ('recurrence', 'is_active', 'currency')
    search_fields = ('source_name', 'user__username')


@admin.register(Expense)
class ExpenseAdmin(ConvertedRecordAdmin):

    list_display = ('expense_date', 'user', 'category', 'amount', 'currency', 'amount_in_base')
    list_filter = ('category', 'is_recurring', 'currency')
    search_fields = ('description', 'user__username')
    date_hierarchy = 'expense_date'


@admin.register(Saving)
class SavingAdmin(ConvertedRecordAdmin):

    list_display = ('saving_date', 'user', 'saving_type', 'goal_name', 'amount', 'currency', 'amount_in_base')
    list_filter = ('saving_type', 'currency')
    search_fields = ('goal_name', 'notes', 'user__username')


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):

    list_display = ('asset_name', 'user', 'asset_type', 'symbol', 'quantity', 'current_value', 'currency', 'status')
    list_filter = ('asset_type', 'status', 'currency')
    search_fields = ('asset_name', 'symbol', 'user__username')
    readonly_fields = ('id', 'last_price_update', 'created_at', 'updated_at')

    fieldsets = (
        ('Asset', {
            'fields': ('user', 'asset_name', 'asset_type', 'symbol', 'notes')
        }),
        ('Position', {
            'fields': ('quantity', 'buy_price', 'current_value', 'currency', 'purchase_date', 'last_price_update')
        }),
        ('Closing', {
            'fields': ('status', 'sell_price', 'close_date')
        }),
        METADATA,
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):

    list_display = ('title', 'user', 'type', 'category', 'is_read', 'created_at')
    list_filter = ('type', 'category', 'is_read')
    search_fields = ('title', 'message', 'user__username')
    readonly_fields = ('id', 'created_at', 'updated_at')
    actions = ['mark_as_read']

    @admin.action(description='Mark selected notifications as read')
    def mark_as_read(self, request, queryset):
        updated = queryset.update(is_read=True)
        self.message_user(request, f'{updated} notification(s) marked as read.')

from django.contrib import admin
from .models import Expense, ExpenseSplit


class ExpenseSplitInline(admin.TabularInline):
    model = ExpenseSplit
    extra = 0
    fields = ['owed_by', 'amount', 'status', 'settled_at']
    readonly_fields = ['settled_at']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'household', 'paid_by', 'total_amount', 'category', 'date']
    list_filter = ['category', 'date']
    search_fields = ['description', 'paid_by__email', 'household__name']
    inlines = [ExpenseSplitInline]
    date_hierarchy = 'date'
    readonly_fields = ['created_at', 'updated_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('household', 'paid_by')


@admin.register(ExpenseSplit)
class ExpenseSplitAdmin(admin.ModelAdmin):
    list_display = ['expense', 'owed_by', 'amount', 'status', 'settled_at']
    list_filter = ['status']
    search_fields = ['owed_by__email', 'expense__description']
    readonly_fields = ['created_at', 'settled_at']

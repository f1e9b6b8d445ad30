# ==========================================
# apps/households/admin.py
# ==========================================

from django.contrib import admin
from apps.accounts.models import User
from apps.households.models import Household, RemovalRequest, RemovalVote


class MemberInline(admin.TabularInline):
    """Inline admin for household members."""
    model = User
    fk_name = 'household'
    extra = 0
    fields = ['email', 'display_name', 'role']
    readonly_fields = ['email', 'display_name']
    can_delete = False


class RemovalVoteInline(admin.TabularInline):
    model = RemovalVote
    extra = 0
    fields = ['user', 'vote', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Household)
class HouseholdAdmin(admin.ModelAdmin):
    """Admin interface for Households."""

    list_display = ['name', 'created_by', 'member_count', 'invite_code', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'created_by__email', 'invite_code']
    readonly_fields = ['invite_code', 'created_at', 'updated_at']
    inlines = [MemberInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def member_count(self, obj):
        return obj.members.count()
    member_count.short_description = 'Members'


@admin.register(RemovalRequest)
class RemovalRequestAdmin(admin.ModelAdmin):
    """Admin interface for Removal Requests."""

    list_display = ['target_user', 'household', 'requested_by', 'status', 'created_at', 'resolved_at']
    list_filter = ['status', 'created_at']
    search_fields = ['target_user__email', 'requested_by__email', 'household__name']
    readonly_fields = ['created_at', 'resolved_at']
    inlines = [RemovalVoteInline]
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('household', 'target_user', 'requested_by')

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, HouseholdRole


class HouseholdSeatFilter(admin.SimpleListFilter):
    title = 'household seat'
    parameter_name = 'seat'

    def lookups(self, request, model_admin):
        return (
            ('admin', 'Household admin'),
            ('member', 'Household member'),
            ('none', 'No household'),
        )

    def queryset(self, request, queryset):
        if self.value() == 'none':
            return queryset.filter(household__isnull=True)
        if self.value() in (HouseholdRole.ADMIN, HouseholdRole.MEMBER):
            return queryset.filter(household__isnull=False, role=self.value())
        return queryset


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Email-based user admin.

    Household and role are shown read-only: membership changes go through
    the households services so every household keeps exactly one admin.
    """

    list_display = ['email', 'display_name', 'household', 'seat', 'is_active', 'created_at']
    list_filter = [HouseholdSeatFilter, 'is_active', 'is_staff']
    list_select_related = ['household']
    search_fields = ['email', 'display_name', 'household__name', 'household__invite_code']
    ordering = ['email']

    fieldsets = (
        (None, {'fields': ('email', 'display_name', 'password')}),
        ('Household', {'fields': ('household', 'role')}),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Activity', {'fields': ('created_at', 'last_login')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )
    readonly_fields = ['household', 'role', 'created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']

    @admin.display(description='Seat', ordering='role')
    def seat(self, obj):
        if obj.household_id is None:
            return '-'
        colour = '#2e7d32' if obj.role == HouseholdRole.ADMIN else '#757575'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colour,
            obj.get_role_display(),
        )

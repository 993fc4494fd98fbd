from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, CustomerProfile, B2BAccount, ContractPricing


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for shop users (customers, staff, admins)."""

    list_display = [
        'email',
        'name',
        'role_badge',
        'is_active',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'role',
        'is_active',
        'is_staff',
        'is_superuser',
    ]

    search_fields = [
        'email',
        'name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'role', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser'),
        }),
    )

    readonly_fields = [
        'created_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def role_badge(self, obj):
        """Display role as colored badge."""
        colors = {
            'ADMIN': '#B85C5C',
            'STAFF': '#A47449',
            'CUSTOMER': '#6B8E5E',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.role, '#ccc'),
            obj.get_role_display(),
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'


class ContractPricingInline(admin.TabularInline):
    model = ContractPricing
    extra = 0
    fields = ['service', 'pricing_json', 'updated_at']
    readonly_fields = ['updated_at']


@admin.register(B2BAccount)
class B2BAccountAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'status', 'discount_pct', 'created_at']
    list_filter = ['status']
    search_fields = ['company_name']
    inlines = [ContractPricingInline]


@admin.register(CustomerProfile)
class CustomerProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'company_name', 'b2b_account']
    search_fields = ['user__email', 'company_name']
    list_select_related = ['user', 'b2b_account']

from django.contrib import admin
from .models import Service, Tier, ServiceOption, PricingRule


class ServiceOptionInline(admin.TabularInline):
    model = ServiceOption
    extra = 0
    fields = ['key', 'label', 'field_type', 'is_required', 'pricing_impact', 'sort_order']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [ServiceOptionInline]


@admin.register(Tier)
class TierAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'sort_order', 'is_active']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'rule_type', 'service', 'is_active', 'updated_at']
    list_filter = ['rule_type', 'is_active']
    search_fields = ['name', 'service__name']
    list_select_related = ['service']

from django.contrib import admin
from .models import Quote, QuoteAnswer


class QuoteAnswerInline(admin.TabularInline):
    model = QuoteAnswer
    extra = 0
    fields = ['option_key', 'value']


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ['quote_number', 'customer', 'service', 'tier', 'status', 'estimate_subtotal', 'updated_at']
    list_filter = ['status', 'service']
    search_fields = ['quote_number', 'customer__email']
    list_select_related = ['customer', 'service', 'tier']
    # Subtotal is owned by the estimator
    readonly_fields = ['quote_number', 'estimate_subtotal', 'created_at', 'updated_at']
    inlines = [QuoteAnswerInline]

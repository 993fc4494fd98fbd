from django.contrib import admin
from django.utils.html import format_html
from .models import Order, Payment, Invoice, PurchaseOrder, DocumentSequence


class PaymentInline(admin.TabularInline):
    model = Payment
    fk_name = 'order'
    extra = 0
    fields = ['payment_number', 'amount', 'method', 'status', 'refund_of', 'created_at']
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-mostly in the admin: balance_due is derived from
    payments and order_number comes from the numbering service.
    """

    list_display = ['order_number', 'customer', 'status', 'total_amount', 'balance_due', 'paid_badge', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'customer__email']
    list_select_related = ['customer']
    readonly_fields = ['order_number', 'subtotal', 'balance_due', 'created_at', 'updated_at']
    inlines = [PaymentInline]

    def paid_badge(self, obj):
        """Display payment status as colored badge."""
        if obj.is_fully_paid:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Paid</span>'
            )
        return format_html(
            '<span style="background: #E5C49A; color: #2C1810; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Outstanding</span>'
        )
    paid_badge.short_description = 'Paid'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['payment_number', 'order', 'amount', 'method', 'status', 'created_at']
    list_filter = ['status', 'method']
    search_fields = ['payment_number', 'order__order_number', 'transaction_ref']
    list_select_related = ['order']
    readonly_fields = ['payment_number', 'created_at', 'updated_at']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'order', 'total_amount', 'amount_due', 'issued_at', 'due_date']
    search_fields = ['invoice_number', 'order__order_number']
    list_select_related = ['order']
    readonly_fields = ['invoice_number']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['po_number', 'supplier_name', 'status', 'total_cost', 'created_at']
    list_filter = ['status']
    search_fields = ['po_number', 'supplier_name']
    readonly_fields = ['po_number']


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ['series', 'year', 'last_value', 'updated_at']
    list_filter = ['series', 'year']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

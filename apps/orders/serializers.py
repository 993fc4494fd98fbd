from rest_framework import serializers
from decimal import Decimal
from .models import Order, Payment, PaymentMethod, PaymentStatus, Invoice, PurchaseOrder
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class CreateOrderFromQuoteInputSerializer(serializers.Serializer):
    """
    Validate input for converting a quote into an order.

    Fields:
        quote_id (UUID): Quote to convert
        total_amount (Decimal): Optional total; defaults to the quote estimate
    """

    quote_id = serializers.UUIDField()
    total_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False
    )


class RecordPaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CARD)
    status = serializers.ChoiceField(
        choices=[
            (PaymentStatus.PENDING, 'Pending'),
            (PaymentStatus.COMPLETED, 'Completed'),
            (PaymentStatus.FAILED, 'Failed'),
        ],
        default=PaymentStatus.COMPLETED
    )
    transaction_ref = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class PaymentStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices)


class RefundInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False
    )
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    """Payment with refund link."""

    class Meta:
        model = Payment
        fields = [
            'id',
            'payment_number',
            'order',
            'amount',
            'method',
            'status',
            'transaction_ref',
            'refund_of',
            'refund_reason',
            'completed_at',
            'created_at',
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order details."""

    customer = UserMinimalSerializer(read_only=True)
    service_name = serializers.CharField(source='service.name', read_only=True)
    is_fully_paid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'quote',
            'customer',
            'service',
            'service_name',
            'tier',
            'status',
            'subtotal',
            'total_amount',
            'balance_due',
            'is_fully_paid',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Compact order for list views."""

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'status', 'total_amount', 'balance_due', 'created_at']
        read_only_fields = fields


class OrderBalanceSerializer(serializers.Serializer):
    order_number = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance_due = serializers.DecimalField(max_digits=12, decimal_places=2)


class InvoiceSerializer(serializers.ModelSerializer):

    order_number = serializers.CharField(source='order.order_number', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'order',
            'order_number',
            'total_amount',
            'amount_paid',
            'amount_due',
            'issued_at',
            'due_date',
            'paid_at',
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):

    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id',
            'po_number',
            'supplier_name',
            'status',
            'total_cost',
            'notes',
            'created_by',
            'created_at',
        ]
        read_only_fields = ['id', 'po_number', 'status', 'created_by', 'created_at']
        extra_kwargs = {
            'total_cost': {'min_value': Decimal('0.00')},
        }

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import secrets
import uuid


class DocumentSeries(models.TextChoices):
    ORDER = 'order', 'Order'
    INVOICE = 'invoice', 'Invoice'
    PURCHASE_ORDER = 'purchase_order', 'Purchase order'


class DocumentSequence(models.Model):
    """
    Per-(series, year) counter for human-readable document numbers.

    The row is locked with SELECT ... FOR UPDATE while a number is
    allocated, which serializes allocators in the same series and year.
    """

    series = models.CharField(max_length=20, choices=DocumentSeries.choices)
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'document_sequences'
        constraints = [
            models.UniqueConstraint(fields=['series', 'year'], name='uniq_document_sequence_series_year'),
        ]

    def __str__(self):
        return f"{self.series}/{self.year}: {self.last_value}"


class OrderStatus(models.TextChoices):
    DEPOSIT_PENDING = 'DEPOSIT_PENDING', 'Deposit pending'
    IN_PRODUCTION = 'IN_PRODUCTION', 'In production'
    READY = 'READY', 'Ready for pickup'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class Order(models.Model):
    """
    Binding order converted from a quote.

    ``balance_due`` is denormalized; after every payment mutation it equals
    total_amount - sum(COMPLETED) + sum(REFUNDED).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True, editable=False)

    quote = models.OneToOneField(
        'quotes.Quote',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='order'
    )
    customer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    service = models.ForeignKey(
        'catalog.Service',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    tier = models.ForeignKey(
        'catalog.Tier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.DEPOSIT_PENDING
    )

    # Financial details
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    balance_due = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['customer', 'status'], name='orders_customer_status_idx'),
            models.Index(fields=['created_at'], name='orders_created_at_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_number} - {self.total_amount} (due {self.balance_due})"

    @property
    def is_fully_paid(self):
        return self.balance_due <= Decimal('0.00')


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    REFUNDED = 'REFUNDED', 'Refunded'
    FAILED = 'FAILED', 'Failed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class PaymentMethod(models.TextChoices):
    CARD = 'CARD', 'Card'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank transfer'
    CASH = 'CASH', 'Cash'
    CHECK = 'CHECK', 'Check'


class Payment(models.Model):
    """
    Money received for (or returned on) an order.

    Only COMPLETED (adds) and REFUNDED (subtracts) rows move the ledger.
    A refund is its own REFUNDED row pointing at the refunded payment.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    payment_number = models.CharField(max_length=32, unique=True, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CARD
    )
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    transaction_ref = models.CharField(max_length=100, blank=True)

    # Refund tracking
    refund_of = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='refunds'
    )
    refund_reason = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_payments'
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['order', 'status'], name='payments_order_status_idx'),
            models.Index(fields=['status', 'created_at'], name='payments_status_created_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.payment_number}: {self.amount} ({self.status})"

    def save(self, *args, **kwargs):
        """Generate payment number if not set."""
        if not self.payment_number:
            self.payment_number = self._generate_payment_number()
        super().save(*args, **kwargs)

    def _generate_payment_number(self):
        # Format: PAY-<short-uuid>-<4-digit-random>
        short_id = str(self.id)[:8].upper()
        random_suffix = secrets.randbelow(10000)
        return f"PAY-{short_id}-{random_suffix:04d}"


class Invoice(models.Model):
    """Invoice snapshot of an order's amounts at issue time."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=32, unique=True, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    customer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='invoices'
    )

    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount_due = models.DecimalField(max_digits=12, decimal_places=2)

    issued_at = models.DateTimeField()
    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-issued_at']

    def __str__(self):
        return f"{self.invoice_number} - {self.amount_due} due"


class PurchaseOrderStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    SENT = 'SENT', 'Sent'
    RECEIVED = 'RECEIVED', 'Received'
    CANCELLED = 'CANCELLED', 'Cancelled'


class PurchaseOrder(models.Model):
    """Supplier order for materials/inventory."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    po_number = models.CharField(max_length=32, unique=True, editable=False)

    supplier_name = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.DRAFT
    )
    total_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='purchase_orders'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.po_number} - {self.supplier_name}"

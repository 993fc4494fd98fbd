from django.db import models
from decimal import Decimal
import secrets
import uuid


class QuoteStatus(models.TextChoices):
    REQUESTED = 'REQUESTED', 'Requested'
    APPROVED = 'APPROVED', 'Approved'
    CONVERTED = 'CONVERTED', 'Converted to order'
    ABANDONED = 'ABANDONED', 'Abandoned'


class Quote(models.Model):
    """Priced configuration request from a customer, before it becomes an Order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quote_number = models.CharField(max_length=32, unique=True, editable=False)

    customer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='quotes'
    )
    service = models.ForeignKey(
        'catalog.Service',
        on_delete=models.PROTECT,
        related_name='quotes'
    )
    tier = models.ForeignKey(
        'catalog.Tier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quotes'
    )

    status = models.CharField(
        max_length=20,
        choices=QuoteStatus.choices,
        default=QuoteStatus.REQUESTED
    )

    # Written only by the quote estimator
    estimate_subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    customer_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'quotes'
        indexes = [
            models.Index(fields=['customer', 'status'], name='quotes_customer_status_idx'),
            models.Index(fields=['created_at'], name='quotes_created_at_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.quote_number} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        """Generate quote number if not set."""
        if not self.quote_number:
            self.quote_number = f"Q-{secrets.token_hex(4).upper()}"
        super().save(*args, **kwargs)

    @property
    def is_convertible(self):
        return self.status in (QuoteStatus.REQUESTED, QuoteStatus.APPROVED)


class QuoteAnswer(models.Model):
    """Customer's answer to one service option. ``value`` is any JSON value."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quote = models.ForeignKey(
        Quote,
        on_delete=models.CASCADE,
        related_name='answers'
    )
    option_key = models.CharField(max_length=100)
    value = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'quote_answers'
        unique_together = [['quote', 'option_key']]

    def __str__(self):
        return f"{self.quote.quote_number}: {self.option_key}={self.value!r}"

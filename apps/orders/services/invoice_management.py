"""Invoice issuance."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import DocumentSeries, Invoice
from .document_numbering import create_with_document_number
from .ledger import reconcile_order_balance

logger = logging.getLogger(__name__)


@transaction.atomic
def issue_invoice(*, order_id: UUID, issued_at: Optional[datetime] = None) -> Invoice:
    """
    Issue an invoice for an order with the next INV number.

    The order is reconciled first, so the invoice snapshots the balance
    implied by the full payment history rather than a stale value.

    Args:
        order_id: Order UUID
        issued_at: Issue timestamp (defaults to now); its year picks the
            numbering year

    Returns:
        Created Invoice

    Raises:
        OrderNotFoundError: If order doesn't exist
        DocumentNumberConflictError: If no unique number could be secured
    """
    order = reconcile_order_balance(order_id=order_id)

    if issued_at is None:
        issued_at = timezone.now()
    amount_paid = order.total_amount - order.balance_due
    due_date = issued_at.date() + timedelta(days=settings.INVOICE_PAYMENT_TERMS_DAYS)

    invoice = create_with_document_number(
        series=DocumentSeries.INVOICE,
        year=issued_at.year,
        create=lambda number: Invoice.objects.create(
            invoice_number=number,
            order=order,
            customer_id=order.customer_id,
            total_amount=order.total_amount,
            amount_paid=amount_paid,
            amount_due=order.balance_due,
            issued_at=issued_at,
            due_date=due_date,
            paid_at=issued_at if order.is_fully_paid else None,
        ),
    )

    logger.info("Issued invoice %s for order %s", invoice.invoice_number, order.order_number)
    return invoice

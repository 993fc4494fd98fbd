"""Supplier purchase orders."""

import logging
from decimal import Decimal

from django.db import transaction

from apps.accounts.models import User
from ..models import DocumentSeries, PurchaseOrder
from .document_numbering import create_with_document_number
from .exceptions import InvalidPurchaseOrderError

logger = logging.getLogger(__name__)


@transaction.atomic
def create_purchase_order(
    *,
    supplier_name: str,
    total_cost: Decimal,
    created_by: User,
    notes: str = ''
) -> PurchaseOrder:
    """
    Create a DRAFT purchase order with the next PO number.

    Raises:
        InvalidPurchaseOrderError: If total_cost is negative
        DocumentNumberConflictError: If no unique number could be secured
    """
    if total_cost < 0:
        raise InvalidPurchaseOrderError("Purchase order total cannot be negative")

    purchase_order = create_with_document_number(
        series=DocumentSeries.PURCHASE_ORDER,
        create=lambda number: PurchaseOrder.objects.create(
            po_number=number,
            supplier_name=supplier_name,
            total_cost=total_cost,
            notes=notes,
            created_by=created_by,
        ),
    )

    logger.info("Created purchase order %s for %s", purchase_order.po_number, supplier_name)
    return purchase_order

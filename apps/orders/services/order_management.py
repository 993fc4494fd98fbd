"""Order creation from quotes and order lookup."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.quotes.models import Quote, QuoteStatus
from apps.quotes.services.exceptions import QuoteNotFoundError
from ..models import DocumentSeries, Order
from .document_numbering import create_with_document_number
from .exceptions import (
    OrderNotFoundError,
    OrderAccessDeniedError,
    QuoteNotConvertibleError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def create_order_from_quote(*, quote_id: UUID, total_amount: Optional[Decimal] = None) -> Order:
    """
    Convert a quote into an order with the next ORD number.

    The number allocation and the order insert commit together; the quote
    is locked so it cannot be converted twice.

    Args:
        quote_id: Quote UUID
        total_amount: Order total including anything applied on top of the
            estimate (tax, fees). Defaults to the quote's estimate subtotal.

    Returns:
        Created Order (balance_due == total_amount)

    Raises:
        QuoteNotFoundError: If quote doesn't exist
        QuoteNotConvertibleError: If quote is already converted or
            abandoned, or total is negative
    """
    try:
        quote = Quote.objects.select_for_update().get(id=quote_id)
    except Quote.DoesNotExist:
        raise QuoteNotFoundError(f"Quote {quote_id} not found")

    if not quote.is_convertible:
        raise QuoteNotConvertibleError(
            f"Quote {quote.quote_number} is {quote.get_status_display().lower()}"
        )

    subtotal = quote.estimate_subtotal
    if total_amount is None:
        total_amount = subtotal
    if total_amount < 0:
        raise QuoteNotConvertibleError("Order total cannot be negative")

    order = create_with_document_number(
        series=DocumentSeries.ORDER,
        create=lambda number: Order.objects.create(
            order_number=number,
            quote=quote,
            customer_id=quote.customer_id,
            service_id=quote.service_id,
            tier_id=quote.tier_id,
            subtotal=subtotal,
            total_amount=total_amount,
            balance_due=total_amount,
        ),
    )

    quote.status = QuoteStatus.CONVERTED
    quote.save(update_fields=['status', 'updated_at'])

    logger.info("Quote %s converted to order %s", quote.quote_number, order.order_number)
    return order


def get_order_for_user(*, order_id: UUID, user: User) -> Order:
    """
    Fetch an order visible to ``user``: staff see all, customers their own.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderAccessDeniedError: If a customer asks for someone else's order
    """
    try:
        order = Order.objects.select_related('customer', 'service', 'tier').get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_id} not found")

    if not user.is_shop_staff and order.customer_id != user.id:
        raise OrderAccessDeniedError("You do not have access to this order")

    return order


def get_orders_for_user(*, user: User):
    """Orders visible to ``user``, newest first."""
    queryset = Order.objects.select_related('customer', 'service', 'tier')
    if user.is_shop_staff:
        return queryset
    return queryset.filter(customer=user)

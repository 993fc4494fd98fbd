"""Order ledger: balance due derived from the full payment history."""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Case, DecimalField, F, Sum, Value, When

from ..models import Order, Payment, PaymentStatus
from .exceptions import OrderNotFoundError

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def get_paid_amount(*, order_id: UUID) -> Decimal:
    """
    Net amount received for an order.

    COMPLETED payments add, REFUNDED payments subtract, every other
    status counts zero. Computed with one conditional SQL aggregate so it
    always reflects committed rows plus the current transaction's writes.
    """
    money = DecimalField(max_digits=14, decimal_places=2)
    result = Payment.objects.filter(order_id=order_id).aggregate(
        paid=Sum(
            Case(
                When(status=PaymentStatus.COMPLETED, then=F('amount')),
                When(status=PaymentStatus.REFUNDED, then=-F('amount')),
                default=Value(Decimal('0.00')),
                output_field=money,
            ),
            output_field=money,
        )
    )
    paid = result['paid'] or Decimal('0.00')
    return Decimal(paid).quantize(CENTS)


@transaction.atomic
def reconcile_order_balance(*, order_id: UUID) -> Order:
    """
    Recompute and store an order's balance due.

    Uses select_for_update() so reconciliations of one order apply in
    commit order. Call it in the same transaction as the payment write
    that triggered it. Idempotent.

    Args:
        order_id: Order UUID

    Returns:
        Updated Order instance

    Raises:
        OrderNotFoundError: If order doesn't exist
    """
    try:
        order = (
            Order.objects
            .select_for_update()
            .get(id=order_id)
        )
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_id} not found")

    paid = get_paid_amount(order_id=order.id)
    balance_due = order.total_amount - paid

    if balance_due != order.balance_due:
        logger.info(
            "Order %s balance due %s -> %s",
            order.order_number, order.balance_due, balance_due
        )

    order.balance_due = balance_due
    order.save(update_fields=['balance_due', 'updated_at'])

    return order

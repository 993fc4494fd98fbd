"""
Payment mutations.

Every function here writes payments and reconciles the owning order's
balance in the same transaction, so no reader ever sees a payment without
the matching balance. The order row is locked first, then the payment, to
keep a single lock order across all payment paths.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import User
from ..models import Order, Payment, PaymentMethod, PaymentStatus
from .exceptions import (
    OrderNotFoundError,
    PaymentNotFoundError,
    InvalidPaymentError,
    InvalidStatusTransitionError,
)
from .ledger import reconcile_order_balance

logger = logging.getLogger(__name__)

# Allowed payment status changes (refunds are separate REFUNDED rows)
STATUS_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
}

RECORDABLE_STATUSES = {PaymentStatus.PENDING, PaymentStatus.COMPLETED, PaymentStatus.FAILED}


def _lock_order(order_id: UUID) -> Order:
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_id} not found")


def _get_payment(payment_id: UUID) -> Payment:
    try:
        return Payment.objects.get(id=payment_id)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError(f"Payment {payment_id} not found")


@transaction.atomic
def record_payment(
    *,
    order_id: UUID,
    amount: Decimal,
    method: str = PaymentMethod.CARD,
    status: str = PaymentStatus.COMPLETED,
    transaction_ref: str = '',
    recorded_by: Optional[User] = None
) -> Payment:
    """
    Record a payment against an order and reconcile its balance.

    Args:
        order_id: Order UUID
        amount: Positive amount
        method: Payment method
        status: PENDING, COMPLETED or FAILED
        transaction_ref: External reference (card processor, bank)
        recorded_by: Staff user recording the payment

    Returns:
        Created Payment

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidPaymentError: If amount is not positive or status not recordable
    """
    if amount is None or amount <= 0:
        raise InvalidPaymentError("Payment amount must be positive")
    if status not in RECORDABLE_STATUSES:
        raise InvalidPaymentError(f"Cannot record a payment with status {status}")

    order = _lock_order(order_id)

    payment = Payment.objects.create(
        order=order,
        amount=amount,
        method=method,
        status=status,
        transaction_ref=transaction_ref,
        recorded_by=recorded_by,
        completed_at=timezone.now() if status == PaymentStatus.COMPLETED else None,
    )

    order = reconcile_order_balance(order_id=order.id)
    logger.info(
        "Payment %s (%s %s) recorded on %s; balance due %s",
        payment.payment_number, payment.amount, payment.status,
        order.order_number, order.balance_due
    )
    return payment


@transaction.atomic
def update_payment_status(*, payment_id: UUID, status: str) -> Payment:
    """
    Move a payment to a new status and reconcile the order.

    Only PENDING payments change status (to COMPLETED, FAILED or
    CANCELLED). Use ``refund_payment`` to give money back.

    Raises:
        PaymentNotFoundError: If payment doesn't exist
        InvalidStatusTransitionError: If the transition is not allowed
    """
    order_id = _get_payment(payment_id).order_id
    _lock_order(order_id)
    payment = Payment.objects.select_for_update().get(id=payment_id)

    allowed = STATUS_TRANSITIONS.get(payment.status, set())
    if status not in allowed:
        raise InvalidStatusTransitionError(
            f"Cannot change payment {payment.payment_number} from {payment.status} to {status}"
        )

    payment.status = status
    update_fields = ['status', 'updated_at']
    if status == PaymentStatus.COMPLETED:
        payment.completed_at = timezone.now()
        update_fields.append('completed_at')
    payment.save(update_fields=update_fields)

    reconcile_order_balance(order_id=order_id)
    return payment


def get_refunded_amount(payment: Payment) -> Decimal:
    """Total already refunded against ``payment``."""
    total = payment.refunds.filter(
        status=PaymentStatus.REFUNDED
    ).aggregate(total=Sum('amount'))['total']
    return total or Decimal('0.00')


@transaction.atomic
def refund_payment(
    *,
    payment_id: UUID,
    amount: Optional[Decimal] = None,
    reason: str = '',
    refunded_by: Optional[User] = None
) -> Payment:
    """
    Refund (part of) a completed payment.

    Creates a REFUNDED payment row linked to the original, which the
    ledger subtracts from the amount paid.

    Args:
        payment_id: The COMPLETED payment being refunded
        amount: Refund amount (defaults to everything not yet refunded)
        reason: Refund reason
        refunded_by: Staff user issuing the refund

    Returns:
        The new REFUNDED Payment

    Raises:
        PaymentNotFoundError: If payment doesn't exist
        InvalidPaymentError: If payment isn't refundable or amount exceeds
            what remains refundable
    """
    order_id = _get_payment(payment_id).order_id
    _lock_order(order_id)
    original = Payment.objects.select_for_update().get(id=payment_id)

    if original.status != PaymentStatus.COMPLETED or original.refund_of_id is not None:
        raise InvalidPaymentError("Only completed payments can be refunded")

    refundable = original.amount - get_refunded_amount(original)
    if amount is None:
        amount = refundable
    if amount <= 0:
        raise InvalidPaymentError("Refund amount must be positive")
    if amount > refundable:
        raise InvalidPaymentError(f"Refund exceeds refundable amount ({refundable})")

    refund = Payment.objects.create(
        order_id=order_id,
        amount=amount,
        method=original.method,
        status=PaymentStatus.REFUNDED,
        refund_of=original,
        refund_reason=reason,
        recorded_by=refunded_by,
    )

    reconcile_order_balance(order_id=order_id)
    logger.info("Refunded %s of payment %s", amount, original.payment_number)
    return refund

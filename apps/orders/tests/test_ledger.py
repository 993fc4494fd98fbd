"""
Service layer tests for the order ledger.

Tests cover:
- Paid amount aggregation per payment status
- Balance reconciliation and idempotence
- Invoice snapshots taken after reconciliation
"""

import pytest
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from uuid import uuid4

from apps.orders.models import Invoice, Order, Payment, PaymentStatus
from apps.orders.services import get_paid_amount, reconcile_order_balance, issue_invoice
from apps.orders.services.exceptions import OrderNotFoundError


def pay(order, amount, status):
    return Payment.objects.create(order=order, amount=Decimal(amount), status=status)


@pytest.mark.django_db
class TestGetPaidAmount:

    def test_no_payments(self, order):
        assert get_paid_amount(order_id=order.id) == Decimal('0.00')

    def test_completed_add_refunded_subtract(self, order):
        pay(order, '50.00', PaymentStatus.COMPLETED)
        pay(order, '30.00', PaymentStatus.COMPLETED)
        pay(order, '20.00', PaymentStatus.REFUNDED)

        assert get_paid_amount(order_id=order.id) == Decimal('60.00')

    @pytest.mark.parametrize('status', [
        PaymentStatus.PENDING,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    ])
    def test_other_statuses_count_zero(self, order, status):
        pay(order, '75.00', status)

        assert get_paid_amount(order_id=order.id) == Decimal('0.00')

    def test_scoped_to_order(self, order, customer, service):
        other = Order.objects.create(
            order_number='ORD-2024-0002',
            customer=customer,
            service=service,
            subtotal=Decimal('10.00'),
            total_amount=Decimal('10.00'),
            balance_due=Decimal('10.00'),
        )
        pay(other, '10.00', PaymentStatus.COMPLETED)

        assert get_paid_amount(order_id=order.id) == Decimal('0.00')


@pytest.mark.django_db
class TestReconcileOrderBalance:

    def test_balance_from_payment_history(self, order):
        pay(order, '50.00', PaymentStatus.COMPLETED)
        pay(order, '30.00', PaymentStatus.COMPLETED)
        pay(order, '20.00', PaymentStatus.REFUNDED)
        pay(order, '99.00', PaymentStatus.PENDING)

        updated = reconcile_order_balance(order_id=order.id)

        # 200 - 50 - 30 + 20
        assert updated.balance_due == Decimal('140.00')
        order.refresh_from_db()
        assert order.balance_due == Decimal('140.00')

    def test_reconcile_is_idempotent(self, order, completed_payment):
        first = reconcile_order_balance(order_id=order.id).balance_due
        second = reconcile_order_balance(order_id=order.id).balance_due

        assert first == second == Decimal('150.00')

    def test_repairs_stale_balance(self, order):
        Order.objects.filter(id=order.id).update(balance_due=Decimal('0.00'))

        assert reconcile_order_balance(order_id=order.id).balance_due == Decimal('200.00')

    def test_overpayment_goes_negative(self, order):
        pay(order, '250.00', PaymentStatus.COMPLETED)

        updated = reconcile_order_balance(order_id=order.id)

        assert updated.balance_due == Decimal('-50.00')
        assert updated.is_fully_paid

    def test_zero_total_order(self, order):
        Order.objects.filter(id=order.id).update(total_amount=Decimal('0.00'))

        assert reconcile_order_balance(order_id=order.id).balance_due == Decimal('0.00')

    def test_order_not_found(self):
        with pytest.raises(OrderNotFoundError):
            reconcile_order_balance(order_id=uuid4())


@pytest.mark.django_db
class TestIssueInvoice:

    ISSUED_AT = datetime(2024, 3, 1, 10, 0, tzinfo=dt_timezone.utc)

    def test_invoice_snapshots_reconciled_balance(self, order, completed_payment):
        invoice = issue_invoice(order_id=order.id, issued_at=self.ISSUED_AT)

        assert invoice.invoice_number == 'INV-2024-0001'
        assert invoice.total_amount == Decimal('200.00')
        assert invoice.amount_paid == Decimal('50.00')
        assert invoice.amount_due == Decimal('150.00')
        assert invoice.customer_id == order.customer_id
        assert invoice.paid_at is None

    def test_due_date_uses_payment_terms(self, order, settings):
        settings.INVOICE_PAYMENT_TERMS_DAYS = 30

        invoice = issue_invoice(order_id=order.id, issued_at=self.ISSUED_AT)

        assert invoice.due_date == date(2024, 3, 31)

    def test_fully_paid_invoice(self, order):
        pay(order, '200.00', PaymentStatus.COMPLETED)

        invoice = issue_invoice(order_id=order.id, issued_at=self.ISSUED_AT)

        assert invoice.amount_due == Decimal('0.00')
        assert invoice.paid_at == self.ISSUED_AT

    def test_invoice_numbers_are_sequential(self, order):
        first = issue_invoice(order_id=order.id, issued_at=self.ISSUED_AT)
        second = issue_invoice(order_id=order.id, issued_at=self.ISSUED_AT)

        assert (first.invoice_number, second.invoice_number) == ('INV-2024-0001', 'INV-2024-0002')
        assert Invoice.objects.filter(order=order).count() == 2

    def test_invoice_for_missing_order(self):
        with pytest.raises(OrderNotFoundError):
            issue_invoice(order_id=uuid4())

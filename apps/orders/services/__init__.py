"""Services for orders business logic."""

from .exceptions import (
    OrdersServiceError,
    OrderNotFoundError,
    OrderAccessDeniedError,
    QuoteNotConvertibleError,
    PaymentNotFoundError,
    InvalidPaymentError,
    InvalidStatusTransitionError,
    UnknownDocumentSeriesError,
    DocumentNumberConflictError,
    InvalidPurchaseOrderError,
)
from .document_numbering import (
    allocate_document_number,
    create_with_document_number,
    format_document_number,
    find_highest_issued,
)
from .ledger import (
    get_paid_amount,
    reconcile_order_balance,
)
from .payment_management import (
    record_payment,
    update_payment_status,
    refund_payment,
)
from .order_management import (
    create_order_from_quote,
    get_order_for_user,
    get_orders_for_user,
)
from .invoice_management import (
    issue_invoice,
)
from .purchase_order_management import (
    create_purchase_order,
)

__all__ = [
    # Exceptions
    'OrdersServiceError',
    'OrderNotFoundError',
    'OrderAccessDeniedError',
    'QuoteNotConvertibleError',
    'PaymentNotFoundError',
    'InvalidPaymentError',
    'InvalidStatusTransitionError',
    'UnknownDocumentSeriesError',
    'DocumentNumberConflictError',
    'InvalidPurchaseOrderError',
    # Document Numbering
    'allocate_document_number',
    'create_with_document_number',
    'format_document_number',
    'find_highest_issued',
    # Ledger
    'get_paid_amount',
    'reconcile_order_balance',
    # Payments
    'record_payment',
    'update_payment_status',
    'refund_payment',
    # Orders
    'create_order_from_quote',
    'get_order_for_user',
    'get_orders_for_user',
    # Invoices
    'issue_invoice',
    # Purchase Orders
    'create_purchase_order',
]

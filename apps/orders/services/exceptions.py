"""
Domain-specific exceptions for orders app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class OrdersServiceError(Exception):
    """Base exception for all orders service errors."""
    pass


class OrderNotFoundError(OrdersServiceError):
    """Raised when an order does not exist."""
    pass


class OrderAccessDeniedError(OrdersServiceError):
    """Raised when a customer requests an order they do not own."""
    pass


class QuoteNotConvertibleError(OrdersServiceError):
    """Raised when a quote is missing, already converted or abandoned."""
    pass


class PaymentNotFoundError(OrdersServiceError):
    """Raised when a payment does not exist."""
    pass


class InvalidPaymentError(OrdersServiceError):
    """Raised when a payment amount or status is not acceptable."""
    pass


class InvalidStatusTransitionError(OrdersServiceError):
    """Raised when a payment status change is not allowed."""
    pass


class UnknownDocumentSeriesError(OrdersServiceError):
    """Raised when numbering is requested for an unknown series."""
    pass


class DocumentNumberConflictError(OrdersServiceError):
    """Raised when a unique document number could not be secured after retries."""
    pass


class InvalidPurchaseOrderError(OrdersServiceError):
    """Raised when purchase order data is not acceptable."""
    pass

"""
Domain-specific exceptions for quotes app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class QuotesServiceError(Exception):
    """Base exception for all quotes service errors."""
    pass


class QuoteNotFoundError(QuotesServiceError):
    """Raised when a quote does not exist."""
    pass


class QuoteAccessDeniedError(QuotesServiceError):
    """Raised when a customer acts on a quote they do not own."""
    pass


class QuoteLockedError(QuotesServiceError):
    """Raised when answers change on a converted or abandoned quote."""
    pass

"""Quote answer updates. Every change re-prices the quote in the same transaction."""

from typing import Any
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.quotes.models import Quote, QuoteAnswer
from .exceptions import QuoteLockedError
from .quote_estimation import get_quote_for_customer, recompute_estimate


@transaction.atomic
def save_quote_answers(*, quote_id: UUID, customer: User, answers: dict[str, Any]) -> Quote:
    """
    Upsert answers on a quote and recompute its estimate.

    Args:
        quote_id: Quote UUID
        customer: Requesting customer (must own the quote)
        answers: option_key -> JSON value

    Returns:
        Updated Quote with the new estimate_subtotal

    Raises:
        QuoteNotFoundError: If quote doesn't exist
        QuoteAccessDeniedError: If customer doesn't own the quote
        QuoteLockedError: If quote is already converted or abandoned
    """
    quote = get_quote_for_customer(quote_id=quote_id, customer=customer, lock=True)

    if not quote.is_convertible:
        raise QuoteLockedError(f"Quote {quote.quote_number} can no longer be changed")

    for option_key, value in answers.items():
        QuoteAnswer.objects.update_or_create(
            quote=quote,
            option_key=option_key,
            defaults={'value': value}
        )

    recompute_estimate(quote)
    return quote


def get_customer_quotes(*, customer: User):
    """Quotes owned by ``customer``, newest first."""
    return (
        Quote.objects
        .filter(customer=customer)
        .select_related('service', 'tier')
        .prefetch_related('answers')
    )

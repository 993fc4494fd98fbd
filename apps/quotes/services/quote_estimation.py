"""Quote estimate recomputation: load pricing inputs, evaluate, persist."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q

from apps.accounts.models import User, CustomerProfile, ContractPricing
from apps.catalog.models import ServiceOption, PricingRule
from apps.quotes.models import Quote
from .exceptions import QuoteNotFoundError, QuoteAccessDeniedError
from .pricing_evaluation import ContractContext, evaluate_estimate

logger = logging.getLogger(__name__)


def load_contract_context(*, customer_id: UUID, service_id: UUID) -> Optional[ContractContext]:
    """
    Look up B2B pricing for a customer and service.

    Best effort: a customer without a B2B account gets None, and so does
    any lookup failure. The lookup runs in a savepoint so a database error
    here cannot poison the caller's transaction.

    Returns:
        ContractContext with the contract's pricing_json when the account
        has a contract for the service, otherwise one carrying the
        account's flat discount. None for retail customers.
    """
    try:
        with transaction.atomic():
            profile = (
                CustomerProfile.objects
                .select_related('b2b_account')
                .filter(user_id=customer_id)
                .first()
            )
            if profile is None or profile.b2b_account is None:
                return None

            contract = ContractPricing.objects.filter(
                account_id=profile.b2b_account_id,
                service_id=service_id
            ).first()

            if contract is not None:
                return ContractContext(has_contract=True, pricing=contract.pricing_json)
            return ContractContext(discount_pct=profile.b2b_account.discount_pct)
    except Exception:
        logger.warning(
            "B2B pricing lookup failed for customer %s, service %s; using standard pricing",
            customer_id, service_id, exc_info=True
        )
        return None


def recompute_estimate(quote: Quote) -> Decimal:
    """
    Re-evaluate and store ``quote.estimate_subtotal``.

    The caller must hold the quote row lock inside an open transaction.
    Rules are evaluated in id order so stacked volume discounts are
    deterministic.
    """
    options = (
        ServiceOption.objects
        .filter(service_id=quote.service_id)
        .order_by('sort_order', 'key')
    )
    answers = dict(quote.answers.values_list('option_key', 'value'))
    rules = (
        PricingRule.objects
        .filter(is_active=True)
        .filter(Q(service_id=quote.service_id) | Q(service__isnull=True))
        .order_by('id')
    )
    contract = load_contract_context(
        customer_id=quote.customer_id,
        service_id=quote.service_id
    )

    subtotal = evaluate_estimate(
        options=options,
        answers=answers,
        rules=rules,
        service_id=quote.service_id,
        tier_id=quote.tier_id,
        contract=contract,
    )

    quote.estimate_subtotal = subtotal
    quote.save(update_fields=['estimate_subtotal', 'updated_at'])

    logger.info("Quote %s estimate recomputed: %s", quote.quote_number, subtotal)
    return subtotal


def get_quote_for_customer(*, quote_id: UUID, customer: User, lock: bool = False) -> Quote:
    """
    Fetch a quote owned by ``customer``.

    Raises:
        QuoteNotFoundError: If quote doesn't exist
        QuoteAccessDeniedError: If quote belongs to someone else
    """
    queryset = Quote.objects.all()
    if lock:
        queryset = queryset.select_for_update()

    try:
        quote = queryset.get(id=quote_id)
    except Quote.DoesNotExist:
        raise QuoteNotFoundError(f"Quote {quote_id} not found")

    if quote.customer_id != customer.id:
        raise QuoteAccessDeniedError("You do not have access to this quote")

    return quote


@transaction.atomic
def estimate_quote(*, quote_id: UUID, customer: User) -> Decimal:
    """
    Recompute a quote's estimate subtotal on behalf of its customer.

    The quote row is locked for the whole read-modify-write so a
    concurrent answer change cannot be lost.

    Args:
        quote_id: Quote UUID
        customer: Requesting customer

    Returns:
        The new subtotal (2 decimal places)

    Raises:
        QuoteNotFoundError: If quote doesn't exist
        QuoteAccessDeniedError: If requesting customer doesn't own the quote
    """
    quote = get_quote_for_customer(quote_id=quote_id, customer=customer, lock=True)
    return recompute_estimate(quote)

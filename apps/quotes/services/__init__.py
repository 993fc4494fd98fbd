"""Services for quotes business logic."""

from .exceptions import (
    QuotesServiceError,
    QuoteNotFoundError,
    QuoteAccessDeniedError,
    QuoteLockedError,
)
from .pricing_evaluation import (
    ContractContext,
    evaluate_estimate,
    apply_contract_pricing,
    volume_discount_pct,
    round_money,
)
from .quote_estimation import (
    estimate_quote,
    recompute_estimate,
    load_contract_context,
    get_quote_for_customer,
)
from .answer_management import (
    save_quote_answers,
    get_customer_quotes,
)

__all__ = [
    # Exceptions
    'QuotesServiceError',
    'QuoteNotFoundError',
    'QuoteAccessDeniedError',
    'QuoteLockedError',
    # Pricing Evaluation
    'ContractContext',
    'evaluate_estimate',
    'apply_contract_pricing',
    'volume_discount_pct',
    'round_money',
    # Quote Estimation
    'estimate_quote',
    'recompute_estimate',
    'load_contract_context',
    'get_quote_for_customer',
    # Answer Management
    'save_quote_answers',
    'get_customer_quotes',
]

"""
Quote pricing evaluation.

Pure functions that turn a service's options, a customer's answers, the
active pricing rules and an optional B2B contract into an estimate
subtotal. Nothing in this module touches the database: the quote
estimator loads the inputs and persists the result.

Evaluation order (changing it changes the result):
    1. Sum the pricing impact of every answered option.
    2. Apply each qualifying VOLUME_DISCOUNT rule, multiplicatively,
       in the order the rules are given.
    3. Apply B2B contract overrides, or the account's flat discount
       when the account has no contract for the service.
    4. Round to cents, half away from zero.

JSON configuration (``pricing_impact``, ``rule_config``, ``pricing_json``)
is read through total helpers: an entry with the wrong shape contributes
nothing instead of raising.

Example::

    subtotal = evaluate_estimate(
        options=service.options.all(),
        answers={'size': 'large', 'quantity': 60},
        rules=PricingRule.objects.filter(is_active=True),
        service_id=service.id,
    )
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from apps.catalog.models import PricingRuleType

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENTS = Decimal('0.01')

# Largest magnitude read from JSON configuration or answers. Larger values
# are treated as malformed.
MAX_AMOUNT = Decimal('1e9')
# Largest magnitude Quote.estimate_subtotal can store (max_digits=12, 2 dp).
MAX_SUBTOTAL = Decimal('9999999999.99')

QUANTITY_KEY = 'quantity'


@dataclass(frozen=True)
class ContractContext:
    """
    B2B pricing inputs for one (customer, service) pair.

    Attributes:
        has_contract: True when a ContractPricing row exists for the
            account and service. Contract overrides then replace the
            flat discount entirely.
        pricing: The contract's ``pricing_json`` (tier id -> tier config).
        discount_pct: The account's flat fallback discount.
    """

    has_contract: bool = False
    pricing: Any = None
    discount_pct: Optional[Decimal] = None


# =============================================================================
# JSON value helpers
# =============================================================================

def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Read a JSON scalar as a finite Decimal.

    Numbers and numeric strings are accepted. Booleans, null, containers,
    blank or non-numeric strings, NaN, infinities and values larger than
    ``MAX_AMOUNT`` in magnitude give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float, Decimal)):
        return None

    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None

    if not number.is_finite() or abs(number) > MAX_AMOUNT:
        return None
    return number


def format_number(number: Decimal) -> str:
    """Shortest text form of a number: ``10`` for 10.0, ``2.5`` for 2.50."""
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), 'f')


def answer_key(value: Any) -> Optional[str]:
    """
    Key under which an answer is looked up in a ``pricing_impact`` map.

    Strings are used verbatim and numbers in their shortest form. Any
    other JSON value (bool, null, object, array) matches no key.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = to_decimal(value)
        return format_number(number) if number is not None else None
    return None


def as_mapping(value: Any) -> Optional[Mapping]:
    """Return ``value`` when it is a JSON object, else None."""
    return value if isinstance(value, Mapping) else None


def apply_discount(amount: Decimal, discount_pct: Decimal) -> Decimal:
    """``amount * (1 - discount_pct / 100)``, unrounded."""
    return amount * (1 - discount_pct / HUNDRED)


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half away from zero (8.335 -> 8.34)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def in_range(amount: Decimal) -> bool:
    """True when ``amount`` still fits a stored subtotal once rounded to cents."""
    return abs(amount) <= MAX_SUBTOTAL and abs(round_money(amount)) <= MAX_SUBTOTAL


# =============================================================================
# Evaluation steps
# =============================================================================

def option_delta(pricing_impact: Any, answer: Any) -> Optional[Decimal]:
    """Monetary delta an option contributes for ``answer``, or None."""
    impact = as_mapping(pricing_impact)
    if impact is None:
        return None

    key = answer_key(answer)
    if key is None or key not in impact:
        return None

    delta = to_decimal(impact[key])
    if delta is None:
        logger.debug("Ignoring non-numeric pricing impact %r for answer %r", impact[key], key)
    return delta


def volume_discount_pct(rule_config: Any, quantity: Decimal) -> Optional[Decimal]:
    """
    Discount of the threshold with the largest ``min_qty`` not above ``quantity``.

    Thresholds with a missing or non-numeric ``min_qty``/``discount_pct``
    are skipped. Returns None when no threshold qualifies.
    """
    config = as_mapping(rule_config)
    thresholds = config.get('thresholds') if config is not None else None
    if not isinstance(thresholds, list):
        return None

    best_min_qty = None
    best_discount = None
    for threshold in thresholds:
        entry = as_mapping(threshold)
        if entry is None:
            continue
        min_qty = to_decimal(entry.get('min_qty'))
        discount_pct = to_decimal(entry.get('discount_pct'))
        if min_qty is None or discount_pct is None:
            logger.debug("Skipping malformed volume threshold %r", threshold)
            continue
        if quantity >= min_qty and (best_min_qty is None or min_qty > best_min_qty):
            best_min_qty = min_qty
            best_discount = discount_pct

    return best_discount


def rule_applies(rule, service_id) -> bool:
    """Active VOLUME_DISCOUNT rules scoped to the service or global."""
    return (
        rule.is_active
        and rule.rule_type == PricingRuleType.VOLUME_DISCOUNT
        and (rule.service_id is None or rule.service_id == service_id)
    )


def apply_contract_pricing(
    subtotal: Decimal,
    contract: ContractContext,
    tier_id,
    quantity: Optional[Decimal],
) -> Decimal:
    """
    Apply B2B contract overrides to ``subtotal``.

    With a contract, the tier's ``quantity_breaks[qty]``, then
    ``quantity_pricing[qty]``, then ``base_price`` each replace the
    subtotal when present and numeric, so ``base_price`` wins when set.
    Without a contract the account's flat ``discount_pct`` applies.
    """
    if not contract.has_contract:
        discount_pct = contract.discount_pct
        if discount_pct is not None and discount_pct > 0:
            return apply_discount(subtotal, discount_pct)
        return subtotal

    pricing = as_mapping(contract.pricing)
    if tier_id is None or pricing is None:
        return subtotal

    tier_cfg = as_mapping(pricing.get(str(tier_id)))
    if tier_cfg is None:
        return subtotal

    if quantity:
        qty_key = format_number(quantity)
        for source in ('quantity_breaks', 'quantity_pricing'):
            table = as_mapping(tier_cfg.get(source))
            if table is None or qty_key not in table:
                continue
            price = to_decimal(table[qty_key])
            if price is not None:
                subtotal = price

    base_price = to_decimal(tier_cfg.get('base_price'))
    if base_price is not None:
        subtotal = base_price

    return subtotal


def evaluate_estimate(
    *,
    options: Iterable,
    answers: Mapping,
    rules: Iterable,
    service_id,
    tier_id=None,
    contract: Optional[ContractContext] = None,
) -> Decimal:
    """
    Compute a quote's estimate subtotal.

    Args:
        options: Service options in display order; each needs ``key`` and
            ``pricing_impact``.
        answers: option_key -> JSON answer value.
        rules: Pricing rules in evaluation order; each needs ``is_active``,
            ``rule_type``, ``service_id`` and ``rule_config``.
        service_id: The quote's service.
        tier_id: The quote's tier, used to pick contract tier config.
        contract: B2B pricing inputs, or None for retail customers.

    Returns:
        Subtotal rounded to 2 decimal places. Not clamped: a pathological
        rule set can produce a negative value. A step that would push the
        subtotal past ``MAX_SUBTOTAL`` is skipped.
    """
    subtotal = ZERO

    for option in options:
        if option.key not in answers:
            continue
        delta = option_delta(option.pricing_impact, answers[option.key])
        if delta is None:
            continue
        if in_range(subtotal + delta):
            subtotal += delta
        else:
            logger.warning("Skipping option %r: subtotal out of range", option.key)

    quantity = to_decimal(answers.get(QUANTITY_KEY))

    if quantity is not None and quantity > 0:
        for rule in rules:
            if not rule_applies(rule, service_id):
                continue
            discount_pct = volume_discount_pct(rule.rule_config, quantity)
            if discount_pct is None:
                continue
            discounted = apply_discount(subtotal, discount_pct)
            if in_range(discounted):
                subtotal = discounted
            else:
                logger.warning("Skipping pricing rule %s: subtotal out of range", getattr(rule, 'id', None))

    if contract is not None:
        try:
            priced = apply_contract_pricing(subtotal, contract, tier_id, quantity)
        except (ArithmeticError, TypeError, ValueError):
            logger.warning("Contract pricing override failed; keeping rule-based subtotal", exc_info=True)
        else:
            if in_range(priced):
                subtotal = priced
            else:
                logger.warning("Contract pricing out of range; keeping rule-based subtotal")

    return round_money(subtotal)

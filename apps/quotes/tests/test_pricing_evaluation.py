"""
Unit tests for the pure pricing evaluator.

No database: options and rules are plain namespaces carrying the
attributes the evaluator reads.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from apps.catalog.models import PricingRuleType
from apps.quotes.services.pricing_evaluation import (
    ContractContext,
    answer_key,
    apply_contract_pricing,
    evaluate_estimate,
    round_money,
    to_decimal,
    volume_discount_pct,
)

SERVICE_ID = 'svc-1'
TIER_ID = 'tier-1'


def option(key, pricing_impact):
    return SimpleNamespace(key=key, pricing_impact=pricing_impact)


def volume_rule(thresholds, service_id=SERVICE_ID, is_active=True, rule_type=PricingRuleType.VOLUME_DISCOUNT):
    return SimpleNamespace(
        is_active=is_active,
        rule_type=rule_type,
        service_id=service_id,
        rule_config={'thresholds': thresholds},
    )


def estimate(options=(), answers=None, rules=(), **kwargs):
    return evaluate_estimate(
        options=options,
        answers=answers or {},
        rules=rules,
        service_id=SERVICE_ID,
        **kwargs
    )


# =============================================================================
# JSON helpers
# =============================================================================

class TestValueHelpers:

    @pytest.mark.parametrize('value,expected', [
        (10, Decimal('10')),
        (2.5, Decimal('2.5')),
        ('7.25', Decimal('7.25')),
        (' 3 ', Decimal('3')),
        ('', None),
        ('abc', None),
        (None, None),
        (True, None),
        ([1], None),
        ({'a': 1}, None),
        ('NaN', None),
        (float('inf'), None),
        ('1e9', Decimal('1e9')),
        ('1e30', None),
        (-5 * 10 ** 10, None),
    ])
    def test_to_decimal(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize('value,expected', [
        ('large', 'large'),
        (10, '10'),
        (10.0, '10'),
        (2.5, '2.5'),
        (True, None),
        (None, None),
        ({'a': 1}, None),
        (['a'], None),
    ])
    def test_answer_key(self, value, expected):
        assert answer_key(value) == expected

    def test_round_money_half_up(self):
        assert round_money(Decimal('8.335')) == Decimal('8.34')
        assert round_money(Decimal('8.334')) == Decimal('8.33')
        assert round_money(Decimal('8.333')) == Decimal('8.33')
        assert round_money(Decimal('-8.335')) == Decimal('-8.34')


# =============================================================================
# Option deltas
# =============================================================================

class TestOptionDeltas:

    def test_no_options_is_zero(self):
        assert estimate() == Decimal('0.00')

    def test_sums_answered_option_deltas(self):
        options = [
            option('size', {'small': 5, 'large': 10}),
            option('finish', {'matte': 2.5, 'gloss': 4}),
        ]
        result = estimate(options, {'size': 'large', 'finish': 'matte'})

        assert result == Decimal('12.50')

    def test_unanswered_option_contributes_nothing(self):
        options = [option('size', {'large': 10}), option('finish', {'gloss': 4})]

        assert estimate(options, {'size': 'large'}) == Decimal('10.00')

    def test_answer_without_matching_key_contributes_nothing(self):
        options = [option('size', {'large': 10})]

        assert estimate(options, {'size': 'huge'}) == Decimal('0.00')

    def test_numeric_answer_matches_stringified_key(self):
        options = [option('copies', {'10': 40})]

        assert estimate(options, {'copies': 10}) == Decimal('40.00')
        assert estimate(options, {'copies': 10.0}) == Decimal('40.00')

    @pytest.mark.parametrize('answer', [True, None, {'size': 'large'}, ['large']])
    def test_non_scalar_answers_match_nothing(self, answer):
        options = [option('size', {'large': 10, 'True': 3, 'None': 3})]

        assert estimate(options, {'size': answer}) == Decimal('0.00')

    @pytest.mark.parametrize('impact', [None, [], 'large', 42, {'large': 'ten'}, {'large': None}])
    def test_malformed_pricing_impact_is_ignored(self, impact):
        options = [option('size', impact), option('finish', {'gloss': 4})]

        assert estimate(options, {'size': 'large', 'finish': 'gloss'}) == Decimal('4.00')

    def test_negative_deltas_are_allowed(self):
        options = [option('size', {'large': 10}), option('coupon', {'yes': -15})]

        assert estimate(options, {'size': 'large', 'coupon': 'yes'}) == Decimal('-5.00')


# =============================================================================
# Volume discounts
# =============================================================================

class TestVolumeDiscounts:

    THRESHOLDS = [
        {'min_qty': 10, 'discount_pct': 5},
        {'min_qty': 50, 'discount_pct': 10},
        {'min_qty': 100, 'discount_pct': 20},
    ]

    def test_picks_largest_qualifying_threshold(self):
        assert volume_discount_pct({'thresholds': self.THRESHOLDS}, Decimal('60')) == Decimal('10')

    def test_threshold_is_inclusive(self):
        assert volume_discount_pct({'thresholds': self.THRESHOLDS}, Decimal('100')) == Decimal('20')

    def test_below_all_thresholds(self):
        assert volume_discount_pct({'thresholds': self.THRESHOLDS}, Decimal('9')) is None

    def test_threshold_order_does_not_matter(self):
        reversed_config = {'thresholds': list(reversed(self.THRESHOLDS))}

        assert volume_discount_pct(reversed_config, Decimal('60')) == Decimal('10')

    @pytest.mark.parametrize('config', [None, {}, {'thresholds': None}, {'thresholds': 'x'}, []])
    def test_malformed_config(self, config):
        assert volume_discount_pct(config, Decimal('60')) is None

    def test_malformed_threshold_entries_are_skipped(self):
        config = {'thresholds': [
            'bad',
            {'min_qty': 'many', 'discount_pct': 50},
            {'min_qty': 10},
            {'min_qty': 10, 'discount_pct': 5},
        ]}

        assert volume_discount_pct(config, Decimal('60')) == Decimal('5')

    def test_sixty_units_get_fifty_unit_rate(self):
        options = [option('size', {'large': 100})]
        rules = [volume_rule([
            {'min_qty': 10, 'discount_pct': 5},
            {'min_qty': 50, 'discount_pct': 15},
        ])]

        assert estimate(options, {'size': 'large', 'quantity': 60}, rules) == Decimal('85.00')

    def test_discount_applied_to_subtotal(self):
        options = [option('size', {'large': 200})]
        rules = [volume_rule(self.THRESHOLDS)]

        result = estimate(options, {'size': 'large', 'quantity': 60}, rules)

        assert result == Decimal('180.00')

    def test_quantity_as_numeric_string(self):
        options = [option('size', {'large': 200})]
        rules = [volume_rule(self.THRESHOLDS)]

        assert estimate(options, {'size': 'large', 'quantity': '60'}, rules) == Decimal('180.00')

    @pytest.mark.parametrize('quantity', [None, 0, -5, 'lots', True])
    def test_no_discount_without_positive_quantity(self, quantity):
        options = [option('size', {'large': 200})]
        rules = [volume_rule([{'min_qty': 0, 'discount_pct': 50}])]
        answers = {'size': 'large'}
        if quantity is not None:
            answers['quantity'] = quantity

        assert estimate(options, answers, rules) == Decimal('200.00')

    def test_multiple_rules_stack_multiplicatively(self):
        options = [option('size', {'large': 200})]
        rules = [
            volume_rule([{'min_qty': 10, 'discount_pct': 10}]),
            volume_rule([{'min_qty': 10, 'discount_pct': 10}], service_id=None),
        ]

        result = estimate(options, {'size': 'large', 'quantity': 20}, rules)

        # 200 * 0.9 * 0.9
        assert result == Decimal('162.00')

    def test_ignores_inactive_other_service_and_other_types(self):
        options = [option('size', {'large': 200})]
        rules = [
            volume_rule([{'min_qty': 1, 'discount_pct': 50}], is_active=False),
            volume_rule([{'min_qty': 1, 'discount_pct': 50}], service_id='svc-2'),
            volume_rule([{'min_qty': 1, 'discount_pct': 50}], rule_type=PricingRuleType.RUSH_FEE),
        ]

        assert estimate(options, {'size': 'large', 'quantity': 5}, rules) == Decimal('200.00')

    def test_rounds_after_discounting(self):
        options = [option('size', {'large': 8.35})]
        rules = [volume_rule([{'min_qty': 1, 'discount_pct': 0.18}])]

        # 8.35 * 0.9982 = 8.33497 -> 8.33
        assert estimate(options, {'size': 'large', 'quantity': 1}, rules) == Decimal('8.33')


# =============================================================================
# B2B contract pricing
# =============================================================================

class TestContractPricing:

    def test_flat_discount_without_contract(self):
        contract = ContractContext(discount_pct=Decimal('10'))

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, None) == Decimal('180')

    def test_zero_flat_discount_keeps_subtotal(self):
        contract = ContractContext(discount_pct=Decimal('0'))

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, None) == Decimal('200')

    def test_base_price_replaces_subtotal(self):
        contract = ContractContext(has_contract=True, pricing={TIER_ID: {'base_price': 150}})

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, None) == Decimal('150')

    def test_zero_base_price_counts_as_set(self):
        contract = ContractContext(has_contract=True, pricing={TIER_ID: {'base_price': 0}})

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, None) == Decimal('0')

    def test_quantity_break_replaces_subtotal(self):
        contract = ContractContext(
            has_contract=True,
            pricing={TIER_ID: {'quantity_breaks': {'10': 80}}},
        )

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, Decimal('10')) == Decimal('80')

    def test_quantity_pricing_overrides_quantity_break(self):
        contract = ContractContext(
            has_contract=True,
            pricing={TIER_ID: {'quantity_breaks': {'10': 80}, 'quantity_pricing': {'10': 90}}},
        )

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, Decimal('10')) == Decimal('90')

    def test_base_price_wins_over_quantity_tables(self):
        contract = ContractContext(
            has_contract=True,
            pricing={TIER_ID: {
                'base_price': 100,
                'quantity_breaks': {'10': 80},
                'quantity_pricing': {'10': 90},
            }},
        )

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, Decimal('10')) == Decimal('100')

    def test_quantity_without_table_entry_keeps_subtotal(self):
        contract = ContractContext(
            has_contract=True,
            pricing={TIER_ID: {'quantity_breaks': {'10': 80}}},
        )

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, Decimal('25')) == Decimal('200')

    def test_contract_skips_flat_discount(self):
        contract = ContractContext(has_contract=True, pricing={}, discount_pct=Decimal('10'))

        assert apply_contract_pricing(Decimal('200'), contract, TIER_ID, None) == Decimal('200')

    @pytest.mark.parametrize('tier_id,pricing', [
        (None, {TIER_ID: {'base_price': 150}}),
        ('tier-2', {TIER_ID: {'base_price': 150}}),
        (TIER_ID, None),
        (TIER_ID, ['not', 'a', 'map']),
        (TIER_ID, {TIER_ID: 'bad'}),
        (TIER_ID, {TIER_ID: {'base_price': 'cheap'}}),
    ])
    def test_missing_or_malformed_contract_keeps_subtotal(self, tier_id, pricing):
        contract = ContractContext(has_contract=True, pricing=pricing)

        assert apply_contract_pricing(Decimal('200'), contract, tier_id, None) == Decimal('200')

    def test_contract_applies_after_volume_discount(self):
        options = [option('size', {'large': 200})]
        rules = [volume_rule([{'min_qty': 10, 'discount_pct': 10}])]
        contract = ContractContext(discount_pct=Decimal('10'))

        result = estimate(
            options, {'size': 'large', 'quantity': 20}, rules,
            tier_id=TIER_ID, contract=contract,
        )

        # 200 * 0.9 * 0.9
        assert result == Decimal('162.00')

    def test_full_evaluation_with_contract_base_price(self):
        options = [option('size', {'large': 200})]
        contract = ContractContext(has_contract=True, pricing={TIER_ID: {'base_price': 99.999}})

        result = estimate(options, {'size': 'large'}, tier_id=TIER_ID, contract=contract)

        assert result == Decimal('100.00')


# =============================================================================
# Oversized values
# =============================================================================

class TestOversizedValues:

    def test_oversized_option_delta_is_ignored(self):
        options = [option('size', {'large': '1e30'}), option('finish', {'gloss': 15})]

        result = estimate(options, {'size': 'large', 'finish': 'gloss'})

        assert result == Decimal('15.00')

    def test_oversized_discount_pct_is_skipped(self):
        options = [option('size', {'large': 100})]
        rules = [volume_rule([{'min_qty': 1, 'discount_pct': 1e30}])]

        result = estimate(options, {'size': 'large', 'quantity': 5}, rules)

        assert result == Decimal('100.00')

    def test_oversized_min_qty_never_qualifies(self):
        config = {'thresholds': [
            {'min_qty': 1e30, 'discount_pct': 50},
            {'min_qty': 10, 'discount_pct': 5},
        ]}

        assert volume_discount_pct(config, Decimal('1000')) == Decimal('5')

    def test_oversized_quantity_applies_no_discount(self):
        options = [option('size', {'large': 100})]
        rules = [volume_rule([{'min_qty': 1, 'discount_pct': 10}])]

        result = estimate(options, {'size': 'large', 'quantity': '1e30'}, rules)

        assert result == Decimal('100.00')

    def test_oversized_contract_price_keeps_subtotal(self):
        options = [option('size', {'large': 200})]
        contract = ContractContext(has_contract=True, pricing={TIER_ID: {'base_price': 1e30}})

        result = estimate(options, {'size': 'large'}, tier_id=TIER_ID, contract=contract)

        assert result == Decimal('200.00')

    def test_deltas_past_the_stored_range_are_skipped(self):
        options = [option(f'extra{i}', {'yes': 900000000}) for i in range(14)]
        answers = {f'extra{i}': 'yes' for i in range(14)}

        result = estimate(options, answers)

        # 11 * 900000000 is the most that stays below 9999999999.99
        assert result == Decimal('9900000000.00')

    def test_discounts_past_the_stored_range_are_skipped(self):
        options = [option('size', {'large': 100})]
        rules = [
            volume_rule([{'min_qty': 1, 'discount_pct': -1e9}]),
            volume_rule([{'min_qty': 1, 'discount_pct': -1e9}]),
        ]

        result = estimate(options, {'size': 'large', 'quantity': 5}, rules)

        # 100 * (1 + 10000000); the second rule would overflow
        assert result == Decimal('1000000100.00')

    def test_flat_discount_past_the_stored_range_keeps_subtotal(self):
        options = [option('size', {'large': 100})]
        contract = ContractContext(discount_pct=Decimal('1e12'))

        result = estimate(options, {'size': 'large'}, tier_id=TIER_ID, contract=contract)

        assert result == Decimal('100.00')

"""Unit tests for discount rule selection"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from src.domain.discount import (
    DiscountSource,
    calculate_best_discount,
    does_rule_apply,
    find_best_rule,
    parse_rules,
    validate_rules,
)
from src.domain.errors import DiscountRuleError, ErrorCodes

NOW = datetime(2024, 6, 1, 9, 0, 0)


def rule(rule_id, value, condition="always", hours=None):
    return {
        "id": rule_id,
        "name": rule_id.replace("_", " ").title(),
        "condition": {"type": condition, "hours": hours},
        "discount": {"type": "fixed_amount", "value": value},
    }


class TestDoesRuleApply:

    def test_always(self):
        [r] = parse_rules([rule("all", 100)])
        assert does_rule_apply(r, -5) is True

    def test_early_bird_boundary_is_inclusive(self):
        [r] = parse_rules([rule("early", 100, "hours_before_min", 48)])
        assert does_rule_apply(r, 48) is True
        assert does_rule_apply(r, 47.9) is False

    def test_last_minute_window(self):
        [r] = parse_rules([rule("late", 100, "hours_before_max", 2)])
        assert does_rule_apply(r, 2) is True
        assert does_rule_apply(r, 0) is True
        assert does_rule_apply(r, 2.5) is False

    def test_last_minute_never_applies_after_start(self):
        [r] = parse_rules([rule("late", 100, "hours_before_max", 2)])
        assert does_rule_apply(r, -0.5) is False


class TestFindBestRule:

    def test_largest_value_wins(self):
        rules = parse_rules([rule("small", 100), rule("big", 500), rule("mid", 300)])
        assert find_best_rule(rules, 10).id == "big"

    def test_first_rule_wins_a_tie(self):
        rules = parse_rules([rule("first", 300), rule("second", 300)])
        assert find_best_rule(rules, 10).id == "first"

    def test_zero_value_rule_never_wins(self):
        rules = parse_rules([rule("zero", 0)])
        assert find_best_rule(rules, 10) is None


class TestCalculateBestDiscount:

    def test_instance_rules_take_precedence(self):
        """
        Given: A template rule worth 500 and an instance rule worth 200
        When: Both apply
        Then: The instance rule is chosen even though it is smaller
        """
        template_rules = parse_rules([rule("template_big", 500)])
        instance_rules = parse_rules([rule("instance_small", 200)])

        applied = calculate_best_discount(1000, template_rules, instance_rules, NOW + timedelta(hours=5), NOW, 50)

        assert applied.rule_id == "instance_small"
        assert applied.source == DiscountSource.INSTANCE_RULE
        assert applied.amount_saved == 200
        assert applied.credits_saved == Decimal("4")

    def test_falls_back_to_template_when_no_instance_rule_applies(self):
        template_rules = parse_rules([rule("template", 300)])
        instance_rules = parse_rules([rule("early", 800, "hours_before_min", 72)])

        applied = calculate_best_discount(1000, template_rules, instance_rules, NOW + timedelta(hours=5), NOW, 50)

        assert applied.rule_id == "template"
        assert applied.source == DiscountSource.TEMPLATE_RULE

    def test_amount_saved_capped_at_base_price(self):
        applied = calculate_best_discount(400, parse_rules([rule("huge", 1000)]), [], NOW, NOW, 50)
        assert applied.amount_saved == 400

    def test_no_rules(self):
        assert calculate_best_discount(1000, [], None, NOW, NOW, 50) is None


class TestValidateRules:

    def test_duplicate_id(self):
        with pytest.raises(DiscountRuleError) as exc:
            validate_rules(parse_rules([rule("a", 100), rule("a", 200)]))
        assert exc.value.code == ErrorCodes.INVALID_DISCOUNT_RULE

    def test_negative_value(self):
        with pytest.raises(DiscountRuleError):
            validate_rules(parse_rules([rule("a", -100)]))

    def test_hours_required_for_timed_conditions(self):
        with pytest.raises(DiscountRuleError):
            validate_rules(parse_rules([rule("a", 100, "hours_before_min")]))

"""Discount rules

Business-defined fixed-amount reductions evaluated against how far ahead of
the class a booking is made. Instance-level rules take precedence over the
template's; within one rule set the largest discount wins and the earliest
rule wins a tie.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, TypeAdapter

from src.domain.errors import DiscountRuleError, ErrorCodes


class DiscountConditionType(str, Enum):
    ALWAYS = "always"
    HOURS_BEFORE_MIN = "hours_before_min"    # Early bird
    HOURS_BEFORE_MAX = "hours_before_max"    # Last minute


class DiscountType(str, Enum):
    FIXED_AMOUNT = "fixed_amount"


class DiscountSource(str, Enum):
    INSTANCE_RULE = "instance_rule"
    TEMPLATE_RULE = "template_rule"


class DiscountCondition(BaseModel):
    type: DiscountConditionType
    hours: Optional[float] = None


class DiscountValue(BaseModel):
    type: DiscountType = DiscountType.FIXED_AMOUNT
    value: int  # cents


class DiscountRule(BaseModel):
    id: str
    name: str
    condition: DiscountCondition
    discount: DiscountValue


class AppliedDiscount(BaseModel):
    """Discount attached to a booking at booking time"""

    rule_id: str
    rule_name: str
    source: DiscountSource
    discount_type: DiscountType = DiscountType.FIXED_AMOUNT
    amount_saved: int              # cents actually taken off the base price
    credits_saved: Decimal


_rules_adapter = TypeAdapter(List[DiscountRule])


def parse_rules(raw: Optional[List[Dict[str, Any]]]) -> List[DiscountRule]:
    if not raw:
        return []
    return _rules_adapter.validate_python(raw)


def validate_rules(rules: List[DiscountRule]) -> None:
    seen = set()
    for rule in rules:
        if rule.id in seen:
            raise DiscountRuleError(
                ErrorCodes.INVALID_DISCOUNT_RULE,
                f"Duplicate discount rule ID: {rule.id}",
                {"rule_id": rule.id},
            )
        seen.add(rule.id)

        if rule.discount.value < 0:
            raise DiscountRuleError(
                ErrorCodes.INVALID_DISCOUNT_RULE,
                "Discount value cannot be negative",
                {"rule_id": rule.id, "value": rule.discount.value},
            )

        if rule.condition.type != DiscountConditionType.ALWAYS:
            hours = rule.condition.hours
            if hours is None or hours < 0:
                raise DiscountRuleError(
                    ErrorCodes.INVALID_DISCOUNT_RULE,
                    f"Condition {rule.condition.type.value} requires non-negative hours",
                    {"rule_id": rule.id, "hours": hours},
                )


def hours_until(class_start: datetime, now: datetime) -> float:
    return (class_start - now).total_seconds() / 3600


def does_rule_apply(rule: DiscountRule, hours_until_class: float) -> bool:
    condition = rule.condition
    if condition.type == DiscountConditionType.ALWAYS:
        return True
    if condition.hours is None:
        return False
    if condition.type == DiscountConditionType.HOURS_BEFORE_MIN:
        return hours_until_class >= condition.hours
    if condition.type == DiscountConditionType.HOURS_BEFORE_MAX:
        # A class that already started is never "last minute"
        return 0 <= hours_until_class <= condition.hours
    return False


def find_best_rule(rules: List[DiscountRule], hours_until_class: float) -> Optional[DiscountRule]:
    """Largest matching value wins; strict comparison keeps the first of equals"""
    best: Optional[DiscountRule] = None
    best_value = 0
    for rule in rules:
        if does_rule_apply(rule, hours_until_class) and rule.discount.value > best_value:
            best = rule
            best_value = rule.discount.value
    return best


def calculate_best_discount(
    base_price: int,
    template_rules: Optional[List[DiscountRule]],
    instance_rules: Optional[List[DiscountRule]],
    class_start: datetime,
    now: datetime,
    credits_to_cents_ratio: int,
) -> Optional[AppliedDiscount]:
    """
    Pick the discount for a booking, or None

    amount_saved is capped at base_price so the discounted base never goes
    below zero.
    """
    hours_until_class = hours_until(class_start, now)

    for source, rules in (
        (DiscountSource.INSTANCE_RULE, instance_rules),
        (DiscountSource.TEMPLATE_RULE, template_rules),
    ):
        if not rules:
            continue
        rule = find_best_rule(rules, hours_until_class)
        if rule is None:
            continue
        amount_saved = min(rule.discount.value, max(base_price, 0))
        return AppliedDiscount(
            rule_id=rule.id,
            rule_name=rule.name,
            source=source,
            amount_saved=amount_saved,
            credits_saved=Decimal(amount_saved) / Decimal(credits_to_cents_ratio),
        )

    return None

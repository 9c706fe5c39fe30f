"""Booking pricing

Composes the base price, questionnaire fees and the best discount into the
final booking price. All prices are integer cents; the ledger charges credits.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from src.domain.class_template import DEFAULT_PRICE_CENTS
from src.domain.discount import AppliedDiscount, DiscountRule, calculate_best_discount
from src.domain.errors import ErrorCodes, PricingError
from src.domain.questionnaire import AnswerInput, Question, QuestionnaireSnapshot
from src.domain.questionnaire_rules import build_snapshot, validate_answers


@dataclass(frozen=True)
class BookingPrice:
    original_price: int
    questionnaire_fees: int
    discount_amount: int
    final_price: int
    final_credits: Decimal
    applied_discount: Optional[AppliedDiscount] = None
    questionnaire_snapshot: Optional[QuestionnaireSnapshot] = None

    @property
    def is_free(self) -> bool:
        return self.final_price == 0


def cents_to_credits(cents: int, ratio: int) -> Decimal:
    return Decimal(cents) / Decimal(ratio)


def resolve_base_price(instance_price: Optional[int], template_price: Optional[int]) -> int:
    """Instance override, then template price, then the platform default"""
    if instance_price is not None:
        return instance_price
    if template_price is not None:
        return template_price
    return DEFAULT_PRICE_CENTS


def compute_final_price(base_price: int, questionnaire_fees: int, discount_amount: int) -> int:
    """Discount reduces the base only; fees are always paid in full"""
    return max(0, base_price - discount_amount) + questionnaire_fees


def price_booking(
    base_price: int,
    questions: Optional[List[Question]],
    answers: Optional[List[AnswerInput]],
    template_rules: Optional[List[DiscountRule]],
    instance_rules: Optional[List[DiscountRule]],
    class_start: datetime,
    now: datetime,
    credits_to_cents_ratio: int,
) -> BookingPrice:
    """
    Price one booking

    Answers are validated against the effective questionnaire before any fee
    is computed, so a missing required answer raises without side effects.
    """
    if base_price is None or base_price < 0:
        raise PricingError(
            ErrorCodes.INVALID_PRICE,
            "Base price must be a non-negative number of cents",
            {"base_price": base_price},
        )

    questions = questions or []
    answers = answers or []
    validate_answers(questions, answers)

    snapshot = build_snapshot(questions, answers) if questions else None
    fees = snapshot.total_fees if snapshot else 0

    discount = calculate_best_discount(
        base_price, template_rules, instance_rules, class_start, now, credits_to_cents_ratio
    )
    discount_amount = discount.amount_saved if discount else 0

    final_price = compute_final_price(base_price, fees, discount_amount)

    return BookingPrice(
        original_price=base_price,
        questionnaire_fees=fees,
        discount_amount=discount_amount,
        final_price=final_price,
        final_credits=cents_to_credits(final_price, credits_to_cents_ratio),
        applied_discount=discount,
        questionnaire_snapshot=snapshot,
    )

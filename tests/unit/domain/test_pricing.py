"""Unit tests for booking price composition"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from src.domain.discount import parse_rules
from src.domain.errors import ErrorCodes, PricingError, QuestionnaireError
from src.domain.pricing import compute_final_price, price_booking, resolve_base_price
from src.domain.questionnaire import AnswerInput, parse_questionnaire

NOW = datetime(2024, 6, 1, 9, 0, 0)
START = NOW + timedelta(hours=24)

QUESTIONS = parse_questionnaire([
    {
        "id": "equipment",
        "question": "Equipment",
        "type": "multi_select",
        "options": [
            {"id": "mat", "label": "Mat", "fee": 200},
            {"id": "strap", "label": "Strap", "fee": 150},
        ],
    },
    {"id": "waiver", "question": "Accept waiver", "type": "boolean", "required": True},
])

ANSWERS = [
    AnswerInput(question_id="equipment", multi_select_answer=["mat", "strap"]),
    AnswerInput(question_id="waiver", boolean_answer=True),
]

DISCOUNT = parse_rules([{
    "id": "promo",
    "name": "Promo",
    "condition": {"type": "always"},
    "discount": {"type": "fixed_amount", "value": 500},
}])


class TestPriceBooking:

    def test_discount_and_fees_compose(self):
        """
        Given: Base 1000, fees 350, discount 500
        When: The booking is priced
        Then: Final price is 850 cents, 17 credits
        """
        price = price_booking(1000, QUESTIONS, ANSWERS, DISCOUNT, [], START, NOW, 50)

        assert price.original_price == 1000
        assert price.questionnaire_fees == 350
        assert price.discount_amount == 500
        assert price.final_price == 850
        assert price.final_credits == Decimal("17")
        assert price.applied_discount.rule_id == "promo"
        assert price.questionnaire_snapshot.total_fees == 350

    def test_no_questionnaire_no_snapshot(self):
        price = price_booking(1000, [], [], [], [], START, NOW, 50)

        assert price.final_price == 1000
        assert price.questionnaire_snapshot is None
        assert price.applied_discount is None

    def test_missing_required_answer_raises_before_pricing(self):
        answers = [AnswerInput(question_id="equipment", multi_select_answer=["mat"])]

        with pytest.raises(QuestionnaireError) as exc:
            price_booking(1000, QUESTIONS, answers, DISCOUNT, [], START, NOW, 50)

        assert exc.value.code == ErrorCodes.QUESTION_REQUIRED_UNANSWERED

    def test_negative_base_price_rejected(self):
        with pytest.raises(PricingError) as exc:
            price_booking(-1, [], [], [], [], START, NOW, 50)
        assert exc.value.code == ErrorCodes.INVALID_PRICE

    def test_discount_never_reduces_fees(self):
        price = price_booking(300, QUESTIONS, ANSWERS, DISCOUNT, [], START, NOW, 50)

        assert price.discount_amount == 300
        assert price.final_price == 350

    def test_free_class(self):
        price = price_booking(0, [], [], [], [], START, NOW, 50)
        assert price.is_free
        assert price.final_credits == Decimal("0")


def test_compute_final_price_clamps_discounted_base():
    assert compute_final_price(100, 50, 500) == 50


def test_resolve_base_price_fallbacks():
    assert resolve_base_price(0, 1500) == 0
    assert resolve_base_price(None, 1500) == 1500
    assert resolve_base_price(None, None) == 1000

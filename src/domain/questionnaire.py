"""Questionnaire value objects

Pre-booking questions a business attaches to a class, the consumer's answers,
and the immutable snapshot stored on a booking. Fees are integer cents.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, TypeAdapter


class QuestionType(str, Enum):
    BOOLEAN = "boolean"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    NUMBER = "number"
    TEXT = "text"


SELECT_TYPES = (QuestionType.SINGLE_SELECT, QuestionType.MULTI_SELECT)


class QuestionOption(BaseModel):
    id: str
    label: str
    fee: Optional[int] = None


class BooleanConfig(BaseModel):
    fee_on_true: Optional[int] = None


class NumberConfig(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    integer: bool = False
    fee: Optional[int] = None


class TextConfig(BaseModel):
    max_length: Optional[int] = None
    fee: Optional[int] = None


class Question(BaseModel):
    id: str
    question: str
    type: QuestionType
    required: bool = False
    options: Optional[List[QuestionOption]] = None
    boolean_config: Optional[BooleanConfig] = None
    number_config: Optional[NumberConfig] = None
    text_config: Optional[TextConfig] = None


class AnswerInput(BaseModel):
    """Answer as submitted by the consumer; exactly one value field should be set"""

    question_id: str
    boolean_answer: Optional[bool] = None
    single_select_answer: Optional[str] = None
    multi_select_answer: Optional[List[str]] = None
    number_answer: Optional[float] = None
    text_answer: Optional[str] = None


class QuestionAnswer(AnswerInput):
    """Answer with its computed fee, as stored on a booking"""

    fee_applied: int = 0


class QuestionnaireSnapshot(BaseModel):
    """Booking-time copy of the questions and priced answers"""

    questionnaire: List[Question] = Field(default_factory=list)
    answers: List[QuestionAnswer] = Field(default_factory=list)
    total_fees: int = 0


ANSWER_FIELDS: Dict[QuestionType, str] = {
    QuestionType.BOOLEAN: "boolean_answer",
    QuestionType.SINGLE_SELECT: "single_select_answer",
    QuestionType.MULTI_SELECT: "multi_select_answer",
    QuestionType.NUMBER: "number_answer",
    QuestionType.TEXT: "text_answer",
}

_questionnaire_adapter = TypeAdapter(List[Question])


def parse_questionnaire(raw: Optional[List[Dict[str, Any]]]) -> List[Question]:
    if not raw:
        return []
    return _questionnaire_adapter.validate_python(raw)


def dump_questionnaire(questions: List[Question]) -> List[Dict[str, Any]]:
    return [question.model_dump(mode="json") for question in questions]

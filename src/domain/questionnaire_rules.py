"""Questionnaire rules

Pure functions over questionnaire definitions and answers. Validation raises
QuestionnaireError on the first violation; fee calculation never raises.
"""

import math
from typing import Dict, Iterable, List, Optional

from src.domain.errors import ErrorCodes, QuestionnaireError
from src.domain.questionnaire import (
    ANSWER_FIELDS,
    SELECT_TYPES,
    AnswerInput,
    Question,
    QuestionAnswer,
    QuestionnaireSnapshot,
    QuestionType,
)


def _question_fees(question: Question) -> Iterable[tuple]:
    """Yield (label, fee) for every fee configured on a question"""
    if question.boolean_config is not None:
        yield "fee_on_true", question.boolean_config.fee_on_true
    if question.number_config is not None:
        yield "number_fee", question.number_config.fee
    if question.text_config is not None:
        yield "text_fee", question.text_config.fee
    for option in question.options or []:
        yield f"option:{option.id}", option.fee


def validate_definition(questions: List[Question]) -> None:
    """Check a questionnaire definition before it is attached to a class"""
    seen_ids = set()

    for question in questions:
        if question.id in seen_ids:
            raise QuestionnaireError(
                ErrorCodes.DUPLICATE_QUESTION_ID,
                f"Duplicate question ID: {question.id}",
                {"question_id": question.id},
            )
        seen_ids.add(question.id)

        if question.type in SELECT_TYPES and not question.options:
            raise QuestionnaireError(
                ErrorCodes.SELECT_OPTIONS_REQUIRED,
                f'Select question "{question.question}" must have at least one option',
                {"question_id": question.id},
            )

        option_ids = set()
        for option in question.options or []:
            if option.id in option_ids:
                raise QuestionnaireError(
                    ErrorCodes.DUPLICATE_OPTION_ID,
                    f'Duplicate option ID in question "{question.question}"',
                    {"question_id": question.id, "option_id": option.id},
                )
            option_ids.add(option.id)

        config = question.number_config
        if config is not None and config.min is not None and config.max is not None and config.min > config.max:
            raise QuestionnaireError(
                ErrorCodes.INVALID_NUMBER_BOUNDS,
                f"Number min ({config.min}) cannot be greater than max ({config.max})",
                {"question_id": question.id, "min": config.min, "max": config.max},
            )

        for label, fee in _question_fees(question):
            if fee is not None and fee < 0:
                raise QuestionnaireError(
                    ErrorCodes.NEGATIVE_FEE,
                    "Fee cannot be negative",
                    {"question_id": question.id, "fee": label},
                )


def has_answer_value(answer: AnswerInput) -> bool:
    """True when the answer carries something that counts as answering"""
    if answer.boolean_answer is not None:
        return True
    if answer.single_select_answer is not None:
        return True
    if answer.multi_select_answer:
        return True
    if answer.number_answer is not None:
        return True
    if answer.text_answer:
        return True
    return False


def matches_type(question: Question, answer: AnswerInput) -> bool:
    return getattr(answer, ANSWER_FIELDS[question.type]) is not None


def _constraint_error(question: Question, message: str, **details) -> QuestionnaireError:
    return QuestionnaireError(
        ErrorCodes.CONSTRAINT_VIOLATED,
        message,
        {"question_id": question.id, **details},
    )


def validate_constraints(question: Question, answer: AnswerInput) -> None:
    if question.type == QuestionType.NUMBER:
        value = answer.number_answer
        if value is None:
            return
        config = question.number_config
        if not math.isfinite(value):
            raise _constraint_error(question, "Number must be finite")
        if config is None:
            return
        if config.min is not None and value < config.min:
            raise _constraint_error(question, f"Number must be at least {config.min}", min=config.min)
        if config.max is not None and value > config.max:
            raise _constraint_error(question, f"Number must be at most {config.max}", max=config.max)
        if config.integer and not (math.isfinite(value) and float(value).is_integer()):
            raise _constraint_error(question, "Number must be an integer", integer=True)

    elif question.type == QuestionType.TEXT:
        if not answer.text_answer or question.text_config is None:
            return
        max_length = question.text_config.max_length
        if max_length is not None and len(answer.text_answer) > max_length:
            raise _constraint_error(
                question, f"Text must be at most {max_length} characters", max_length=max_length
            )

    elif question.type in SELECT_TYPES:
        valid_options = {option.id for option in question.options or []}
        if question.type == QuestionType.SINGLE_SELECT:
            selected = [answer.single_select_answer] if answer.single_select_answer else []
        else:
            selected = answer.multi_select_answer or []
        for option_id in selected:
            if option_id not in valid_options:
                raise _constraint_error(question, "Invalid option selected", option_id=option_id)


def validate_answers(questions: List[Question], answers: List[AnswerInput]) -> None:
    """
    Validate consumer answers against the effective questionnaire

    Checks run in this order: one answer per question, required questions
    answered, answer question ids known and typed correctly, then per-answer
    value constraints.
    """
    answers_by_question: Dict[str, AnswerInput] = {}
    for answer in answers:
        if answer.question_id in answers_by_question:
            raise QuestionnaireError(
                ErrorCodes.DUPLICATE_ANSWER,
                f"Question answered more than once: {answer.question_id}",
                {"question_id": answer.question_id},
            )
        answers_by_question[answer.question_id] = answer

    for question in questions:
        if not question.required:
            continue
        answer = answers_by_question.get(question.id)
        if answer is None or not has_answer_value(answer):
            raise QuestionnaireError(
                ErrorCodes.QUESTION_REQUIRED_UNANSWERED,
                f'Required question not answered: "{question.question}"',
                {"question_id": question.id},
            )

    questions_by_id = {question.id: question for question in questions}

    for answer in answers:
        question = questions_by_id.get(answer.question_id)
        if question is None:
            raise QuestionnaireError(
                ErrorCodes.UNKNOWN_QUESTION,
                f"Answer references unknown question: {answer.question_id}",
                {"question_id": answer.question_id},
            )
        if has_answer_value(answer) and not matches_type(question, answer):
            raise QuestionnaireError(
                ErrorCodes.WRONG_ANSWER_TYPE,
                f'Answer type mismatch for question: "{question.question}"',
                {"question_id": question.id, "expected_type": question.type.value},
            )

    for answer in answers:
        validate_constraints(questions_by_id[answer.question_id], answer)


def calculate_fee(question: Question, answer: AnswerInput) -> int:
    """Fee in cents for one answer; 0 when nothing applies"""
    if question.type == QuestionType.BOOLEAN:
        if answer.boolean_answer is True and question.boolean_config and question.boolean_config.fee_on_true:
            return question.boolean_config.fee_on_true
        return 0

    option_fees = {option.id: option.fee or 0 for option in question.options or []}

    if question.type == QuestionType.SINGLE_SELECT:
        if answer.single_select_answer:
            return option_fees.get(answer.single_select_answer, 0)
        return 0

    if question.type == QuestionType.MULTI_SELECT:
        return sum(option_fees.get(option_id, 0) for option_id in answer.multi_select_answer or [])

    if question.type == QuestionType.NUMBER:
        if answer.number_answer is not None and question.number_config and question.number_config.fee:
            return question.number_config.fee
        return 0

    if question.type == QuestionType.TEXT:
        if answer.text_answer and question.text_config and question.text_config.fee:
            return question.text_config.fee
        return 0

    return 0


def build_snapshot(questions: List[Question], raw_answers: List[AnswerInput]) -> QuestionnaireSnapshot:
    """Price every answer and freeze the question list by value"""
    questions_by_id = {question.id: question for question in questions}
    priced: List[QuestionAnswer] = []

    for raw in raw_answers:
        question = questions_by_id.get(raw.question_id)
        fee = calculate_fee(question, raw) if question is not None else 0
        values = raw.model_dump(exclude={"fee_applied"})
        priced.append(QuestionAnswer(**values, fee_applied=fee))

    return QuestionnaireSnapshot(
        questionnaire=[question.model_copy(deep=True) for question in questions],
        answers=priced,
        total_fees=sum(answer.fee_applied for answer in priced),
    )


def resolve_effective(
    template_questionnaire: Optional[List[Question]],
    instance_questionnaire: Optional[List[Question]],
) -> Optional[List[Question]]:
    """A non-empty instance questionnaire replaces the template's entirely"""
    if instance_questionnaire:
        return instance_questionnaire
    return template_questionnaire

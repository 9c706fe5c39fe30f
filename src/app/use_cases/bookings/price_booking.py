"""PriceBooking Use Case

Read-only price quote for a class instance, using the same pricing path as
BookClass.
"""

from datetime import datetime
from typing import Callable, List, Tuple
from libs.result import Result, Return, Error
from src.app.repositories.class_repository import ClassInstanceRepository, ClassTemplateRepository
from src.app.use_cases.errors import error_from
from src.domain.class_instance import ClassInstance
from src.domain.class_template import ClassTemplate
from src.domain.discount import parse_rules
from src.domain.errors import BookingError, DomainError, ErrorCodes
from src.domain.pricing import BookingPrice, price_booking, resolve_base_price
from src.domain.questionnaire import AnswerInput, parse_questionnaire
from src.domain.questionnaire_rules import resolve_effective
from .dtos import PriceQuoteCommandDTO, PriceQuoteDTO


async def load_class(
    instance_repo: ClassInstanceRepository,
    template_repo: ClassTemplateRepository,
    class_instance_id: str,
    for_update: bool = False,
) -> Tuple[ClassInstance, ClassTemplate]:
    instance = await instance_repo.get_by_id(class_instance_id, for_update=for_update)
    template = await template_repo.get_by_id(instance.template_id) if instance else None
    if not instance or not template:
        raise BookingError(
            ErrorCodes.CLASS_NOT_FOUND,
            f"Class instance {class_instance_id} not found",
            {"class_instance_id": class_instance_id},
        )
    return instance, template


def quote_booking(
    instance: ClassInstance,
    template: ClassTemplate,
    answers: List[AnswerInput],
    now: datetime,
    credits_to_cents_ratio: int,
) -> BookingPrice:
    """Resolve instance overrides against the template and price the booking"""
    questions = resolve_effective(
        parse_questionnaire(template.questionnaire),
        parse_questionnaire(instance.questionnaire),
    )
    return price_booking(
        base_price=resolve_base_price(instance.price, template.price),
        questions=questions,
        answers=answers,
        template_rules=parse_rules(template.discount_rules),
        instance_rules=parse_rules(instance.discount_rules),
        class_start=instance.start_time,
        now=now,
        credits_to_cents_ratio=credits_to_cents_ratio,
    )


class PriceBooking:

    def __init__(
        self,
        instance_repo: ClassInstanceRepository,
        template_repo: ClassTemplateRepository,
        credits_to_cents_ratio: int,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.instance_repo = instance_repo
        self.template_repo = template_repo
        self.credits_to_cents_ratio = credits_to_cents_ratio
        self.clock = clock

    async def execute(self, command: PriceQuoteCommandDTO) -> Result[PriceQuoteDTO]:
        try:
            instance, template = await load_class(self.instance_repo, self.template_repo, command.class_instance_id)
            price = quote_booking(
                instance, template, command.answers, self.clock(), self.credits_to_cents_ratio
            )
            return Return.ok(
                PriceQuoteDTO(
                    class_instance_id=instance.id,
                    original_price=price.original_price,
                    questionnaire_fees=price.questionnaire_fees,
                    discount_amount=price.discount_amount,
                    final_price=price.final_price,
                    final_credits=price.final_credits,
                    applied_discount=price.applied_discount.model_dump(mode="json") if price.applied_discount else None,
                )
            )

        except DomainError as e:
            return Return.err(error_from(e))

        except Exception as e:
            return Return.err(Error(code="PRICE_BOOKING_FAILED", message="Failed to price booking", reason=str(e)))

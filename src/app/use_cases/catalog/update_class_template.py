"""UpdateClassTemplate Use Case

Validates questionnaire and discount definitions before they are stored, so
booking-time pricing only ever sees well-formed definitions.
"""

from libs.result import Result, Return, Error
from src.app.repositories.class_repository import ClassTemplateRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.discount import parse_rules, validate_rules
from src.domain.errors import DomainError
from src.domain.questionnaire import dump_questionnaire, parse_questionnaire
from src.domain.questionnaire_rules import validate_definition
from .dtos import CatalogUpdateResultDTO, UpdateClassTemplateCommandDTO


class UpdateClassTemplate:

    def __init__(self, uow: UnitOfWork, template_repo: ClassTemplateRepository, writer: EntityWriter):
        self.uow = uow
        self.template_repo = template_repo
        self.writer = writer

    async def execute(self, command: UpdateClassTemplateCommandDTO) -> Result[CatalogUpdateResultDTO]:
        try:
            template = await self.template_repo.get_by_id(command.template_id)
            if not template:
                return Return.err(
                    Error(code="CLASS_TEMPLATE_NOT_FOUND", message=f"Class template {command.template_id} not found")
                )

            changes = command.model_dump(exclude_unset=True, exclude={"template_id"})

            if "questionnaire" in changes:
                questions = parse_questionnaire(changes["questionnaire"])
                validate_definition(questions)
                changes["questionnaire"] = dump_questionnaire(questions)

            if "discount_rules" in changes:
                rules = parse_rules(changes["discount_rules"])
                validate_rules(rules)
                changes["discount_rules"] = [rule.model_dump(mode="json") for rule in rules]

            follow_ups = await self.writer.patch(template, changes)
            await self.uow.commit()

            return Return.ok(
                CatalogUpdateResultDTO(
                    entity_id=template.id,
                    updated_fields=sorted(changes),
                    follow_up_kinds=[event.kind.value for event in follow_ups],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="UPDATE_CLASS_TEMPLATE_FAILED", message="Failed to update class template", reason=str(e))
            )

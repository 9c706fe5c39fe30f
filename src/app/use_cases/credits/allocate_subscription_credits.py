"""AllocateSubscriptionCredits Use Case

Grants a subscription's monthly credits and records the allocation as a
SubscriptionEvent, whose insert notifies the subscriber.
"""

from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.errors import DomainError, ErrorCodes
from src.domain.outbox_event import FollowUpKind
from src.domain.subscription import SubscriptionEvent, SubscriptionStatus
from .apply_credit_transaction import to_result_dto
from .dtos import AllocateSubscriptionCreditsCommandDTO, SubscriptionAllocationDTO

SUBSCRIPTION_SYSTEM_ENTITY = "subscriptions"


def allocation_key(subscription_id: str, period: str) -> str:
    """Format: subscription:{subscription_id}:{YYYY-MM}"""
    return f"subscription:{subscription_id}:{period}"


class AllocateSubscriptionCredits:
    """
    Use Case: Allocate one period of subscription credits

    Business Rules:
    1. Idempotency: one allocation per subscription and period
    2. Only active subscriptions allocate
    3. Ledger movement and SubscriptionEvent commit together
    4. A replayed allocation does not record a second event
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        ledger_service: LedgerService,
        writer: EntityWriter,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.ledger_service = ledger_service
        self.writer = writer

    async def execute(self, command: AllocateSubscriptionCreditsCommandDTO) -> Result[SubscriptionAllocationDTO]:
        try:
            subscription = await self.subscription_repo.get_by_id(command.subscription_id)
            if not subscription:
                return Return.err(
                    Error(
                        code=ErrorCodes.SUBSCRIPTION_NOT_FOUND,
                        message=f"Subscription {command.subscription_id} not found",
                    )
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code=ErrorCodes.SUBSCRIPTION_NOT_ACTIVE,
                        message=f"Subscription {subscription.id} is {subscription.status.value}",
                    )
                )

            period = command.period or (command.as_of or datetime.utcnow().date()).strftime("%Y-%m")
            credits = subscription.monthly_credits

            application = await self.ledger_service.apply_transaction(
                allocation_key(subscription.id, period),
                f"{subscription.plan_name} credits for {period}",
                [
                    LedgerEntryInput(amount=credits, user_id=subscription.user_id),
                    LedgerEntryInput(amount=-credits, system_entity=SUBSCRIPTION_SYSTEM_ENTITY),
                ],
            )

            follow_ups = []
            if not application.replayed:
                follow_ups = await self.writer.insert(
                    SubscriptionEvent(
                        subscription_id=subscription.id,
                        event_type="credits_allocated",
                        credits_allocated=credits,
                        period=period,
                    )
                )
                await self.uow.commit()

            return Return.ok(
                SubscriptionAllocationDTO(
                    subscription_id=subscription.id,
                    user_id=subscription.user_id,
                    period=period,
                    credits_allocated=credits,
                    transaction=to_result_dto(application),
                    notification_events=[
                        event.notification_type for event in follow_ups
                        if event.kind == FollowUpKind.NOTIFICATION
                    ],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="ALLOCATE_SUBSCRIPTION_CREDITS_FAILED",
                    message="Failed to allocate subscription credits",
                    reason=str(e),
                )
            )

"""Unit tests for BookClass use case"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.app.services.ledger_service import LedgerApplication
from src.app.use_cases.bookings import BookClass, BookClassCommandDTO
from src.domain.booking import Booking
from src.domain.booking_status import BookingStatus
from src.domain.class_instance import ClassInstance, ClassInstanceStatus
from src.domain.class_template import ClassTemplate
from src.domain.credit_transaction import CreditTransaction
from src.domain.errors import ErrorCodes, LedgerConsistencyError

NOW = datetime(2024, 6, 1, 9, 0, 0)


@pytest.fixture
def template():
    return ClassTemplate(
        id="tpl_1", business_id="biz_1", venue_id="v1", name="Morning Flow", price=1000,
        questionnaire=[{"id": "waiver", "question": "Accept waiver", "type": "boolean", "required": True}],
        discount_rules=[],
    )


@pytest.fixture
def instance():
    return ClassInstance(
        id="ci_1", template_id="tpl_1", venue_id="v1", business_id="biz_1", name="Morning Flow",
        start_time=NOW + timedelta(days=1), end_time=NOW + timedelta(days=1, hours=1),
        capacity=10, booked_count=0,
    )


@pytest.fixture
def repos(template, instance):
    instance_repo = MagicMock()
    instance_repo.get_by_id = AsyncMock(return_value=instance)
    template_repo = MagicMock()
    template_repo.get_by_id = AsyncMock(return_value=template)
    booking_repo = MagicMock()
    booking_repo.find_active = AsyncMock(return_value=None)
    return instance_repo, template_repo, booking_repo


@pytest.fixture
def mock_ledger_service():
    service = MagicMock()
    service.apply_transaction = AsyncMock(
        return_value=LedgerApplication(
            transaction=CreditTransaction(idempotency_key="booking:x", description="Booking"),
            balances={"user:usr_1": Decimal("30")},
        )
    )
    return service


@pytest.fixture
def mock_writer():
    writer = MagicMock()
    writer.insert = AsyncMock(return_value=[])
    writer.patch = AsyncMock(return_value=[])
    return writer


@pytest.fixture
def use_case(mock_uow, repos, mock_ledger_service, mock_writer):
    instance_repo, template_repo, booking_repo = repos
    return BookClass(
        mock_uow, instance_repo, template_repo, booking_repo, mock_ledger_service, mock_writer, 50,
        clock=lambda: NOW,
    )


def command(**overrides):
    values = {
        "user_id": "usr_1",
        "class_instance_id": "ci_1",
        "answers": [{"question_id": "waiver", "boolean_answer": True}],
    }
    values.update(overrides)
    return BookClassCommandDTO(**values)


@pytest.mark.asyncio
class TestBookClass:

    async def test_paid_booking_debits_user_and_credits_business(
        self, use_case, mock_uow, mock_ledger_service, mock_writer, instance
    ):
        result = await use_case.execute(command())

        assert result.is_ok()
        assert result.value.status == "pending"
        assert result.value.final_price == 1000
        assert result.value.credits_paid == Decimal("20")

        key, _, entries = mock_ledger_service.apply_transaction.call_args.args
        booking = mock_writer.insert.call_args.args[0]
        assert key == f"booking:{booking.id}"
        assert [(e.amount, e.user_id, e.business_id) for e in entries] == [
            (Decimal("-20"), "usr_1", None),
            (Decimal("20"), None, "biz_1"),
        ]
        assert booking.credit_transaction_key == key
        assert booking.questionnaire_answers["answers"][0]["boolean_answer"] is True
        mock_writer.patch.assert_called_once_with(instance, {"booked_count": 1})
        mock_uow.commit.assert_called_once()

    async def test_missing_required_answer_charges_nothing(
        self, use_case, mock_uow, mock_ledger_service, mock_writer
    ):
        result = await use_case.execute(command(answers=[]))

        assert result.error.code == ErrorCodes.QUESTION_REQUIRED_UNANSWERED
        mock_ledger_service.apply_transaction.assert_not_called()
        mock_writer.insert.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_existing_active_booking_is_returned(self, use_case, repos, mock_ledger_service, mock_uow):
        _, _, booking_repo = repos
        booking_repo.find_active = AsyncMock(return_value=Booking(
            id="bk_1", user_id="usr_1", business_id="biz_1", class_instance_id="ci_1",
            status=BookingStatus.PENDING, original_price=1000, final_price=1000, credits_paid=Decimal("20"),
        ))

        result = await use_case.execute(command())

        assert result.value.already_booked is True
        assert result.value.booking_id == "bk_1"
        mock_ledger_service.apply_transaction.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_full_class(self, use_case, instance):
        instance.booked_count = 10

        result = await use_case.execute(command())

        assert result.error.code == ErrorCodes.CLASS_FULL

    async def test_cancelled_instance_not_bookable(self, use_case, instance):
        instance.status = ClassInstanceStatus.CANCELLED

        result = await use_case.execute(command())

        assert result.error.code == ErrorCodes.CLASS_NOT_BOOKABLE

    async def test_unknown_instance(self, use_case, repos):
        instance_repo, _, _ = repos
        instance_repo.get_by_id = AsyncMock(return_value=None)

        result = await use_case.execute(command())

        assert result.error.code == ErrorCodes.CLASS_NOT_FOUND

    async def test_free_class_touches_no_ledger(self, use_case, instance, mock_ledger_service, mock_writer):
        instance.price = 0

        result = await use_case.execute(command())

        assert result.is_ok()
        assert result.value.credits_paid == Decimal("0")
        mock_ledger_service.apply_transaction.assert_not_called()
        assert mock_writer.insert.call_args.args[0].credit_transaction_key is None

    async def test_insufficient_balance_rolls_back(self, use_case, mock_uow, mock_ledger_service, mock_writer):
        mock_ledger_service.apply_transaction = AsyncMock(
            side_effect=LedgerConsistencyError(ErrorCodes.INSUFFICIENT_BALANCE, "Insufficient balance")
        )

        result = await use_case.execute(command())

        assert result.error.code == ErrorCodes.INSUFFICIENT_BALANCE
        mock_writer.insert.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_confirmation_required_starts_awaiting_approval(self, use_case, template):
        template.requires_confirmation = True

        result = await use_case.execute(command())

        assert result.value.status == "awaiting_approval"

    async def test_started_class_not_bookable_by_injected_clock(
        self, repos, mock_uow, mock_ledger_service, mock_writer, instance
    ):
        """
        Given: A clock reading five minutes after the class started
        When: Booking, with a stale time smuggled into the command
        Then: The injected clock decides and the class is not bookable
        """
        instance_repo, template_repo, booking_repo = repos
        late = BookClass(
            mock_uow, instance_repo, template_repo, booking_repo, mock_ledger_service, mock_writer, 50,
            clock=lambda: instance.start_time + timedelta(minutes=5),
        )

        result = await late.execute(command(now=NOW))

        assert "now" not in BookClassCommandDTO.model_fields
        assert result.error.code == ErrorCodes.CLASS_NOT_BOOKABLE
        mock_ledger_service.apply_transaction.assert_not_called()

"""Unit tests for credit ledger rules"""

import pytest
from decimal import Decimal
from src.domain.credit_account import CreditAccount, LedgerEntityType
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.credit_transaction import CreditTransaction, TransactionStatus
from src.domain.errors import ErrorCodes, LedgerConsistencyError, LedgerValidationError
from src.domain.ledger_rules import (
    net_deltas,
    should_proceed,
    validate_sufficient_balance,
    validate_transaction,
)


def balanced_entries():
    return [
        LedgerEntryInput(amount=Decimal("-25"), user_id="usr_1"),
        LedgerEntryInput(amount=Decimal("25"), business_id="biz_1"),
    ]


class TestValidateTransaction:
    """Input checks run in a fixed order and raise distinct codes"""

    def test_valid_transaction_passes(self):
        validate_transaction("booking:bk_1", "Booking", balanced_entries())

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_missing_idempotency_key(self, key):
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction(key, "Booking", balanced_entries())
        assert exc.value.code == ErrorCodes.CREDIT_IDEMPOTENCY_KEY_REQUIRED

    def test_missing_description(self):
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", " ", balanced_entries())
        assert exc.value.code == ErrorCodes.CREDIT_DESCRIPTION_REQUIRED

    def test_empty_entries(self):
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", "Booking", [])
        assert exc.value.code == ErrorCodes.CREDIT_ENTRIES_REQUIRED

    def test_entry_with_two_entities(self):
        entries = [
            LedgerEntryInput(amount=10, user_id="usr_1", business_id="biz_1"),
            LedgerEntryInput(amount=-10, system_entity="issuer"),
        ]
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", "Grant", entries)
        assert exc.value.code == ErrorCodes.CREDIT_INVALID_ENTITY
        assert exc.value.details["entry_index"] == 0

    def test_entry_with_no_entity(self):
        entries = [LedgerEntryInput(amount=10), LedgerEntryInput(amount=-10, system_entity="issuer")]
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", "Grant", entries)
        assert exc.value.code == ErrorCodes.CREDIT_INVALID_ENTITY

    @pytest.mark.parametrize("amount", [0, "abc", float("nan"), float("inf"), True])
    def test_invalid_amount(self, amount):
        entries = [
            LedgerEntryInput(amount=amount, user_id="usr_1"),
            LedgerEntryInput(amount=-10, system_entity="issuer"),
        ]
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", "Grant", entries)
        assert exc.value.code == ErrorCodes.CREDIT_INVALID_AMOUNT

    def test_unbalanced_entries_rejected(self):
        """
        Given: Entries summing to 5
        When: The transaction is validated
        Then: CREDIT_DOUBLE_ENTRY_VIOLATION is raised
        """
        entries = [
            LedgerEntryInput(amount=10, user_id="usr_1"),
            LedgerEntryInput(amount=-5, system_entity="issuer"),
        ]
        with pytest.raises(LedgerValidationError) as exc:
            validate_transaction("k1", "Grant", entries)
        assert exc.value.code == ErrorCodes.CREDIT_DOUBLE_ENTRY_VIOLATION

    def test_imbalance_within_tolerance_accepted(self):
        entries = [
            LedgerEntryInput(amount=Decimal("10.0005"), user_id="usr_1"),
            LedgerEntryInput(amount=Decimal("-10"), system_entity="issuer"),
        ]
        validate_transaction("k1", "Grant", entries)


class TestShouldProceed:

    def test_new_key_proceeds(self):
        assert should_proceed(None) is True

    def test_completed_key_replays(self):
        existing = CreditTransaction(idempotency_key="k1", description="x", status=TransactionStatus.COMPLETED)
        assert should_proceed(existing) is False

    def test_pending_key_proceeds(self):
        existing = CreditTransaction(idempotency_key="k1", description="x", status=TransactionStatus.PENDING)
        assert should_proceed(existing) is True

    def test_failed_key_raises(self):
        existing = CreditTransaction(idempotency_key="k1", description="x", status=TransactionStatus.FAILED)
        with pytest.raises(LedgerConsistencyError) as exc:
            should_proceed(existing)
        assert exc.value.code == ErrorCodes.CREDIT_TRANSACTION_FAILED


class TestSufficientBalance:

    def test_user_debit_larger_than_balance_raises(self):
        account = CreditAccount(entity_type=LedgerEntityType.USER, entity_id="usr_1", balance=Decimal("10"))
        with pytest.raises(LedgerConsistencyError) as exc:
            validate_sufficient_balance(account, Decimal("-25"))
        assert exc.value.code == ErrorCodes.INSUFFICIENT_BALANCE
        assert exc.value.details["required"] == "25"

    def test_user_debit_equal_to_balance_passes(self):
        account = CreditAccount(entity_type=LedgerEntityType.USER, entity_id="usr_1", balance=Decimal("25"))
        validate_sufficient_balance(account, Decimal("-25"))

    def test_business_may_go_negative(self):
        account = CreditAccount(entity_type=LedgerEntityType.BUSINESS, entity_id="biz_1", balance=Decimal("0"))
        validate_sufficient_balance(account, Decimal("-100"))

    def test_system_may_go_negative(self):
        account = CreditAccount(entity_type=LedgerEntityType.SYSTEM, entity_id="issuer", balance=Decimal("0"))
        validate_sufficient_balance(account, Decimal("-100"))


def test_net_deltas_sums_per_account():
    entries = [
        LedgerEntryInput(amount=-10, user_id="usr_1"),
        LedgerEntryInput(amount=-5, user_id="usr_1"),
        LedgerEntryInput(amount=15, business_id="biz_1"),
    ]

    deltas = net_deltas(entries)

    assert deltas == {
        (LedgerEntityType.USER, "usr_1"): Decimal("-15"),
        (LedgerEntityType.BUSINESS, "biz_1"): Decimal("15"),
    }

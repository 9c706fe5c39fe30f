"""Credit ledger rules

Pure checks for a proposed credit transaction. Each check raises a
LedgerValidationError / LedgerConsistencyError with its own code.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional

from src.domain.credit_account import CreditAccount, LedgerEntityType
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.credit_transaction import CreditTransaction, TransactionStatus
from src.domain.errors import ErrorCodes, LedgerConsistencyError, LedgerValidationError

DOUBLE_ENTRY_TOLERANCE = Decimal("0.001")


def to_decimal(amount) -> Optional[Decimal]:
    """Convert a caller-supplied amount to Decimal, None if it is not a number"""
    if isinstance(amount, bool) or amount is None:
        return None
    try:
        return amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        return None


def validate_idempotency_key(idempotency_key: Optional[str]) -> None:
    if not idempotency_key or not idempotency_key.strip():
        raise LedgerValidationError(
            ErrorCodes.CREDIT_IDEMPOTENCY_KEY_REQUIRED,
            "Idempotency key required",
        )


def validate_description(description: Optional[str]) -> None:
    if not description or not description.strip():
        raise LedgerValidationError(
            ErrorCodes.CREDIT_DESCRIPTION_REQUIRED,
            "Transaction description required",
        )


def validate_has_entries(entries: Optional[List[LedgerEntryInput]]) -> None:
    if not entries:
        raise LedgerValidationError(
            ErrorCodes.CREDIT_ENTRIES_REQUIRED,
            "At least one entry required",
        )


def validate_entry_entities(entries: Iterable[LedgerEntryInput]) -> None:
    for index, entry in enumerate(entries):
        if len(entry.entity_references()) != 1:
            raise LedgerValidationError(
                ErrorCodes.CREDIT_INVALID_ENTITY,
                "Each entry needs exactly one entity",
                {"entry_index": index},
            )


def validate_entry_amounts(entries: Iterable[LedgerEntryInput]) -> None:
    for index, entry in enumerate(entries):
        amount = to_decimal(entry.amount)
        if amount is None or not amount.is_finite() or amount == 0:
            raise LedgerValidationError(
                ErrorCodes.CREDIT_INVALID_AMOUNT,
                "Amount must be non-zero number",
                {"entry_index": index, "amount": str(entry.amount)},
            )


def validate_double_entry_balance(entries: Iterable[LedgerEntryInput]) -> None:
    total = sum((to_decimal(entry.amount) for entry in entries), Decimal("0"))
    if abs(total) > DOUBLE_ENTRY_TOLERANCE:
        raise LedgerValidationError(
            ErrorCodes.CREDIT_DOUBLE_ENTRY_VIOLATION,
            f"Entries must sum to zero. Current: {total}",
            {"total": str(total)},
        )


def validate_transaction(idempotency_key: str, description: str, entries: List[LedgerEntryInput]) -> None:
    """Run every input check in order, raising on the first violation"""
    validate_idempotency_key(idempotency_key)
    validate_description(description)
    validate_has_entries(entries)
    validate_entry_entities(entries)
    validate_entry_amounts(entries)
    validate_double_entry_balance(entries)


def should_proceed(existing: Optional[CreditTransaction]) -> bool:
    """
    Decide what to do with a key that may have been seen before

    Returns False when the stored transaction completed (replay it), True when
    the caller may apply the entries. Raises for a failed key.
    """
    if existing is None:
        return True
    if existing.status == TransactionStatus.COMPLETED:
        return False
    if existing.status == TransactionStatus.FAILED:
        raise LedgerConsistencyError(
            ErrorCodes.CREDIT_TRANSACTION_FAILED,
            "Transaction previously failed and cannot be retried",
            {"idempotency_key": existing.idempotency_key},
        )
    return True


def net_deltas(entries: Iterable[LedgerEntryInput]) -> Dict[tuple, Decimal]:
    """Sum entry amounts per (entity_type, entity_id), preserving first-seen order"""
    deltas: Dict[tuple, Decimal] = {}
    for entry in entries:
        entity = entry.entity()
        deltas[entity] = deltas.get(entity, Decimal("0")) + to_decimal(entry.amount)
    return deltas


def validate_sufficient_balance(account: CreditAccount, delta: Decimal) -> None:
    """Consumer accounts must be able to cover their net debit"""
    if account.entity_type != LedgerEntityType.USER or delta >= 0:
        return
    required = -delta
    if account.balance < required:
        raise LedgerConsistencyError(
            ErrorCodes.INSUFFICIENT_BALANCE,
            f"Insufficient balance. Required: {required}, Available: {account.balance}",
            {
                "entity_type": account.entity_type.value,
                "entity_id": account.entity_id,
                "required": str(required),
                "available": str(account.balance),
            },
        )

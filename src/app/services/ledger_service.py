"""Ledger Service

Applies a validated double-entry credit transaction to account balances.
The service never commits: callers compose it into their own unit of work so
a ledger movement and the write it pays for become durable together.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_account import CreditAccount, account_key
from src.domain.credit_ledger import CreditLedgerEntry, LedgerEntryInput
from src.domain.credit_transaction import CreditTransaction, TransactionStatus
from src.domain.ledger_rules import (
    net_deltas,
    should_proceed,
    to_decimal,
    validate_sufficient_balance,
    validate_transaction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerApplication:
    """Outcome of apply_transaction; replayed is True for a completed key"""

    transaction: CreditTransaction
    balances: Dict[str, Decimal] = field(default_factory=dict)
    replayed: bool = False


class LedgerService:
    """
    Double-entry credit processor

    Business Rules:
    1. Input validated before anything is read (distinct error codes)
    2. Idempotency: a completed key returns its stored result, a failed key raises
    3. Every debited consumer account must cover its net debit before any
       entry is applied (all-or-nothing)
    4. Accounts are locked in a stable order to avoid deadlocks between
       concurrent transactions touching the same accounts
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def apply_transaction(
        self,
        idempotency_key: str,
        description: str,
        entries: List[LedgerEntryInput],
    ) -> LedgerApplication:
        """
        Apply entries atomically within the caller's unit of work

        Raises:
            LedgerValidationError: Malformed input
            LedgerConsistencyError: INSUFFICIENT_BALANCE or CREDIT_TRANSACTION_FAILED
        """
        validate_transaction(idempotency_key, description, entries)

        existing = await self.transaction_repo.get_by_idempotency_key(idempotency_key)
        if not should_proceed(existing):
            logger.info(f"Replaying completed credit transaction {idempotency_key}")
            return LedgerApplication(
                transaction=existing,
                balances=self.stored_balances(existing),
                replayed=True,
            )

        deltas = net_deltas(entries)

        accounts: Dict[tuple, CreditAccount] = {}
        for entity in sorted(deltas, key=lambda e: (e[0].value, e[1])):
            accounts[entity] = await self.account_repo.get_or_create(entity[0], entity[1], for_update=True)

        for entity, delta in deltas.items():
            validate_sufficient_balance(accounts[entity], delta)

        if existing is None:
            transaction = await self.transaction_repo.create(
                CreditTransaction(idempotency_key=idempotency_key, description=description)
            )
        else:
            # Retry of a PENDING transaction left behind by an aborted attempt
            transaction = existing

        balances: Dict[str, Decimal] = {}
        for entity, delta in deltas.items():
            account = accounts[entity]
            new_balance = to_decimal(account.balance) + delta
            await self.account_repo.update_balance(account, new_balance)
            balances[account_key(*entity)] = new_balance

        ledger_entries = []
        for entry in entries:
            entity_type, entity_id = entry.entity()
            ledger_entries.append(
                CreditLedgerEntry(
                    transaction_id=transaction.id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    amount=to_decimal(entry.amount),
                )
            )
        await self.transaction_repo.add_entries(ledger_entries)

        transaction.status = TransactionStatus.COMPLETED
        transaction.balances_after = {key: str(value) for key, value in balances.items()}
        transaction.completed_at = datetime.utcnow()
        transaction = await self.transaction_repo.update(transaction)

        logger.info(
            f"Applied credit transaction {idempotency_key} "
            f"({len(ledger_entries)} entries, {len(balances)} accounts)"
        )
        return LedgerApplication(transaction=transaction, balances=balances)

    async def reverse_transaction(
        self,
        original_key: str,
        idempotency_key: str,
        description: str,
    ) -> Optional[LedgerApplication]:
        """
        Apply the exact negation of a completed transaction

        Returns:
            LedgerApplication, or None if the original key is unknown or not completed
        """
        original = await self.transaction_repo.get_by_idempotency_key(original_key)
        if original is None or original.status != TransactionStatus.COMPLETED:
            return None

        entries = await self.transaction_repo.get_entries(original.id)
        reversal = [entry.to_input().negated() for entry in entries]
        return await self.apply_transaction(idempotency_key, description, reversal)

    async def record_failure(self, idempotency_key: str, description: str, failure_code: str) -> CreditTransaction:
        """
        Mark an idempotency key as permanently failed

        Must run in a fresh unit of work after the failed attempt rolled back.
        """
        transaction = await self.transaction_repo.get_by_idempotency_key(idempotency_key)
        if transaction is None:
            transaction = CreditTransaction(
                idempotency_key=idempotency_key,
                description=description or idempotency_key,
                status=TransactionStatus.FAILED,
                failure_code=failure_code,
            )
            return await self.transaction_repo.create(transaction)

        if transaction.status == TransactionStatus.COMPLETED:
            return transaction

        transaction.status = TransactionStatus.FAILED
        transaction.failure_code = failure_code
        return await self.transaction_repo.update(transaction)

    @staticmethod
    def stored_balances(transaction: CreditTransaction) -> Dict[str, Decimal]:
        return {key: Decimal(value) for key, value in (transaction.balances_after or {}).items()}

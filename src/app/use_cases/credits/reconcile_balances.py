"""ReconcileBalances Use Case

Compares materialized balances with the transaction history they cache.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.app.repositories.point_transaction_repository import PointTransactionRepository
from src.app.repositories.user_repository import UserRepository
from src.domain.credit_account import account_key, LedgerEntityType
from .dtos import AccountDiscrepancyDTO, PointsDiscrepancyDTO, ReconciliationReportDTO

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.000001")


class ReconcileBalances:
    """
    Use Case: Detect drift between cached balances and history

    Read-only. Checks:
    1. Every CreditAccount.balance equals the sum of its ledger entries
    2. Every ledger entity with entries has an account
    3. Every User.points equals the sum of their point transactions
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
        user_repo: UserRepository,
        point_repo: PointTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.user_repo = user_repo
        self.point_repo = point_repo

    async def execute(self) -> Result[ReconciliationReportDTO]:
        try:
            ledger_totals = await self.transaction_repo.sum_entries_by_account()
            accounts = await self.account_repo.list_all()

            account_discrepancies = []
            seen = set()
            for account in accounts:
                entity = (account.entity_type.value, account.entity_id)
                seen.add(entity)
                total = ledger_totals.get(entity, Decimal("0"))
                if abs(Decimal(account.balance) - total) > BALANCE_TOLERANCE:
                    account_discrepancies.append(
                        AccountDiscrepancyDTO(account=account.key, materialized=account.balance, ledger_total=total)
                    )

            for entity, total in ledger_totals.items():
                if entity not in seen and total != 0:
                    account_discrepancies.append(
                        AccountDiscrepancyDTO(
                            account=account_key(LedgerEntityType(entity[0]), entity[1]),
                            materialized=Decimal("0"),
                            ledger_total=total,
                        )
                    )

            point_totals = await self.point_repo.sum_by_user()
            users = await self.user_repo.list_all()

            points_discrepancies = []
            for user in users:
                total = point_totals.get(user.id, 0)
                if (user.points or 0) != total:
                    points_discrepancies.append(
                        PointsDiscrepancyDTO(user_id=user.id, cached_points=user.points or 0, transaction_total=total)
                    )

            report = ReconciliationReportDTO(
                accounts_checked=len(accounts),
                users_checked=len(users),
                account_discrepancies=account_discrepancies,
                points_discrepancies=points_discrepancies,
            )

            if not report.is_consistent:
                logger.warning(
                    f"Reconciliation found {len(account_discrepancies)} account and "
                    f"{len(points_discrepancies)} points discrepancies"
                )

            return Return.ok(report)

        except Exception as e:
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile balances",
                    reason=str(e),
                )
            )

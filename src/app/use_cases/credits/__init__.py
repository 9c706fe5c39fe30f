from .apply_credit_transaction import ApplyCreditTransaction
from .grant_credits import GrantCredits
from .get_balance import GetBalance
from .allocate_subscription_credits import AllocateSubscriptionCredits
from .reconcile_balances import ReconcileBalances
from .dtos import (
    LedgerEntryDTO,
    ApplyTransactionCommandDTO,
    TransactionResultDTO,
    GrantCreditsCommandDTO,
    BalanceResponseDTO,
    AllocateSubscriptionCreditsCommandDTO,
    SubscriptionAllocationDTO,
    ReconciliationReportDTO,
)

__all__ = [
    "ApplyCreditTransaction",
    "GrantCredits",
    "GetBalance",
    "AllocateSubscriptionCredits",
    "ReconcileBalances",
    "LedgerEntryDTO",
    "ApplyTransactionCommandDTO",
    "TransactionResultDTO",
    "GrantCreditsCommandDTO",
    "BalanceResponseDTO",
    "AllocateSubscriptionCreditsCommandDTO",
    "SubscriptionAllocationDTO",
    "ReconciliationReportDTO",
]

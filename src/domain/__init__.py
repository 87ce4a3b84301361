"""Domain package for ledger rules and core models."""

from .errors import (
    ConcurrentCreateConflict,
    ImbalanceError,
    InvalidTransactionError,
    LedgerError,
    MissingCommodityError,
    RateUnavailableError,
    TradingAccountMismatchError,
)
from .models import (
    Account,
    AccountBalance,
    AccountBalancesReport,
    AccountType,
    BalanceQuery,
    Commodity,
    LedgerBook,
    Money,
    SplitDraft,
    Transaction,
)

__all__ = [
    "ConcurrentCreateConflict",
    "ImbalanceError",
    "InvalidTransactionError",
    "LedgerError",
    "MissingCommodityError",
    "RateUnavailableError",
    "TradingAccountMismatchError",
    "Account",
    "AccountBalance",
    "AccountBalancesReport",
    "AccountType",
    "BalanceQuery",
    "Commodity",
    "LedgerBook",
    "Money",
    "SplitDraft",
    "Transaction",
]

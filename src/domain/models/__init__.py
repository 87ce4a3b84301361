"""Domain models package."""

from .accounts import Account, AccountType, LedgerBook
from .balances import (
    AccountBalance,
    AccountBalancesReport,
    BalanceCheck,
    CommodityImbalance,
    ExchangeRate,
    SplitQuantityRow,
)
from .commodities import Commodity
from .money import Money
from .queries import BalanceQuery, PeriodKind
from .transactions import ReconcileState, SplitDraft, Transaction

__all__ = [
    "Account",
    "AccountType",
    "LedgerBook",
    "AccountBalance",
    "AccountBalancesReport",
    "BalanceCheck",
    "CommodityImbalance",
    "ExchangeRate",
    "SplitQuantityRow",
    "Commodity",
    "Money",
    "BalanceQuery",
    "PeriodKind",
    "ReconcileState",
    "SplitDraft",
    "Transaction",
]

"""Application use cases package."""

from .audit_ledger import (
    AuditLedgerUseCase,
    LedgerAuditReport,
    TransactionFinding,
)
from .get_account_balances import GetAccountBalancesUseCase
from .record_transaction import (
    RecordTransactionUseCase,
    SplitInput,
    TransactionInput,
)
from .trading_accounts import TradingAccountProvisioner

__all__ = [
    "AuditLedgerUseCase",
    "LedgerAuditReport",
    "TransactionFinding",
    "GetAccountBalancesUseCase",
    "RecordTransactionUseCase",
    "SplitInput",
    "TransactionInput",
    "TradingAccountProvisioner",
]

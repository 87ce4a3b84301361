"""Error taxonomy of the ledger engine."""

from dataclasses import dataclass

from src.domain.models.balances import CommodityImbalance


class LedgerError(Exception):
    """Base class for ledger engine errors."""


class ImbalanceError(LedgerError):
    """Raised when splits do not sum to zero per commodity or in value.

    Attributes:
        residuals: Offending commodities with their signed residuals.
    """

    def __init__(self, residuals: tuple[CommodityImbalance, ...]) -> None:
        self.residuals = tuple(residuals)
        details = ", ".join(
            f"{item.mnemonic or item.commodity_guid}={item.display_amount}"
            for item in self.residuals
        )
        super().__init__(f"Transaction is not balanced: {details}")


class MissingCommodityError(LedgerError):
    """Raised when a split's account has no resolvable native commodity."""

    def __init__(self, account_guid: str) -> None:
        self.account_guid = account_guid
        super().__init__(
            f"Cannot resolve commodity for account {account_guid}"
        )


class RateUnavailableError(LedgerError):
    """Raised when no exchange rate exists into the base currency."""

    def __init__(self, commodity_guid: str, target_guid: str) -> None:
        self.commodity_guid = commodity_guid
        self.target_guid = target_guid
        super().__init__(
            f"No exchange rate from {commodity_guid} to {target_guid}"
        )


class ConcurrentCreateConflict(LedgerError):
    """Raised by storage when another writer created the same account."""

    def __init__(self, parent_guid: str | None, name: str) -> None:
        self.parent_guid = parent_guid
        self.name = name
        super().__init__(
            f"Account '{name}' already exists under parent {parent_guid}"
        )


class TradingAccountMismatchError(LedgerError):
    """Raised when a trading account holds a different commodity than needed."""

    def __init__(
        self,
        account_guid: str,
        expected_guid: str,
        actual_guid: str | None,
    ) -> None:
        self.account_guid = account_guid
        self.expected_guid = expected_guid
        self.actual_guid = actual_guid
        super().__init__(
            f"Trading account {account_guid} holds commodity {actual_guid}, "
            f"expected {expected_guid}"
        )


@dataclass(frozen=True)
class ValidationIssue:
    """Single boundary validation problem."""

    field: str
    message: str


class InvalidTransactionError(LedgerError, ValueError):
    """Raised when a transaction payload fails boundary validation."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__(
            "; ".join(f"{issue.field}: {issue.message}" for issue in self.issues)
        )


class TransactionNotFoundError(LedgerError):
    """Raised when a transaction to replace does not exist."""

    def __init__(self, tx_guid: str) -> None:
        self.tx_guid = tx_guid
        super().__init__(f"Transaction not found: {tx_guid}")


class ReconciledTransactionError(LedgerError):
    """Raised when replacing a transaction that has reconciled splits."""

    def __init__(self, tx_guid: str) -> None:
        self.tx_guid = tx_guid
        super().__init__(
            f"Cannot modify transaction {tx_guid} with reconciled splits. "
            "Unreconcile first."
        )


__all__ = [
    "LedgerError",
    "ImbalanceError",
    "MissingCommodityError",
    "RateUnavailableError",
    "ConcurrentCreateConflict",
    "TradingAccountMismatchError",
    "ValidationIssue",
    "InvalidTransactionError",
    "TransactionNotFoundError",
    "ReconciledTransactionError",
]

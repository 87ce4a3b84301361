"""Use case to re-check every stored transaction against double-entry rules."""

from dataclasses import dataclass, field
from datetime import date

from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.domain.errors import MissingCommodityError
from src.domain.models import CommodityImbalance, LedgerBook
from src.domain.services.invariants import (
    check_transaction_balance,
    value_residual_entry,
)
from src.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class TransactionFinding:
    """Stored transaction that violates the double-entry invariant.

    Attributes:
        tx_guid: Transaction GUID.
        post_date: Posting date.
        description: Description text.
        residuals: Value residual and per-commodity residuals.
        error: Message when the check could not run at all.
    """

    tx_guid: str
    post_date: date | None
    description: str
    residuals: tuple[CommodityImbalance, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class LedgerAuditReport:
    """Result of a ledger audit."""

    checked: int
    findings: list[TransactionFinding] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """Return True when every transaction balanced."""
        return not self.findings


class AuditLedgerUseCase:
    """Audit a book's stored transactions."""

    def __init__(
        self,
        repository: LedgerReadRepositoryPort,
        book: LedgerBook,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            repository: Port providing ledger reads.
            book: Book whose transactions are checked.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._repository = repository
        self._book = book
        self._logger = logger or get_app_logger()

    def execute(self) -> LedgerAuditReport:
        """Check every transaction touching the book.

        Returns:
            LedgerAuditReport: Count of checked transactions and the
            imbalanced ones.
        """
        book_guids = self._repository.fetch_book_account_guids(
            self._book.root_account_guid
        )
        accounts = self._repository.fetch_accounts(book_guids)
        transactions = self._repository.fetch_transactions(book_guids)
        commodity_guids = sorted(
            {account.commodity_guid for account in accounts if account.commodity_guid}
            | {tx.currency_guid for tx in transactions if tx.currency_guid}
        )
        commodities = (
            self._repository.fetch_commodities(commodity_guids)
            if commodity_guids
            else {}
        )
        commodity_by_account = {
            account.guid: commodities.get(account.commodity_guid)
            for account in accounts
        }

        findings = []
        for transaction in transactions:
            try:
                check = check_transaction_balance(
                    transaction.splits,
                    commodity_by_account,
                )
            except MissingCommodityError as exc:
                findings.append(
                    TransactionFinding(
                        tx_guid=transaction.guid,
                        post_date=transaction.post_date,
                        description=transaction.description,
                        error=str(exc),
                    )
                )
                continue
            if check.balanced:
                continue
            residuals = list(check.imbalances)
            if check.value_residual != 0:
                residuals.insert(
                    0,
                    value_residual_entry(
                        check,
                        commodities.get(transaction.currency_guid),
                    ),
                )
            findings.append(
                TransactionFinding(
                    tx_guid=transaction.guid,
                    post_date=transaction.post_date,
                    description=transaction.description,
                    residuals=tuple(residuals),
                )
            )

        if findings:
            self._logger.warning(
                f"Ledger audit found {len(findings)} imbalanced transactions "
                f"out of {len(transactions)}"
            )
        else:
            self._logger.info(
                f"Ledger audit passed for {len(transactions)} transactions"
            )
        return LedgerAuditReport(checked=len(transactions), findings=findings)


__all__ = [
    "TransactionFinding",
    "LedgerAuditReport",
    "AuditLedgerUseCase",
]

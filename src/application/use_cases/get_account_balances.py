"""Use case to compute account balances for tree display."""

from collections.abc import Callable
from dataclasses import replace
from datetime import date
from decimal import Decimal

from src.application.ports.exchange_rates import ExchangeRatePort
from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.domain.errors import RateUnavailableError
from src.domain.models import (
    AccountBalancesReport,
    BalanceQuery,
    LedgerBook,
)
from src.domain.services.aggregation import (
    AccountTree,
    aggregate_balances,
    rate_commodities,
)
from src.domain.services.validation import validate_balance_sign
from src.infrastructure.logging.logger import get_app_logger
from src.utils.decimal_utils import round_money


class GetAccountBalancesUseCase:
    """Compute hierarchical account balances in the book's base currency."""

    def __init__(
        self,
        repository: LedgerReadRepositoryPort,
        exchange_rates: ExchangeRatePort,
        book: LedgerBook,
        logger=None,
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the use case.

        Args:
            repository: Port providing ledger reads.
            exchange_rates: Port resolving rates into the base currency.
            book: Book configuration with root account and base currency.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Optional clock used for relative periods.
        """
        self._repository = repository
        self._exchange_rates = exchange_rates
        self._book = book
        self._logger = logger or get_app_logger()
        self._today = today or date.today

    def execute(self, query: BalanceQuery | None = None) -> AccountBalancesReport:
        """Return the balance tree for the query.

        Args:
            query: Period and optional subtree root; all time for the whole
                book when omitted.

        Returns:
            AccountBalancesReport: Balances rounded to cents, parents first.

        Raises:
            RuntimeError: If the book has no base currency.
            ValueError: If the subtree root is not part of the book.
        """
        query = query or BalanceQuery()
        base_currency = self._book.base_currency
        if base_currency is None:
            raise RuntimeError("Base currency is not configured for the book")
        start_date, end_date = query.resolve_range(self._today())
        as_of = end_date or self._today()

        book_guids = self._repository.fetch_book_account_guids(
            self._book.root_account_guid
        )
        accounts = self._repository.fetch_accounts(book_guids)
        tree = AccountTree.build(accounts, in_scope=set(book_guids))
        if query.root_guid:
            try:
                tree = tree.subtree(query.root_guid)
            except KeyError as exc:
                raise ValueError(
                    f"Account {query.root_guid} is not part of the book"
                ) from exc

        rows = self._repository.fetch_split_quantities(
            [account.guid for account in tree.accounts]
        )
        needed = rate_commodities(tree, rows, base_currency.guid)
        rates = self._resolve_rates(needed, base_currency.guid, as_of)
        missing = [guid for guid, rate in rates.items() if rate is None]

        balances = aggregate_balances(
            tree,
            rows,
            rates,
            base_currency.guid,
            start_date=start_date,
            end_date=end_date,
        )
        rounded = [
            replace(
                balance,
                total_balance=round_money(balance.total_balance),
                period_balance=round_money(balance.period_balance),
            )
            for balance in balances
        ]
        for balance in rounded:
            validate_balance_sign(
                balance.account_type,
                balance.total_balance,
                self._logger,
            )
        missing_labels = self._label_commodities(missing)
        if missing_labels:
            self._logger.warning(
                f"Balances are partial; missing rates for {', '.join(missing_labels)}"
            )
        self._logger.info(
            f"Computed {len(rounded)} account balances in "
            f"{base_currency.mnemonic} as of {as_of}"
        )
        return AccountBalancesReport(
            currency_code=base_currency.mnemonic,
            start_date=start_date,
            end_date=end_date,
            as_of=as_of,
            balances=rounded,
            missing_rates=tuple(missing_labels),
        )

    def _resolve_rates(
        self,
        commodity_guids: list[str],
        base_currency_guid: str,
        as_of: date,
    ) -> dict[str, Decimal | None]:
        rates: dict[str, Decimal | None] = {}
        for commodity_guid in commodity_guids:
            try:
                rates[commodity_guid] = self._rate_for(
                    commodity_guid,
                    base_currency_guid,
                    as_of,
                )
            except RateUnavailableError as exc:
                self._logger.warning(str(exc))
                rates[commodity_guid] = None
        return rates

    def _rate_for(
        self,
        commodity_guid: str,
        base_currency_guid: str,
        as_of: date,
    ) -> Decimal:
        rate = self._exchange_rates.find_exchange_rate(
            commodity_guid,
            base_currency_guid,
            as_of,
        )
        if rate is None:
            raise RateUnavailableError(commodity_guid, base_currency_guid)
        return rate.rate

    def _label_commodities(self, guids: list[str]) -> list[str]:
        if not guids:
            return []
        commodities = self._repository.fetch_commodities(guids)
        return [
            commodities[guid].mnemonic if guid in commodities else guid
            for guid in guids
        ]


__all__ = ["GetAccountBalancesUseCase"]

"""PieCash-backed read-only ledger repository."""

from collections import defaultdict, deque
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.domain.constants import CURRENCY_NAMESPACE, DEFAULT_CURRENCY_DENOM
from src.domain.models import (
    Account,
    Commodity,
    ExchangeRate,
    Money,
    ReconcileState,
    SplitDraft,
    SplitQuantityRow,
    Transaction,
)
from src.domain.services.normalization import (
    coerce_flag,
    normalize_account_type,
    normalize_mnemonic,
    normalize_namespace,
)
from src.infrastructure.exchange_rates import ExchangeRateResolver
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.piecash_compat import load_piecash, open_piecash_book


class _PieCashBookReader:
    """Opens the book for each read and closes it afterwards."""

    def __init__(self, book_path: Path | str, logger=None) -> None:
        """Initialize the reader.

        Args:
            book_path: Path or URI to the GnuCash book supported by piecash.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        try:
            self._piecash = load_piecash()
        except ImportError as exc:
            raise RuntimeError(
                "piecash is not installed; install it to use the piecash backend"
            ) from exc
        self._book_path = book_path
        self._logger = logger or get_app_logger()

    @contextmanager
    def _open_book(self):
        book = open_piecash_book(self._piecash, self._book_path)
        try:
            yield book
        finally:
            close_method = getattr(book, "close", None)
            if callable(close_method):
                close_method()


class PieCashLedgerRepository(_PieCashBookReader, LedgerReadRepositoryPort):
    """Ledger reads served by piecash instead of raw SQL."""

    def find_root_account_guid(self) -> str | None:
        with self._open_book() as book:
            root = getattr(book, "root_account", None)
            return root.guid if root is not None else None

    def fetch_book_account_guids(self, root_guid: str) -> list[str]:
        with self._open_book() as book:
            accounts = _all_accounts(book)
        if root_guid not in accounts:
            return []
        children: dict[str, list[str]] = defaultdict(list)
        for account in accounts.values():
            parent = getattr(account, "parent", None)
            if parent is not None:
                children[parent.guid].append(account.guid)
        result = []
        queue = deque([root_guid])
        while queue:
            guid = queue.popleft()
            result.append(guid)
            queue.extend(children.get(guid, ()))
        return result

    def fetch_accounts(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Account]:
        wanted = set(account_guids) if account_guids is not None else None
        with self._open_book() as book:
            return [
                self._to_account(account)
                for guid, account in _all_accounts(book).items()
                if wanted is None or guid in wanted
            ]

    def fetch_commodities(self, guids: list[str]) -> dict[str, Commodity]:
        wanted = set(guids)
        with self._open_book() as book:
            return {
                commodity.guid: self._to_commodity(commodity)
                for commodity in book.commodities
                if commodity.guid in wanted
            }

    def find_commodity(self, namespace: str, mnemonic: str) -> Commodity | None:
        target = (normalize_namespace(namespace), normalize_mnemonic(mnemonic))
        with self._open_book() as book:
            for commodity in book.commodities:
                key = (
                    normalize_namespace(commodity.namespace),
                    normalize_mnemonic(commodity.mnemonic),
                )
                if key == target:
                    return self._to_commodity(commodity)
        return None

    def fetch_split_quantities(
        self,
        account_guids: list[str],
    ) -> list[SplitQuantityRow]:
        wanted = set(account_guids)
        rows = []
        with self._open_book() as book:
            for split in book.splits:
                account = split.account
                if account.guid not in wanted:
                    continue
                transaction = getattr(split, "transaction", None)
                rows.append(
                    SplitQuantityRow(
                        account_guid=account.guid,
                        post_date=_coerce_date(
                            getattr(transaction, "post_date", None)
                        ),
                        quantity=_to_money(
                            split.quantity,
                            getattr(account, "commodity_scu", None),
                        ),
                    )
                )
        return rows

    def fetch_transactions(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Transaction]:
        wanted = set(account_guids) if account_guids is not None else None
        transactions = []
        with self._open_book() as book:
            for transaction in book.transactions:
                splits = list(transaction.splits)
                if wanted is not None and not any(
                    split.account.guid in wanted for split in splits
                ):
                    continue
                transactions.append(self._to_transaction(transaction, splits))
        return sorted(
            transactions,
            key=lambda item: (item.post_date or date.min, item.guid),
        )

    @staticmethod
    def _to_account(account) -> Account:
        parent = getattr(account, "parent", None)
        commodity = getattr(account, "commodity", None)
        return Account(
            guid=account.guid,
            name=account.name,
            account_type=normalize_account_type(getattr(account, "type", None)),
            parent_guid=parent.guid if parent is not None else None,
            commodity_guid=commodity.guid if commodity is not None else None,
            commodity_scu=int(
                getattr(account, "commodity_scu", None) or DEFAULT_CURRENCY_DENOM
            ),
            hidden=coerce_flag(getattr(account, "hidden", 0)),
            placeholder=coerce_flag(getattr(account, "placeholder", 0)),
        )

    @staticmethod
    def _to_commodity(commodity) -> Commodity:
        return Commodity(
            guid=commodity.guid,
            namespace=commodity.namespace,
            mnemonic=commodity.mnemonic,
            fraction=int(
                getattr(commodity, "fraction", None) or DEFAULT_CURRENCY_DENOM
            ),
            fullname=getattr(commodity, "fullname", None),
            quote_source=getattr(commodity, "quote_source", None),
        )

    @staticmethod
    def _to_transaction(transaction, splits) -> Transaction:
        currency = transaction.currency
        value_denom = getattr(currency, "fraction", None)
        return Transaction(
            guid=transaction.guid,
            currency_guid=currency.guid,
            post_date=_coerce_date(transaction.post_date),
            enter_date=getattr(transaction, "enter_date", None),
            description=transaction.description or "",
            splits=tuple(
                SplitDraft(
                    guid=split.guid,
                    account_guid=split.account.guid,
                    value=_to_money(split.value, value_denom),
                    quantity=_to_money(
                        split.quantity,
                        getattr(split.account, "commodity_scu", None),
                    ),
                    memo=getattr(split, "memo", "") or "",
                    action=getattr(split, "action", "") or "",
                    reconcile_state=ReconcileState(
                        getattr(split, "reconcile_state", "n") or "n"
                    ),
                    reconcile_date=_coerce_date(
                        getattr(split, "reconcile_date", None)
                    ),
                )
                for split in splits
            ),
            num=getattr(transaction, "num", "") or "",
        )


class PieCashExchangeRateRepository(_PieCashBookReader, ExchangeRateResolver):
    """Exchange rates read from the book's price database."""

    def _latest_price(
        self,
        commodity_guid: str,
        currency_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        best = None
        with self._open_book() as book:
            for price in book.prices:
                if (
                    price.commodity.guid != commodity_guid
                    or price.currency.guid != currency_guid
                ):
                    continue
                price_date = _coerce_date(price.date)
                if price_date is None or price_date > as_of:
                    continue
                if best is None or price_date > best[0]:
                    best = (price_date, price)
        if best is None:
            return None
        price_date, price = best
        rate = _to_decimal(price.value)
        if rate is None:
            self._logger.warning("Skipping price with missing value")
            return None
        return ExchangeRate(
            from_commodity_guid=commodity_guid,
            to_commodity_guid=currency_guid,
            rate=rate,
            date=price_date,
            source=getattr(price, "source", None),
        )

    def _currency_guid(self, mnemonic: str) -> str | None:
        with self._open_book() as book:
            for commodity in book.commodities:
                if (
                    commodity.namespace == CURRENCY_NAMESPACE
                    and commodity.mnemonic == mnemonic
                ):
                    return commodity.guid
        return None


def _all_accounts(book) -> dict:
    accounts = {account.guid: account for account in book.accounts}
    root = getattr(book, "root_account", None)
    if root is not None:
        accounts.setdefault(root.guid, root)
    return accounts


def _coerce_date(raw_value) -> date | None:
    if raw_value is None:
        return None
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    return None


def _to_money(value, denom: int | None) -> Money:
    """Convert a piecash amount to exact Money over the account's scale."""
    resolved_denom = int(denom or DEFAULT_CURRENCY_DENOM)
    if value is None:
        return Money.zero(resolved_denom)
    if hasattr(value, "num") and hasattr(value, "denom"):
        if not value.denom:
            return Money.zero(resolved_denom)
        return Money.from_fraction(
            Fraction(int(value.num), int(value.denom)),
            resolved_denom,
        )
    return Money.from_fraction(Fraction(Decimal(str(value))), resolved_denom)


def _to_decimal(value) -> Decimal | None:
    if value is None:
        return None
    if hasattr(value, "num") and hasattr(value, "denom"):
        if not value.denom:
            return None
        return Decimal(int(value.num)) / Decimal(int(value.denom))
    return Decimal(str(value))


__all__ = ["PieCashLedgerRepository", "PieCashExchangeRateRepository"]

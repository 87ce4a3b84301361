"""Use case to record balanced transactions, adding trading splits as needed."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from src.application.ports.unit_of_work import LedgerUnitOfWorkPort
from src.application.use_cases.trading_accounts import (
    TradingAccountProvisioner,
)
from src.domain.constants import DEFAULT_CURRENCY_DENOM
from src.domain.errors import (
    InvalidTransactionError,
    ReconciledTransactionError,
    TransactionNotFoundError,
    ValidationIssue,
)
from src.domain.models import (
    Account,
    Commodity,
    LedgerBook,
    Money,
    ReconcileState,
    SplitDraft,
    Transaction,
)
from src.domain.services.trading import balance_splits
from src.domain.services.validation import validate_transaction
from src.infrastructure.logging.logger import get_app_logger
from src.utils.guid import generate_guid, is_valid_guid


@dataclass(frozen=True)
class SplitInput:
    """Caller-supplied split.

    Amounts may be Money or any decimal-like value. ``quantity`` defaults to
    ``value``, which is correct whenever the account uses the transaction
    currency.
    """

    account_guid: str
    value: object
    quantity: object = None
    memo: str = ""
    action: str = ""
    reconcile_state: object = ReconcileState.NOT_RECONCILED
    reconcile_date: date | None = None


@dataclass(frozen=True)
class TransactionInput:
    """Caller-supplied transaction."""

    currency_guid: str
    post_date: date | None
    description: str = ""
    splits: tuple[SplitInput, ...] = field(default_factory=tuple)
    num: str = ""
    enter_date: datetime | None = None


class RecordTransactionUseCase:
    """Validate, balance and persist transactions in one unit of work."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], LedgerUnitOfWorkPort],
        book: LedgerBook,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            unit_of_work_factory: Returns a fresh unit of work per call.
            book: Book receiving the transactions.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._uow_factory = unit_of_work_factory
        self._book = book
        self._logger = logger or get_app_logger()

    def execute(self, payload: TransactionInput) -> Transaction:
        """Record a new transaction.

        Args:
            payload: Transaction with raw splits.

        Returns:
            Transaction: Stored transaction, including trading splits.

        Raises:
            InvalidTransactionError: If the payload is malformed.
            MissingCommodityError: If a split account has no commodity.
            ImbalanceError: If values or quantities do not balance.
            TradingAccountMismatchError: If a trading leaf holds another
                commodity with the same mnemonic.
        """
        with self._uow_factory() as uow:
            transaction = self._build_transaction(
                uow,
                payload,
                tx_guid=generate_guid(),
                enter_date=payload.enter_date or datetime.now(timezone.utc),
            )
            uow.add_transaction(transaction)
        self._logger.info(
            f"Recorded transaction {transaction.guid} with "
            f"{len(transaction.splits)} splits"
        )
        return transaction

    def replace(self, tx_guid: str, payload: TransactionInput) -> Transaction:
        """Replace the header and every split of an existing transaction.

        Args:
            tx_guid: GUID of the stored transaction.
            payload: New transaction content.

        Returns:
            Transaction: Stored transaction after the replacement.

        Raises:
            TransactionNotFoundError: If the transaction does not exist.
            ReconciledTransactionError: If any stored split is reconciled.
        """
        with self._uow_factory() as uow:
            existing = uow.fetch_transaction(tx_guid)
            if existing is None:
                raise TransactionNotFoundError(tx_guid)
            if existing.has_reconciled_splits:
                raise ReconciledTransactionError(tx_guid)
            transaction = self._build_transaction(
                uow,
                payload,
                tx_guid=tx_guid,
                enter_date=existing.enter_date,
            )
            removed = uow.delete_transaction_splits(tx_guid)
            uow.update_transaction(transaction)
        self._logger.info(
            f"Replaced transaction {tx_guid}: removed {removed} splits, "
            f"wrote {len(transaction.splits)}"
        )
        return transaction

    def _build_transaction(
        self,
        uow: LedgerUnitOfWorkPort,
        payload: TransactionInput,
        tx_guid: str,
        enter_date: datetime,
    ) -> Transaction:
        account_guids = [
            split.account_guid
            for split in payload.splits
            if split.account_guid and is_valid_guid(split.account_guid)
        ]
        accounts = uow.fetch_accounts(account_guids) if account_guids else {}
        commodity_guids = {
            account.commodity_guid
            for account in accounts.values()
            if account.commodity_guid
        }
        if payload.currency_guid:
            commodity_guids.add(payload.currency_guid)
        commodities = (
            uow.fetch_commodities(sorted(commodity_guids))
            if commodity_guids
            else {}
        )
        currency = commodities.get(payload.currency_guid)
        value_denom = currency.fraction if currency else DEFAULT_CURRENCY_DENOM

        drafts = [
            self._to_draft(split, value_denom, accounts.get(split.account_guid))
            for split in payload.splits
        ]
        validate_transaction(payload.currency_guid, payload.post_date, drafts)
        if currency is None:
            raise InvalidTransactionError(
                [ValidationIssue("currency_guid", "Unknown currency")]
            )

        commodity_by_account = self._commodity_by_account(accounts, commodities)
        provisioner = TradingAccountProvisioner(
            uow,
            self._book,
            logger=self._logger,
        )
        balanced = balance_splits(
            drafts,
            commodity_by_account,
            provisioner.resolve,
            currency,
        )
        if balanced.is_multi_currency:
            self._logger.info(
                f"Transaction {tx_guid} needed "
                f"{len(balanced.trading_splits)} trading splits"
            )
        return Transaction(
            guid=tx_guid,
            currency_guid=currency.guid,
            post_date=payload.post_date,
            enter_date=enter_date,
            description=payload.description,
            splits=tuple(
                split.with_guid(generate_guid()) for split in balanced.splits
            ),
            num=payload.num,
        )

    @staticmethod
    def _commodity_by_account(
        accounts: dict[str, Account],
        commodities: dict[str, Commodity],
    ) -> dict[str, Commodity | None]:
        return {
            guid: commodities.get(account.commodity_guid)
            for guid, account in accounts.items()
        }

    @classmethod
    def _to_draft(
        cls,
        split: SplitInput,
        value_denom: int,
        account: Account | None,
    ) -> SplitDraft:
        quantity_denom = (
            account.commodity_scu if account is not None else value_denom
        )
        raw_quantity = split.value if split.quantity is None else split.quantity
        return SplitDraft(
            account_guid=split.account_guid,
            value=cls._to_money(split.value, value_denom),
            quantity=cls._to_money(raw_quantity, quantity_denom),
            memo=split.memo,
            action=split.action,
            reconcile_state=cls._parse_reconcile_state(split.reconcile_state),
            reconcile_date=split.reconcile_date,
        )

    @staticmethod
    def _to_money(raw_value, denom: int) -> Money:
        if isinstance(raw_value, Money):
            return raw_value
        return Money.from_decimal(raw_value, denom)

    @staticmethod
    def _parse_reconcile_state(raw_state):
        if isinstance(raw_state, ReconcileState):
            return raw_state
        try:
            return ReconcileState(str(raw_state).strip().lower())
        except ValueError:
            # left as-is so validation reports it
            return raw_state


__all__ = [
    "SplitInput",
    "TransactionInput",
    "RecordTransactionUseCase",
]

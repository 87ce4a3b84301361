"""Find or create the trading accounts used for multi-currency splits."""

from src.application.ports.unit_of_work import LedgerUnitOfWorkPort
from src.domain.constants import (
    DEFAULT_CURRENCY_DENOM,
    TRADING_GROUP_NAME,
    TRADING_ROOT_NAME,
)
from src.domain.errors import (
    ConcurrentCreateConflict,
    TradingAccountMismatchError,
)
from src.domain.models import Account, AccountType, Commodity, LedgerBook
from src.infrastructure.logging.logger import get_app_logger
from src.utils.guid import generate_guid


class TradingAccountProvisioner:
    """Resolve ``Trading:CURRENCY:<MNEMONIC>`` accounts for a book.

    Every level is looked up among ``TRADING`` accounts only, so user
    accounts sharing a name are never reused. Missing levels are created
    through the caller's unit of work, so they commit or roll back together
    with the transaction that needed them. Resolved leaves are cached per
    instance.
    """

    def __init__(
        self,
        unit_of_work: LedgerUnitOfWorkPort,
        book: LedgerBook,
        logger=None,
    ) -> None:
        """Initialize the provisioner.

        Args:
            unit_of_work: Open unit of work used for reads and inserts.
            book: Book whose ROOT receives the trading hierarchy.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._uow = unit_of_work
        self._book = book
        self._logger = logger or get_app_logger()
        self._group_guid: str | None = None
        self._cache: dict[str, Account] = {}

    def resolve(self, commodity: Commodity) -> Account:
        """Return the trading account for a commodity.

        Args:
            commodity: Commodity needing a trading account.

        Returns:
            Account: The ``Trading:CURRENCY:<MNEMONIC>`` leaf.

        Raises:
            TradingAccountMismatchError: If the existing leaf for the
                mnemonic holds a different commodity.
        """
        cached = self._cache.get(commodity.guid)
        if cached is not None:
            return cached
        group_guid = self._resolve_group(commodity)
        leaf = self._ensure_account(
            parent_guid=group_guid,
            name=commodity.mnemonic,
            commodity_guid=commodity.guid,
            commodity_scu=commodity.fraction,
            placeholder=False,
        )
        if leaf.commodity_guid != commodity.guid:
            raise TradingAccountMismatchError(
                leaf.guid,
                commodity.guid,
                leaf.commodity_guid,
            )
        self._cache[commodity.guid] = leaf
        return leaf

    def _resolve_group(self, target: Commodity) -> str:
        if self._group_guid:
            return self._group_guid
        root_commodity = self._root_commodity(target)
        trading_root = self._ensure_account(
            parent_guid=self._book.root_account_guid,
            name=TRADING_ROOT_NAME,
            commodity_guid=root_commodity.guid,
            commodity_scu=root_commodity.fraction,
            placeholder=True,
        )
        group = self._ensure_account(
            parent_guid=trading_root.guid,
            name=TRADING_GROUP_NAME,
            commodity_guid=root_commodity.guid,
            commodity_scu=root_commodity.fraction,
            placeholder=True,
        )
        self._group_guid = group.guid
        return group.guid

    def _root_commodity(self, target: Commodity) -> Commodity:
        if self._book.base_currency is not None:
            return self._book.base_currency
        return self._uow.find_any_currency() or target

    def _ensure_account(
        self,
        parent_guid: str,
        name: str,
        commodity_guid: str,
        commodity_scu: int | None,
        placeholder: bool,
    ) -> Account:
        existing = self._uow.find_child_account(
            parent_guid,
            name,
            AccountType.TRADING.value,
        )
        if existing is not None:
            return existing

        account = Account(
            guid=generate_guid(),
            name=name,
            account_type=AccountType.TRADING.value,
            parent_guid=parent_guid,
            commodity_guid=commodity_guid,
            commodity_scu=commodity_scu or DEFAULT_CURRENCY_DENOM,
            placeholder=placeholder,
        )
        try:
            created = self._uow.create_account(account)
        except ConcurrentCreateConflict:
            winner = self._uow.find_child_account(
                parent_guid,
                name,
                AccountType.TRADING.value,
            )
            if winner is None:
                raise
            self._logger.info(
                f"Trading account '{name}' created concurrently; "
                f"using {winner.guid}"
            )
            return winner
        self._logger.info(
            f"Created trading account '{name}' ({created.guid}) "
            f"under {parent_guid}"
        )
        return created


__all__ = ["TradingAccountProvisioner"]

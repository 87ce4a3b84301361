"""Domain models for ledger accounts."""

from dataclasses import dataclass
from enum import Enum

from src.domain.constants import DEFAULT_CURRENCY_DENOM
from src.domain.models.commodities import Commodity


class AccountType(str, Enum):
    """GnuCash account types handled by the engine."""

    ASSET = "ASSET"
    BANK = "BANK"
    CASH = "CASH"
    CREDIT = "CREDIT"
    LIABILITY = "LIABILITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    EQUITY = "EQUITY"
    STOCK = "STOCK"
    MUTUAL = "MUTUAL"
    RECEIVABLE = "RECEIVABLE"
    PAYABLE = "PAYABLE"
    ROOT = "ROOT"
    TRADING = "TRADING"


@dataclass(frozen=True)
class Account:
    """Node of a book's account tree.

    Attributes:
        guid: GnuCash GUID.
        name: Account name (unique among siblings of the same type).
        account_type: Raw GnuCash account type string.
        parent_guid: Parent account GUID, None only for ROOT.
        commodity_guid: Native commodity GUID.
        commodity_scu: Smallest commodity unit for this account.
        hidden: Hidden flag.
        placeholder: Structural-only flag; placeholders receive no splits.
    """

    guid: str
    name: str
    account_type: str
    parent_guid: str | None
    commodity_guid: str | None
    commodity_scu: int = DEFAULT_CURRENCY_DENOM
    hidden: bool = False
    placeholder: bool = False


@dataclass(frozen=True)
class LedgerBook:
    """Explicit per-book configuration for the engine.

    Attributes:
        root_account_guid: GUID of the book's ROOT account.
        base_currency: Reporting currency for cross-commodity totals.
    """

    root_account_guid: str
    base_currency: Commodity | None = None

    @property
    def base_currency_guid(self) -> str | None:
        """Return the base currency GUID when configured."""
        if self.base_currency is None:
            return None
        return self.base_currency.guid


__all__ = ["AccountType", "Account", "LedgerBook"]

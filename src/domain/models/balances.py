"""Domain models for balance checks and balance rollups."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from fractions import Fraction

from src.domain.models.money import Money
from src.utils.decimal_utils import to_decimal


@dataclass(frozen=True)
class CommodityImbalance:
    """Signed residual left for one commodity.

    Attributes:
        commodity_guid: GUID of the unbalanced commodity.
        mnemonic: Commodity symbol for display.
        imbalance: Exact signed residual.
    """

    commodity_guid: str
    mnemonic: str
    imbalance: Fraction

    @property
    def display_amount(self) -> str:
        """Return the residual as a decimal string."""
        return to_decimal(self.imbalance.numerator, self.imbalance.denominator)


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of the double-entry check for a set of splits.

    Attributes:
        value_residual: Sum of all split values (transaction currency).
        imbalances: Non-zero quantity residuals per commodity.
    """

    value_residual: Fraction
    imbalances: tuple[CommodityImbalance, ...] = ()

    @property
    def balanced(self) -> bool:
        """Return True when values and every commodity quantity sum to zero."""
        return self.value_residual == 0 and not self.imbalances


@dataclass(frozen=True)
class SplitQuantityRow:
    """Quantity posted to an account, as read for balance rollups."""

    account_guid: str
    post_date: date | None
    quantity: Money


@dataclass(frozen=True)
class ExchangeRate:
    """Rate converting one unit of a commodity into another.

    Attributes:
        from_commodity_guid: Source commodity GUID.
        to_commodity_guid: Target commodity GUID.
        rate: Units of target per unit of source.
        date: Date of the underlying price.
        source: Price source or derivation (inverse, triangulated).
    """

    from_commodity_guid: str
    to_commodity_guid: str
    rate: Decimal
    date: date | None
    source: str | None = None


@dataclass(frozen=True)
class AccountBalance:
    """Balance of an account and its descendants.

    Native amounts cover only the account's own splits in its commodity;
    ``total_balance`` and ``period_balance`` are rolled up in base currency.

    Attributes:
        rate_missing: No rate exists for this account's commodity, so its own
            splits are left out of the base-currency totals.
        partial: Some descendant's contribution is missing.
    """

    guid: str
    name: str
    account_type: str
    parent_guid: str | None
    commodity_guid: str | None
    native_total: Decimal
    native_period: Decimal
    total_balance: Decimal
    period_balance: Decimal
    depth: int = 0
    rate_missing: bool = False
    partial: bool = False


@dataclass(frozen=True)
class AccountBalancesReport:
    """Balances for a subtree, converted into one reporting currency."""

    currency_code: str
    start_date: date | None
    end_date: date | None
    as_of: date
    balances: list[AccountBalance] = field(default_factory=list)
    missing_rates: tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        """Return True when some commodity could not be converted."""
        return bool(self.missing_rates)

    def by_guid(self) -> dict[str, AccountBalance]:
        """Return balances keyed by account GUID."""
        return {balance.guid: balance for balance in self.balances}


__all__ = [
    "CommodityImbalance",
    "BalanceCheck",
    "SplitQuantityRow",
    "ExchangeRate",
    "AccountBalance",
    "AccountBalancesReport",
]

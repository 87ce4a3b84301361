"""Multi-currency imbalance resolution through trading splits.

When a transaction moves value between commodities, values balance in the
transaction currency but quantities do not balance per commodity. GnuCash
restores the per-commodity balance with synthetic splits booked to
``Trading:CURRENCY:<MNEMONIC>`` accounts.

Example, moving USD into a EUR account:

* Checking (USD): value -100, quantity -100
* Savings (EUR): value +100, quantity +85
* Trading:CURRENCY:USD: value 0, quantity +100
* Trading:CURRENCY:EUR: value 0, quantity -85
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from src.domain.constants import (
    DEFAULT_CURRENCY_DENOM,
    IMBALANCE_EPSILON,
    TRADING_SPLIT_MEMO,
)
from src.domain.errors import ImbalanceError, TradingAccountMismatchError
from src.domain.models import (
    Account,
    Commodity,
    CommodityImbalance,
    Money,
    ReconcileState,
    SplitDraft,
)
from src.domain.services.invariants import (
    assert_balanced,
    check_transaction_balance,
    resolve_commodity,
    sum_quantities_by_commodity,
    value_residual_entry,
)


@dataclass(frozen=True)
class BalancedSplits:
    """Finalized split set for a transaction.

    Attributes:
        splits: Original splits followed by generated trading splits.
        trading_splits: Generated trading splits only.
        is_multi_currency: True when more than one commodity is involved.
    """

    splits: tuple[SplitDraft, ...]
    trading_splits: tuple[SplitDraft, ...]
    is_multi_currency: bool


def needs_trading_accounts(
    splits: Iterable[SplitDraft],
    commodity_by_account: Mapping[str, Commodity | None],
) -> bool:
    """Return True when the splits reference more than one commodity."""
    commodities = {
        resolve_commodity(split, commodity_by_account).guid
        for split in splits
    }
    return len(commodities) > 1


def calculate_quantity_imbalances(
    splits: Iterable[SplitDraft],
    commodity_by_account: Mapping[str, Commodity | None],
) -> dict[str, CommodityImbalance]:
    """Return the quantity imbalance of each commodity.

    Residuals smaller than ``IMBALANCE_EPSILON`` are dropped as rounding
    noise; the amounts themselves are never adjusted.

    Args:
        splits: Candidate splits.
        commodity_by_account: Native commodity per account GUID.

    Returns:
        dict[str, CommodityImbalance]: Imbalances keyed by commodity GUID.
    """
    totals = sum_quantities_by_commodity(splits, commodity_by_account)
    return {
        guid: CommodityImbalance(
            commodity_guid=guid,
            mnemonic=commodity.mnemonic,
            imbalance=total,
        )
        for guid, (commodity, total) in totals.items()
        if abs(total) >= IMBALANCE_EPSILON
    }


def generate_trading_splits(
    imbalances: Mapping[str, CommodityImbalance],
    trading_account_by_commodity: Mapping[str, str],
    fraction_by_commodity: Mapping[str, int] | None = None,
    value_denom: int = DEFAULT_CURRENCY_DENOM,
) -> list[SplitDraft]:
    """Build the synthetic splits cancelling each commodity imbalance.

    Each split has a zero value over ``value_denom`` and
    ``quantity = -imbalance``. The quantity denominator is the commodity
    fraction (100 when unknown), widened when the imbalance needs more
    precision than that fraction offers.

    Args:
        imbalances: Imbalances keyed by commodity GUID.
        trading_account_by_commodity: Trading account GUID per commodity GUID.
        fraction_by_commodity: Optional commodity fractions.
        value_denom: Fraction of the transaction currency.

    Returns:
        list[SplitDraft]: One split per commodity with a trading account.
    """
    fractions = fraction_by_commodity or {}
    trading_splits = []
    for commodity_guid, item in imbalances.items():
        account_guid = trading_account_by_commodity.get(commodity_guid)
        if not account_guid:
            continue
        denom = fractions.get(commodity_guid) or DEFAULT_CURRENCY_DENOM
        quantity = Money.from_fraction(-item.imbalance, denom)
        trading_splits.append(
            SplitDraft(
                account_guid=account_guid,
                value=Money.zero(value_denom),
                quantity=quantity,
                memo=TRADING_SPLIT_MEMO,
                action="",
                reconcile_state=ReconcileState.NOT_RECONCILED,
            )
        )
    return trading_splits


def balance_splits(
    splits: Iterable[SplitDraft],
    commodity_by_account: Mapping[str, Commodity | None],
    resolve_trading_account: Callable[[Commodity], Account],
    currency: Commodity | None = None,
) -> BalancedSplits:
    """Validate splits and append the trading splits they require.

    Args:
        splits: Candidate splits supplied by the caller.
        commodity_by_account: Native commodity per account GUID.
        resolve_trading_account: Returns the trading account for a
            commodity, creating it when needed.
        currency: Transaction currency, used to label value residuals.

    Returns:
        BalancedSplits: Finalized split set.

    Raises:
        ImbalanceError: If values do not sum to zero, if a single-commodity
            transaction has a quantity residual, or if the combined set
            still fails the balance check.
        MissingCommodityError: If an account has no commodity.
        TradingAccountMismatchError: If a resolved trading account holds
            another commodity.
    """
    original = tuple(splits)
    check = check_transaction_balance(original, commodity_by_account)
    if check.value_residual != 0:
        raise ImbalanceError((value_residual_entry(check, currency),))

    if not needs_trading_accounts(original, commodity_by_account):
        assert_balanced(check, currency)
        return BalancedSplits(
            splits=original,
            trading_splits=(),
            is_multi_currency=False,
        )

    imbalances = calculate_quantity_imbalances(original, commodity_by_account)
    commodities = {
        commodity.guid: commodity
        for commodity in commodity_by_account.values()
        if commodity is not None
    }
    trading_accounts = {
        guid: resolve_trading_account(commodities[guid])
        for guid in imbalances
    }
    for guid, account in trading_accounts.items():
        if account.commodity_guid != guid:
            raise TradingAccountMismatchError(
                account.guid,
                guid,
                account.commodity_guid,
            )
    fractions = {guid: commodities[guid].fraction for guid in imbalances}
    trading = tuple(
        generate_trading_splits(
            imbalances,
            {guid: account.guid for guid, account in trading_accounts.items()},
            fractions,
            value_denom=(
                currency.fraction if currency else DEFAULT_CURRENCY_DENOM
            ),
        )
    )

    combined = original + trading
    extended_commodities = dict(commodity_by_account)
    for account in trading_accounts.values():
        extended_commodities[account.guid] = commodities[account.commodity_guid]
    assert_balanced(
        check_transaction_balance(combined, extended_commodities),
        currency,
    )
    return BalancedSplits(
        splits=combined,
        trading_splits=trading,
        is_multi_currency=True,
    )


__all__ = [
    "BalancedSplits",
    "needs_trading_accounts",
    "calculate_quantity_imbalances",
    "generate_trading_splits",
    "balance_splits",
]

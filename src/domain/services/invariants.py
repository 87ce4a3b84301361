"""Double-entry invariant checks for transaction splits."""

from collections.abc import Iterable, Mapping
from fractions import Fraction

from src.domain.errors import ImbalanceError, MissingCommodityError
from src.domain.models import (
    BalanceCheck,
    Commodity,
    CommodityImbalance,
    SplitDraft,
)

VALUE_RESIDUAL_LABEL = "value"


def resolve_commodity(
    split: SplitDraft,
    commodity_by_account: Mapping[str, Commodity | None],
) -> Commodity:
    """Return the native commodity of a split's account.

    Args:
        split: Split whose account is resolved.
        commodity_by_account: Native commodity per account GUID.

    Returns:
        Commodity: Commodity of the split's account.

    Raises:
        MissingCommodityError: If the account has no known commodity.
    """
    commodity = commodity_by_account.get(split.account_guid)
    if commodity is None or not commodity.guid:
        raise MissingCommodityError(split.account_guid)
    return commodity


def sum_quantities_by_commodity(
    splits: Iterable[SplitDraft],
    commodity_by_account: Mapping[str, Commodity | None],
) -> dict[str, tuple[Commodity, Fraction]]:
    """Sum split quantities exactly per commodity, in first-seen order."""
    totals: dict[str, tuple[Commodity, Fraction]] = {}
    for split in splits:
        commodity = resolve_commodity(split, commodity_by_account)
        _, current = totals.get(commodity.guid, (commodity, Fraction(0)))
        totals[commodity.guid] = (
            commodity,
            current + split.quantity.as_fraction(),
        )
    return totals


def check_transaction_balance(
    splits: Iterable[SplitDraft],
    commodity_by_account: Mapping[str, Commodity | None],
) -> BalanceCheck:
    """Check the double-entry invariant for a candidate set of splits.

    Quantities must sum to exactly zero per native commodity and values must
    sum to exactly zero overall. The check never touches storage.

    Args:
        splits: Candidate splits.
        commodity_by_account: Native commodity per account GUID.

    Returns:
        BalanceCheck: Value residual and per-commodity quantity residuals.

    Raises:
        MissingCommodityError: If any split's account has no commodity.
    """
    split_list = list(splits)
    value_residual = sum(
        (split.value.as_fraction() for split in split_list),
        Fraction(0),
    )
    totals = sum_quantities_by_commodity(split_list, commodity_by_account)
    imbalances = tuple(
        CommodityImbalance(
            commodity_guid=guid,
            mnemonic=commodity.mnemonic,
            imbalance=total,
        )
        for guid, (commodity, total) in totals.items()
        if total != 0
    )
    return BalanceCheck(value_residual=value_residual, imbalances=imbalances)


def value_residual_entry(
    check: BalanceCheck,
    currency: Commodity | None = None,
) -> CommodityImbalance:
    """Describe the value residual as a residual of the transaction currency."""
    return CommodityImbalance(
        commodity_guid=currency.guid if currency else VALUE_RESIDUAL_LABEL,
        mnemonic=currency.mnemonic if currency else VALUE_RESIDUAL_LABEL,
        imbalance=check.value_residual,
    )


def assert_balanced(
    check: BalanceCheck,
    currency: Commodity | None = None,
) -> None:
    """Raise when a balance check found residuals.

    Args:
        check: Result of check_transaction_balance.
        currency: Transaction currency used to label the value residual.

    Raises:
        ImbalanceError: If values or any commodity quantity do not net to zero.
    """
    if check.balanced:
        return
    residuals = list(check.imbalances)
    if check.value_residual != 0:
        residuals.insert(0, value_residual_entry(check, currency))
    raise ImbalanceError(tuple(residuals))


__all__ = [
    "VALUE_RESIDUAL_LABEL",
    "resolve_commodity",
    "sum_quantities_by_commodity",
    "check_transaction_balance",
    "value_residual_entry",
    "assert_balanced",
]

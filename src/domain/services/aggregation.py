"""Account hierarchy balance rollups in a reporting currency."""

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from fractions import Fraction

from src.domain.models import Account, AccountBalance, SplitQuantityRow


@dataclass(frozen=True)
class AccountTree:
    """Arena-indexed account forest.

    Accounts are addressed by a stable index; ``parents`` and ``children``
    hold indexes only, so traversal never touches storage.
    """

    accounts: tuple[Account, ...]
    parents: tuple[int | None, ...]
    children: tuple[tuple[int, ...], ...]
    index: Mapping[str, int]

    @classmethod
    def build(
        cls,
        accounts: Iterable[Account],
        in_scope: Collection[str] | None = None,
    ) -> "AccountTree":
        """Build the forest from a flat account list.

        Args:
            accounts: Accounts to place in the tree.
            in_scope: Optional GUIDs allowed in the tree (book boundary).
                Accounts whose parent is outside the scope become roots.

        Returns:
            AccountTree: Forest with children sorted by name then GUID.
        """
        scoped = sorted(
            (
                account
                for account in accounts
                if in_scope is None or account.guid in in_scope
            ),
            key=lambda account: (account.name.lower(), account.guid),
        )
        index = {account.guid: position for position, account in enumerate(scoped)}
        parents: list[int | None] = []
        children: list[list[int]] = [[] for _ in scoped]
        for position, account in enumerate(scoped):
            parent = index.get(account.parent_guid) if account.parent_guid else None
            parents.append(parent)
            if parent is not None:
                children[parent].append(position)
        return cls(
            accounts=tuple(scoped),
            parents=tuple(parents),
            children=tuple(tuple(items) for items in children),
            index=index,
        )

    def roots(self) -> list[int]:
        """Return indexes of accounts without an in-tree parent."""
        return [
            position
            for position, parent in enumerate(self.parents)
            if parent is None
        ]

    def subtree(self, root_guid: str) -> "AccountTree":
        """Return the tree restricted to ``root_guid`` and its descendants.

        Raises:
            KeyError: If the root is not part of the tree.
        """
        start = self.index[root_guid]
        keep = {self.accounts[position].guid for position in self.pre_order([start])}
        return AccountTree.build(self.accounts, in_scope=keep)

    def pre_order(self, starts: list[int] | None = None) -> list[int]:
        """Return indexes parent-first, children in sorted order."""
        order = []
        stack = list(reversed(starts if starts is not None else self.roots()))
        while stack:
            position = stack.pop()
            order.append(position)
            stack.extend(reversed(self.children[position]))
        return order

    def post_order(self) -> list[int]:
        """Return indexes with every child before its parent."""
        order = []
        stack = [(position, False) for position in reversed(self.roots())]
        while stack:
            position, expanded = stack.pop()
            if expanded:
                order.append(position)
                continue
            stack.append((position, True))
            stack.extend(
                (child, False) for child in reversed(self.children[position])
            )
        return order

    def depths(self) -> list[int]:
        """Return the depth of each account (roots have depth 0)."""
        result = [0] * len(self.accounts)
        for position in self.pre_order():
            parent = self.parents[position]
            if parent is not None:
                result[position] = result[parent] + 1
        return result


def in_period(
    post_date: date | None,
    start_date: date | None,
    end_date: date | None,
) -> bool:
    """Return True when a post date falls within the inclusive range."""
    if start_date is None and end_date is None:
        return True
    if post_date is None:
        return False
    if start_date is not None and post_date < start_date:
        return False
    if end_date is not None and post_date > end_date:
        return False
    return True


def rate_commodities(
    tree: AccountTree,
    rows: Iterable[SplitQuantityRow],
    base_currency_guid: str,
) -> list[str]:
    """Return the distinct non-base commodities that need a rate.

    Only commodities of accounts that actually carry splits are listed, so
    callers look up one rate per commodity rather than per split.
    """
    seen: dict[str, None] = {}
    for row in rows:
        position = tree.index.get(row.account_guid)
        if position is None:
            continue
        commodity_guid = tree.accounts[position].commodity_guid
        if commodity_guid and commodity_guid != base_currency_guid:
            seen.setdefault(commodity_guid, None)
    return list(seen)


def aggregate_balances(
    tree: AccountTree,
    rows: Iterable[SplitQuantityRow],
    rates: Mapping[str, Decimal | None],
    base_currency_guid: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[AccountBalance]:
    """Roll up account balances bottom-up in the base currency.

    A parent's balance is its own converted splits plus the already computed
    balances of its children. Accounts whose commodity has no rate keep their
    native balances but contribute nothing to base totals; they and their
    ancestors are flagged. No sign flipping and no rounding happen here.

    Args:
        tree: In-scope account forest.
        rows: Split quantities, read in one bulk query.
        rates: Base-currency rate per commodity GUID, None when unavailable.
        base_currency_guid: GUID of the reporting currency.
        start_date: Inclusive period start, None when open.
        end_date: Inclusive period end, None when open.

    Returns:
        list[AccountBalance]: Balances in pre-order (parents first).
    """
    size = len(tree.accounts)
    own_total = [Fraction(0)] * size
    own_period = [Fraction(0)] * size
    for row in rows:
        position = tree.index.get(row.account_guid)
        if position is None:
            continue
        amount = row.quantity.as_fraction()
        own_total[position] += amount
        if in_period(row.post_date, start_date, end_date):
            own_period[position] += amount

    rate_missing = [False] * size
    converted_total = [Decimal("0")] * size
    converted_period = [Decimal("0")] * size
    for position, account in enumerate(tree.accounts):
        rate = _resolve_rate(account.commodity_guid, rates, base_currency_guid)
        if rate is None:
            rate_missing[position] = bool(own_total[position] or own_period[position])
            continue
        converted_total[position] = _fraction_to_decimal(own_total[position]) * rate
        converted_period[position] = _fraction_to_decimal(own_period[position]) * rate

    total = list(converted_total)
    period = list(converted_period)
    partial = [False] * size
    for position in tree.post_order():
        for child in tree.children[position]:
            total[position] += total[child]
            period[position] += period[child]
            if rate_missing[child] or partial[child]:
                partial[position] = True

    depths = tree.depths()
    balances = []
    for position in tree.pre_order():
        account = tree.accounts[position]
        balances.append(
            AccountBalance(
                guid=account.guid,
                name=account.name,
                account_type=account.account_type,
                parent_guid=account.parent_guid,
                commodity_guid=account.commodity_guid,
                native_total=_fraction_to_decimal(own_total[position]),
                native_period=_fraction_to_decimal(own_period[position]),
                total_balance=total[position],
                period_balance=period[position],
                depth=depths[position],
                rate_missing=rate_missing[position],
                partial=partial[position],
            )
        )
    return balances


def _resolve_rate(
    commodity_guid: str | None,
    rates: Mapping[str, Decimal | None],
    base_currency_guid: str,
) -> Decimal | None:
    if not commodity_guid:
        return None
    if commodity_guid == base_currency_guid:
        return Decimal("1")
    return rates.get(commodity_guid)


def _fraction_to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


__all__ = [
    "AccountTree",
    "in_period",
    "rate_commodities",
    "aggregate_balances",
]

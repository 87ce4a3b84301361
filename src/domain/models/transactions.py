"""Domain models for transactions and their splits."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from src.domain.models.money import Money


class ReconcileState(str, Enum):
    """Reconciliation state of a split."""

    NOT_RECONCILED = "n"
    CLEARED = "c"
    RECONCILED = "y"


@dataclass(frozen=True)
class SplitDraft:
    """One leg of a transaction before or after persistence.

    Attributes:
        account_guid: Account receiving the split.
        value: Amount in the transaction currency.
        quantity: Amount in the account's native commodity.
        memo: Free-form memo.
        action: GnuCash action field.
        reconcile_state: Reconciliation state.
        reconcile_date: Required when the split is reconciled.
        guid: Split GUID once assigned.
    """

    account_guid: str
    value: Money
    quantity: Money
    memo: str = ""
    action: str = ""
    reconcile_state: ReconcileState = ReconcileState.NOT_RECONCILED
    reconcile_date: date | None = None
    guid: str | None = None

    def with_guid(self, guid: str) -> "SplitDraft":
        """Return a copy carrying the given GUID."""
        return replace(self, guid=guid)


@dataclass(frozen=True)
class Transaction:
    """Balanced transaction ready to be stored.

    Attributes:
        guid: Transaction GUID.
        currency_guid: Commodity GUID every split value is expressed in.
        post_date: Posting date.
        enter_date: Entry timestamp.
        description: Description text.
        splits: At least two splits.
        num: Optional check number.
    """

    guid: str
    currency_guid: str
    post_date: date
    enter_date: datetime
    description: str
    splits: tuple[SplitDraft, ...] = field(default_factory=tuple)
    num: str = ""

    @property
    def has_reconciled_splits(self) -> bool:
        """Return True when any split is reconciled."""
        return any(
            split.reconcile_state == ReconcileState.RECONCILED
            for split in self.splits
        )


__all__ = ["ReconcileState", "SplitDraft", "Transaction"]

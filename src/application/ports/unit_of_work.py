"""Port for atomic ledger writes."""

from typing import Protocol

from src.domain.models import Account, Commodity, Transaction


class LedgerUnitOfWorkPort(Protocol):
    """One atomic unit of work over the ledger.

    Used as a context manager: every write made inside the ``with`` block is
    committed together on a clean exit and rolled back on any exception.
    """

    def __enter__(self) -> "LedgerUnitOfWorkPort":
        """Open the underlying database transaction."""

    def __exit__(self, exc_type, exc, traceback) -> None:
        """Commit on success, roll back on error."""

    def fetch_accounts(self, guids: list[str]) -> dict[str, Account]:
        """Return accounts keyed by GUID."""

    def fetch_commodities(self, guids: list[str]) -> dict[str, Commodity]:
        """Return commodities keyed by GUID."""

    def find_commodity(self, namespace: str, mnemonic: str) -> Commodity | None:
        """Return the commodity with the given namespace and mnemonic."""

    def find_any_currency(self) -> Commodity | None:
        """Return any commodity of the CURRENCY namespace."""

    def find_child_account(
        self,
        parent_guid: str,
        name: str,
        account_type: str | None = None,
    ) -> Account | None:
        """Return the child of ``parent_guid`` named ``name``.

        When ``account_type`` is given, children of other types are ignored.
        """

    def create_account(self, account: Account) -> Account:
        """Insert an account.

        Raises:
            ConcurrentCreateConflict: If ``(parent_guid, name, account_type)``
                already exists.
        """

    def fetch_transaction(self, tx_guid: str) -> Transaction | None:
        """Return a stored transaction with its splits."""

    def add_transaction(self, transaction: Transaction) -> None:
        """Insert a transaction header and all of its splits."""

    def delete_transaction_splits(self, tx_guid: str) -> int:
        """Delete every split of a transaction and return the count."""

    def update_transaction(self, transaction: Transaction) -> None:
        """Update a transaction header and insert its splits."""


__all__ = ["LedgerUnitOfWorkPort"]

"""Port for read-only ledger access."""

from typing import Protocol

from src.domain.models import (
    Account,
    Commodity,
    SplitQuantityRow,
    Transaction,
)


class LedgerReadRepositoryPort(Protocol):
    """Port exposing the reads needed by balance and audit use cases."""

    def find_root_account_guid(self) -> str | None:
        """Return the GUID of the book's ROOT account."""

    def fetch_book_account_guids(self, root_guid: str) -> list[str]:
        """Return the GUIDs of ``root_guid`` and all its descendants."""

    def fetch_accounts(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Account]:
        """Return accounts, optionally restricted to the given GUIDs."""

    def fetch_commodities(self, guids: list[str]) -> dict[str, Commodity]:
        """Return commodities keyed by GUID."""

    def find_commodity(self, namespace: str, mnemonic: str) -> Commodity | None:
        """Return the commodity with the given namespace and mnemonic."""

    def fetch_split_quantities(
        self,
        account_guids: list[str],
    ) -> list[SplitQuantityRow]:
        """Return split quantities and post dates for the accounts in one read."""

    def fetch_transactions(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Transaction]:
        """Return transactions with their splits, optionally book-scoped."""


__all__ = ["LedgerReadRepositoryPort"]

"""SQLAlchemy-backed read repository over the GnuCash schema."""

from sqlalchemy import bindparam, text

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.domain.models import (
    Account,
    Commodity,
    SplitQuantityRow,
    Transaction,
)
from src.infrastructure.ledger_sql import (
    coerce_date,
    money_from_columns,
    select_accounts,
    select_commodities,
    select_commodity,
    select_transactions,
)


class SqlAlchemyLedgerRepository(LedgerReadRepositoryPort):
    """Repository backed by SQLAlchemy for ledger reads."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the GnuCash engine.
        """
        self._db_port = db_port

    def find_root_account_guid(self) -> str | None:
        query = text("SELECT root_account_guid FROM books LIMIT 1")
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            row = conn.execute(query).first()
        return row.root_account_guid if row else None

    def fetch_book_account_guids(self, root_guid: str) -> list[str]:
        """Return the book root and every account below it.

        Args:
            root_guid: GUID of the book's ROOT account.

        Returns:
            list[str]: Account GUIDs in the book.
        """
        query = text(
            """
            WITH RECURSIVE book_accounts AS (
                SELECT guid
                FROM accounts
                WHERE guid = :root_guid
                UNION ALL
                SELECT a.guid
                FROM accounts a
                JOIN book_accounts ba ON a.parent_guid = ba.guid
            )
            SELECT guid FROM book_accounts
            """
        )
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            rows = conn.execute(query, {"root_guid": root_guid}).all()
        return [row.guid for row in rows]

    def fetch_accounts(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Account]:
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            return select_accounts(conn, account_guids)

    def fetch_commodities(self, guids: list[str]) -> dict[str, Commodity]:
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            return select_commodities(conn, guids)

    def find_commodity(self, namespace: str, mnemonic: str) -> Commodity | None:
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            return select_commodity(conn, namespace, mnemonic)

    def fetch_split_quantities(
        self,
        account_guids: list[str],
    ) -> list[SplitQuantityRow]:
        """Read every split quantity of the accounts in a single query.

        Args:
            account_guids: Accounts whose splits are read.

        Returns:
            list[SplitQuantityRow]: One row per split.
        """
        if not account_guids:
            return []
        query = text(
            """
            SELECT s.account_guid AS account_guid,
                   s.quantity_num AS quantity_num,
                   s.quantity_denom AS quantity_denom,
                   t.post_date AS post_date
            FROM splits s
            JOIN transactions t ON t.guid = s.tx_guid
            WHERE s.account_guid IN :account_guids
            """
        ).bindparams(bindparam("account_guids", expanding=True))
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            rows = conn.execute(query, {"account_guids": list(account_guids)}).all()
        return [
            SplitQuantityRow(
                account_guid=row.account_guid,
                post_date=coerce_date(row.post_date),
                quantity=money_from_columns(row.quantity_num, row.quantity_denom),
            )
            for row in rows
        ]

    def fetch_transactions(
        self,
        account_guids: list[str] | None = None,
    ) -> list[Transaction]:
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            return select_transactions(conn, account_guids=account_guids)


__all__ = ["SqlAlchemyLedgerRepository"]

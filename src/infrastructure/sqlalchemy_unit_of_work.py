"""SQLAlchemy unit of work for atomic ledger writes."""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.unit_of_work import LedgerUnitOfWorkPort
from src.domain.errors import ConcurrentCreateConflict
from src.domain.models import Account, Commodity, Transaction
from src.infrastructure.ledger_sql import (
    POST_DATE_TIME,
    select_accounts,
    select_any_currency,
    select_child_account,
    select_commodities,
    select_commodity,
    select_transactions,
    split_params,
)

INSERT_ACCOUNT_SQL = text(
    """
    INSERT INTO accounts (
        guid, name, account_type, commodity_guid, commodity_scu,
        non_std_scu, parent_guid, code, description, hidden, placeholder
    ) VALUES (
        :guid, :name, :account_type, :commodity_guid, :commodity_scu,
        0, :parent_guid, '', '', :hidden, :placeholder
    )
    """
)

INSERT_TRANSACTION_SQL = text(
    """
    INSERT INTO transactions (
        guid, currency_guid, num, post_date, enter_date, description
    ) VALUES (
        :guid, :currency_guid, :num, :post_date, :enter_date, :description
    )
    """
)

UPDATE_TRANSACTION_SQL = text(
    """
    UPDATE transactions
    SET currency_guid = :currency_guid,
        num = :num,
        post_date = :post_date,
        description = :description
    WHERE guid = :guid
    """
)

INSERT_SPLIT_SQL = text(
    """
    INSERT INTO splits (
        guid, tx_guid, account_guid, memo, action, reconcile_state,
        reconcile_date, value_num, value_denom, quantity_num,
        quantity_denom, lot_guid
    ) VALUES (
        :guid, :tx_guid, :account_guid, :memo, :action, :reconcile_state,
        :reconcile_date, :value_num, :value_denom, :quantity_num,
        :quantity_denom, NULL
    )
    """
)

DELETE_SPLITS_SQL = text("DELETE FROM splits WHERE tx_guid = :tx_guid")


class SqlAlchemyLedgerUnitOfWork(LedgerUnitOfWorkPort):
    """Unit of work running every call on one ``engine.begin()`` connection.

    Leaving the ``with`` block commits; an exception rolls everything back.
    Account inserts run inside a SAVEPOINT so a unique-index conflict can be
    recovered without aborting the outer transaction.
    """

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the unit of work.

        Args:
            db_port: Port providing access to the GnuCash engine.
        """
        self._db_port = db_port
        self._context = None
        self._conn: Connection | None = None

    def __enter__(self) -> "SqlAlchemyLedgerUnitOfWork":
        engine = self._db_port.get_gnucash_engine()
        self._context = engine.begin()
        self._conn = self._context.__enter__()
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        context = self._context
        self._context = None
        self._conn = None
        context.__exit__(exc_type, exc, traceback)

    @property
    def connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("Unit of work is not active; use it in a with block")
        return self._conn

    def fetch_accounts(self, guids: list[str]) -> dict[str, Account]:
        accounts = select_accounts(self.connection, guids)
        return {account.guid: account for account in accounts}

    def fetch_commodities(self, guids: list[str]) -> dict[str, Commodity]:
        return select_commodities(self.connection, guids)

    def find_commodity(self, namespace: str, mnemonic: str) -> Commodity | None:
        return select_commodity(self.connection, namespace, mnemonic)

    def find_any_currency(self) -> Commodity | None:
        return select_any_currency(self.connection)

    def find_child_account(
        self,
        parent_guid: str,
        name: str,
        account_type: str | None = None,
    ) -> Account | None:
        return select_child_account(
            self.connection,
            parent_guid,
            name,
            account_type,
        )

    def create_account(self, account: Account) -> Account:
        """Insert an account inside a savepoint.

        Raises:
            ConcurrentCreateConflict: If the ``(parent_guid, name, account_type)``
                unique index rejects the insert.
        """
        params = {
            "guid": account.guid,
            "name": account.name,
            "account_type": account.account_type,
            "commodity_guid": account.commodity_guid,
            "commodity_scu": account.commodity_scu,
            "parent_guid": account.parent_guid,
            "hidden": int(account.hidden),
            "placeholder": int(account.placeholder),
        }
        try:
            with self.connection.begin_nested():
                self.connection.execute(INSERT_ACCOUNT_SQL, params)
        except IntegrityError as exc:
            raise ConcurrentCreateConflict(account.parent_guid, account.name) from exc
        return account

    def fetch_transaction(self, tx_guid: str) -> Transaction | None:
        transactions = select_transactions(self.connection, tx_guids=[tx_guid])
        return transactions[0] if transactions else None

    def add_transaction(self, transaction: Transaction) -> None:
        self.connection.execute(
            INSERT_TRANSACTION_SQL,
            {
                **self._header_params(transaction),
                "enter_date": transaction.enter_date,
            },
        )
        self._insert_splits(transaction)

    def delete_transaction_splits(self, tx_guid: str) -> int:
        result = self.connection.execute(DELETE_SPLITS_SQL, {"tx_guid": tx_guid})
        return result.rowcount

    def update_transaction(self, transaction: Transaction) -> None:
        self.connection.execute(
            UPDATE_TRANSACTION_SQL,
            self._header_params(transaction),
        )
        self._insert_splits(transaction)

    def _insert_splits(self, transaction: Transaction) -> None:
        if not transaction.splits:
            return
        self.connection.execute(
            INSERT_SPLIT_SQL,
            [split_params(transaction.guid, split) for split in transaction.splits],
        )

    @staticmethod
    def _header_params(transaction: Transaction) -> dict:
        return {
            "guid": transaction.guid,
            "currency_guid": transaction.currency_guid,
            "num": transaction.num,
            "post_date": datetime.combine(transaction.post_date, POST_DATE_TIME),
            "description": transaction.description,
        }


__all__ = ["SqlAlchemyLedgerUnitOfWork"]

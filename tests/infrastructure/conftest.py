"""Fixtures providing a small GnuCash-shaped SQLite book."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from src.application.ports.database import DatabaseEnginePort
from src.infrastructure.schema import prepare_schema

GUIDS = SimpleNamespace(
    usd="10" * 16,
    eur="20" * 16,
    gbp="30" * 16,
    chf="40" * 16,
    xyz="50" * 16,
    root="a0" * 16,
    template="a1" * 16,
    assets="b0" * 16,
    checking="b1" * 16,
    savings="b2" * 16,
    expenses="c0" * 16,
    groceries="c1" * 16,
    opening="d0" * 16,
    transfer="d1" * 16,
)

SCHEMA = (
    """
    CREATE TABLE books (
        guid TEXT PRIMARY KEY,
        root_account_guid TEXT NOT NULL,
        root_template_guid TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE commodities (
        guid TEXT PRIMARY KEY,
        namespace TEXT NOT NULL,
        mnemonic TEXT NOT NULL,
        fullname TEXT,
        cusip TEXT,
        fraction INTEGER NOT NULL,
        quote_flag INTEGER NOT NULL DEFAULT 0,
        quote_source TEXT,
        quote_tz TEXT
    )
    """,
    """
    CREATE TABLE accounts (
        guid TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        account_type TEXT NOT NULL,
        commodity_guid TEXT,
        commodity_scu INTEGER NOT NULL,
        non_std_scu INTEGER NOT NULL,
        parent_guid TEXT,
        code TEXT,
        description TEXT,
        hidden INTEGER,
        placeholder INTEGER
    )
    """,
    """
    CREATE TABLE transactions (
        guid TEXT PRIMARY KEY,
        currency_guid TEXT NOT NULL,
        num TEXT NOT NULL,
        post_date TEXT,
        enter_date TEXT,
        description TEXT
    )
    """,
    """
    CREATE TABLE splits (
        guid TEXT PRIMARY KEY,
        tx_guid TEXT NOT NULL,
        account_guid TEXT NOT NULL,
        memo TEXT NOT NULL,
        action TEXT NOT NULL,
        reconcile_state TEXT NOT NULL,
        reconcile_date TEXT,
        value_num INTEGER NOT NULL,
        value_denom INTEGER NOT NULL,
        quantity_num INTEGER NOT NULL,
        quantity_denom INTEGER NOT NULL,
        lot_guid TEXT
    )
    """,
    """
    CREATE TABLE prices (
        guid TEXT PRIMARY KEY,
        commodity_guid TEXT NOT NULL,
        currency_guid TEXT NOT NULL,
        date TEXT NOT NULL,
        source TEXT,
        type TEXT,
        value_num INTEGER NOT NULL,
        value_denom INTEGER NOT NULL
    )
    """,
)

COMMODITIES = (
    (GUIDS.usd, "CURRENCY", "USD", "US Dollar", 100),
    (GUIDS.eur, "CURRENCY", "EUR", "Euro", 100),
    (GUIDS.gbp, "CURRENCY", "GBP", "Pound Sterling", 100),
    (GUIDS.chf, "CURRENCY", "CHF", "Swiss Franc", 100),
    (GUIDS.xyz, "NYSE", "XYZ", "XYZ Corp", 10000),
)

ACCOUNTS = (
    (GUIDS.root, "Root Account", "ROOT", None, None, 0),
    (GUIDS.template, "Template Root", "ROOT", None, None, 0),
    (GUIDS.assets, "Assets", "ASSET", GUIDS.usd, GUIDS.root, 1),
    (GUIDS.checking, "Checking", "BANK", GUIDS.usd, GUIDS.assets, 0),
    (GUIDS.savings, "Savings", "BANK", GUIDS.eur, GUIDS.assets, 0),
    (GUIDS.expenses, "Expenses", "EXPENSE", GUIDS.usd, GUIDS.root, 1),
    (GUIDS.groceries, "Groceries", "EXPENSE", GUIDS.usd, GUIDS.expenses, 0),
)

# (tx_guid, post_date, description, [(split_guid, account, value, quantity, state)])
TRANSACTIONS = (
    (
        GUIDS.opening,
        "2024-01-02 10:59:00",
        "Opening balance",
        [
            ("e1" * 16, GUIDS.checking, 100000, 100000, "y"),
            ("e2" * 16, GUIDS.groceries, -100000, -100000, "n"),
        ],
    ),
    (
        GUIDS.transfer,
        "2024-03-01 10:59:00",
        "Move to savings",
        [
            ("f1" * 16, GUIDS.checking, -11000, -11000, "n"),
            ("f2" * 16, GUIDS.savings, 11000, 10000, "c"),
        ],
    ),
)

PRICES = (
    ("p1", GUIDS.eur, GUIDS.usd, "2024-01-01 00:00:00", 105, 100),
    ("p2", GUIDS.eur, GUIDS.usd, "2024-02-01 00:00:00", 110, 100),
    ("p3", GUIDS.eur, GUIDS.usd, "2024-06-01 00:00:00", 120, 100),
    ("p4", GUIDS.usd, GUIDS.chf, "2024-01-15 00:00:00", 90, 100),
    ("p5", GUIDS.gbp, GUIDS.usd, "2024-01-10 00:00:00", 125, 100),
)


class _SqliteDatabasePort(DatabaseEnginePort):
    def __init__(self, url: str) -> None:
        self._engine = create_engine(url)

    def get_gnucash_engine(self):
        return self._engine


def _seed(engine) -> None:
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.exec_driver_sql(statement)
        conn.exec_driver_sql(
            "INSERT INTO books VALUES (?, ?, ?)",
            ("b" * 32, GUIDS.root, GUIDS.template),
        )
        for guid, namespace, mnemonic, fullname, fraction in COMMODITIES:
            conn.exec_driver_sql(
                "INSERT INTO commodities (guid, namespace, mnemonic, fullname, "
                "fraction) VALUES (?, ?, ?, ?, ?)",
                (guid, namespace, mnemonic, fullname, fraction),
            )
        for guid, name, account_type, commodity, parent, placeholder in ACCOUNTS:
            conn.exec_driver_sql(
                "INSERT INTO accounts VALUES (?, ?, ?, ?, ?, 0, ?, '', '', 0, ?)",
                (
                    guid,
                    name,
                    account_type,
                    commodity,
                    10000 if commodity == GUIDS.xyz else 100,
                    parent,
                    placeholder,
                ),
            )
        for tx_guid, post_date, description, splits in TRANSACTIONS:
            conn.exec_driver_sql(
                "INSERT INTO transactions VALUES (?, ?, '', ?, ?, ?)",
                (tx_guid, GUIDS.usd, post_date, post_date, description),
            )
            for split_guid, account, value, quantity, state in splits:
                conn.exec_driver_sql(
                    "INSERT INTO splits VALUES "
                    "(?, ?, ?, '', '', ?, ?, ?, 100, ?, 100, NULL)",
                    (
                        split_guid,
                        tx_guid,
                        account,
                        state,
                        "2024-01-05 10:59:00" if state == "y" else None,
                        value,
                        quantity,
                    ),
                )
        for guid, commodity, currency, when, num, denom in PRICES:
            conn.exec_driver_sql(
                "INSERT INTO prices VALUES (?, ?, ?, ?, 'user:price', "
                "'last', ?, ?)",
                (guid, commodity, currency, when, num, denom),
            )


@pytest.fixture
def gnucash_db(tmp_path):
    """Return a database port over a seeded book plus its GUIDs."""
    db_port = _SqliteDatabasePort(f"sqlite:///{tmp_path / 'book.gnucash'}")
    _seed(db_port.get_gnucash_engine())
    prepare_schema(db_port, logger=MagicMock())
    return SimpleNamespace(port=db_port, guids=GUIDS)

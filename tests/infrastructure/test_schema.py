"""Tests for the index preparation helpers."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from src.infrastructure.schema import (
    POSTGRES_ONLY_INDEXES,
    UNIQUE_ACCOUNT_NAME_INDEX,
    prepare_schema,
    schema_statements,
)


def test_schema_statements_by_dialect():
    sqlite = schema_statements("sqlite")
    postgres = schema_statements("postgresql")

    assert sqlite[0] == UNIQUE_ACCOUNT_NAME_INDEX
    assert not set(POSTGRES_ONLY_INDEXES) & set(sqlite)
    assert postgres[-len(POSTGRES_ONLY_INDEXES):] == list(POSTGRES_ONLY_INDEXES)


def test_prepare_schema_is_idempotent(gnucash_db):
    """Running twice is harmless and the unique index is enforced."""
    count = prepare_schema(gnucash_db.port, logger=MagicMock())
    engine = gnucash_db.port.get_gnucash_engine()

    with engine.connect() as conn:
        names = {
            row.name
            for row in conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'index'")
            )
        }
    assert count == len(schema_statements("sqlite"))
    assert "idx_accounts_parent_name_type" in names

    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO accounts (guid, name, account_type, "
                    "commodity_scu, non_std_scu, parent_guid) "
                    "VALUES ('dup', 'Checking', 'BANK', 100, 0, :parent)"
                ),
                {"parent": gnucash_db.guids.assets},
            )


def test_prepare_schema_analyzes_postgres():
    engine = MagicMock()
    engine.dialect.name = "postgresql"
    db_port = MagicMock()
    db_port.get_gnucash_engine.return_value = engine
    logger = MagicMock()

    count = prepare_schema(db_port, logger=logger)

    conn = engine.begin.return_value.__enter__.return_value
    executed = [str(call.args[0]) for call in conn.execute.call_args_list]
    assert count == len(schema_statements("postgresql"))
    assert executed[-1] == "ANALYZE"
    logger.info.assert_called_once()


def test_unique_index_allows_same_name_with_other_type(gnucash_db):
    """A TRADING sibling may share its name with a user account."""
    engine = gnucash_db.port.get_gnucash_engine()
    insert = text(
        "INSERT INTO accounts (guid, name, account_type, "
        "commodity_scu, non_std_scu, parent_guid) "
        "VALUES (:guid, 'Trading', :account_type, 100, 0, :parent)"
    )

    with engine.begin() as conn:
        for guid, account_type in (("user", "ASSET"), ("system", "TRADING")):
            conn.execute(
                insert,
                {
                    "guid": guid,
                    "account_type": account_type,
                    "parent": gnucash_db.guids.root,
                },
            )
        count = conn.execute(
            text("SELECT COUNT(*) FROM accounts WHERE name = 'Trading'")
        ).scalar()

    assert count == 2

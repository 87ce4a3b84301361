"""Indexes the ledger engine relies on, created idempotently."""

from sqlalchemy import text

from src.application.ports.database import DatabaseEnginePort
from src.infrastructure.logging.logger import get_app_logger

# Trading account creation relies on this index to detect concurrent inserts.
UNIQUE_ACCOUNT_NAME_INDEX = (
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_accounts_parent_name_type "
    "ON accounts (parent_guid, name, account_type)"
)

PERFORMANCE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_prices_commodity_currency_date "
    "ON prices (commodity_guid, currency_guid, date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_prices_commodity_date "
    "ON prices (commodity_guid, date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_accounts_parent_guid "
    "ON accounts (parent_guid)",
    "CREATE INDEX IF NOT EXISTS idx_accounts_account_type "
    "ON accounts (account_type)",
    "CREATE INDEX IF NOT EXISTS idx_accounts_commodity_guid "
    "ON accounts (commodity_guid)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_post_date_enter "
    "ON transactions (post_date DESC, enter_date DESC)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_currency_guid "
    "ON transactions (currency_guid)",
    "CREATE INDEX IF NOT EXISTS idx_splits_account_reconcile "
    "ON splits (account_guid, reconcile_state)",
)

POSTGRES_ONLY_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_transactions_description "
    "ON transactions USING btree (description varchar_pattern_ops)",
)


def schema_statements(dialect_name: str) -> list[str]:
    """Return the DDL statements to run for a database dialect."""
    statements = [UNIQUE_ACCOUNT_NAME_INDEX, *PERFORMANCE_INDEXES]
    if dialect_name == "postgresql":
        statements.extend(POSTGRES_ONLY_INDEXES)
    return statements


def prepare_schema(db_port: DatabaseEnginePort, logger=None) -> int:
    """Create the engine's indexes when they do not exist yet.

    Args:
        db_port: Port providing access to the GnuCash engine.
        logger: Optional logger compatible with logging.Logger-like API.

    Returns:
        int: Number of statements executed.
    """
    resolved_logger = logger or get_app_logger()
    engine = db_port.get_gnucash_engine()
    statements = schema_statements(engine.dialect.name)
    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))
        if engine.dialect.name == "postgresql":
            conn.execute(text("ANALYZE"))
    resolved_logger.info(f"Schema prepared with {len(statements)} index statements")
    return len(statements)


__all__ = [
    "UNIQUE_ACCOUNT_NAME_INDEX",
    "PERFORMANCE_INDEXES",
    "schema_statements",
    "prepare_schema",
]

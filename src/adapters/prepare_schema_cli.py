"""CLI adapter creating the indexes the ledger engine needs."""

from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.schema import prepare_schema


def main() -> None:
    """Apply the schema preparation statements."""
    logger = get_app_logger()
    db_adapter = SqlAlchemyDatabaseEngineAdapter()

    count = prepare_schema(db_adapter, logger=logger)

    print(f"Applied {count} index statements to the GnuCash database.")


if __name__ == "__main__":  # pragma: no cover
    main()

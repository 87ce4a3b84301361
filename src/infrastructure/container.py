"""Composition root for wiring infrastructure adapters."""

from collections.abc import Callable

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.exchange_rates import ExchangeRatePort
from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.application.ports.unit_of_work import LedgerUnitOfWorkPort
from src.application.use_cases.audit_ledger import AuditLedgerUseCase
from src.application.use_cases.get_account_balances import (
    GetAccountBalancesUseCase,
)
from src.application.use_cases.record_transaction import (
    RecordTransactionUseCase,
)
from src.domain.constants import CURRENCY_NAMESPACE
from src.domain.models import LedgerBook
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_repository_factory import (
    create_exchange_rate_repository,
    create_ledger_repository,
)
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.settings import LedgerSettings
from src.infrastructure.sqlalchemy_unit_of_work import (
    SqlAlchemyLedgerUnitOfWork,
)


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_repository(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> LedgerReadRepositoryPort:
    """Return the configured ledger read repository."""
    resolved_db = db_port or build_database_adapter()
    return create_ledger_repository(
        resolved_db,
        logger=get_app_logger(),
        settings=settings or LedgerSettings.from_env(),
    )


def build_exchange_rates(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> ExchangeRatePort:
    """Return the configured exchange-rate adapter."""
    resolved_db = db_port or build_database_adapter()
    return create_exchange_rate_repository(
        resolved_db,
        logger=get_app_logger(),
        settings=settings or LedgerSettings.from_env(),
    )


def build_unit_of_work_factory(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> Callable[[], LedgerUnitOfWorkPort]:
    """Return a factory of SQL units of work.

    Raises:
        RuntimeError: If the configured backend is read-only.
    """
    resolved_settings = settings or LedgerSettings.from_env()
    if resolved_settings.backend != "sqlalchemy":
        raise RuntimeError(
            f"Backend '{resolved_settings.backend}' is read-only; "
            "set GNUCASH_BACKEND=sqlalchemy to record transactions."
        )
    resolved_db = db_port or build_database_adapter()
    return lambda: SqlAlchemyLedgerUnitOfWork(resolved_db)


def build_ledger_book(
    repository: LedgerReadRepositoryPort,
    settings: LedgerSettings | None = None,
) -> LedgerBook:
    """Resolve the book root and base currency.

    Raises:
        RuntimeError: If no root account or base currency can be found.
    """
    resolved_settings = settings or LedgerSettings.from_env()
    root_guid = (
        resolved_settings.book_root_guid or repository.find_root_account_guid()
    )
    if not root_guid:
        raise RuntimeError("No book root account found; set BOOK_ROOT_GUID.")
    base_currency = repository.find_commodity(
        CURRENCY_NAMESPACE,
        resolved_settings.base_currency,
    )
    if base_currency is None:
        raise RuntimeError(
            f"Missing currency in commodities: {resolved_settings.base_currency}"
        )
    return LedgerBook(root_account_guid=root_guid, base_currency=base_currency)


def build_account_balances_use_case(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> GetAccountBalancesUseCase:
    """Return the account balances use case wired to the backend."""
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_db = db_port or build_database_adapter()
    repository = build_ledger_repository(resolved_db, resolved_settings)
    return GetAccountBalancesUseCase(
        repository,
        build_exchange_rates(resolved_db, resolved_settings),
        build_ledger_book(repository, resolved_settings),
        logger=get_app_logger(),
    )


def build_record_transaction_use_case(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> RecordTransactionUseCase:
    """Return the transaction recording use case."""
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_db = db_port or build_database_adapter()
    repository = build_ledger_repository(resolved_db, resolved_settings)
    return RecordTransactionUseCase(
        build_unit_of_work_factory(resolved_db, resolved_settings),
        build_ledger_book(repository, resolved_settings),
        logger=get_app_logger(),
    )


def build_audit_ledger_use_case(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> AuditLedgerUseCase:
    """Return the ledger audit use case."""
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_db = db_port or build_database_adapter()
    repository = build_ledger_repository(resolved_db, resolved_settings)
    return AuditLedgerUseCase(
        repository,
        build_ledger_book(repository, resolved_settings),
        logger=get_app_logger(),
    )


__all__ = [
    "build_database_adapter",
    "build_ledger_repository",
    "build_exchange_rates",
    "build_unit_of_work_factory",
    "build_ledger_book",
    "build_account_balances_use_case",
    "build_record_transaction_use_case",
    "build_audit_ledger_use_case",
]

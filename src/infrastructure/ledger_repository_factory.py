"""Factory helpers to select the ledger read backend."""

from pathlib import Path

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.exchange_rates import ExchangeRatePort
from src.application.ports.ledger_repository import LedgerReadRepositoryPort
from src.infrastructure.exchange_rates import SqlAlchemyExchangeRateRepository
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.piecash_repository import (
    PieCashExchangeRateRepository,
    PieCashLedgerRepository,
)
from src.infrastructure.settings import LedgerSettings
from src.infrastructure.sqlalchemy_ledger_repository import (
    SqlAlchemyLedgerRepository,
)


def _require_piecash_path(raw_path: str | Path | None, logger) -> Path | str:
    if not raw_path:
        logger.warning(
            "Missing piecash file path; set PIECASH_FILE to enable the backend"
        )
        raise RuntimeError("PieCash backend requires a PIECASH_FILE path.")
    return raw_path


def create_ledger_repository(
    db_port: DatabaseEnginePort,
    logger=None,
    settings: LedgerSettings | None = None,
) -> LedgerReadRepositoryPort:
    """Return the ledger read repository for the configured backend.

    Args:
        db_port: Port providing access to the GnuCash engine (SQL backend).
        logger: Optional logger compatible with logging.Logger-like API.
        settings: Optional settings; read from the environment when omitted.

    Returns:
        LedgerReadRepositoryPort: Concrete repository implementation.

    Raises:
        RuntimeError: If the piecash backend has no book path.
    """
    resolved_logger = logger or get_app_logger()
    resolved_settings = settings or LedgerSettings.from_env()
    if resolved_settings.backend == "piecash":
        path = _require_piecash_path(
            resolved_settings.piecash_file,
            resolved_logger,
        )
        return PieCashLedgerRepository(path, logger=resolved_logger)
    return SqlAlchemyLedgerRepository(db_port)


def create_exchange_rate_repository(
    db_port: DatabaseEnginePort,
    logger=None,
    settings: LedgerSettings | None = None,
) -> ExchangeRatePort:
    """Return the exchange-rate adapter for the configured backend."""
    resolved_logger = logger or get_app_logger()
    resolved_settings = settings or LedgerSettings.from_env()
    if resolved_settings.backend == "piecash":
        path = _require_piecash_path(
            resolved_settings.piecash_file,
            resolved_logger,
        )
        return PieCashExchangeRateRepository(path, logger=resolved_logger)
    return SqlAlchemyExchangeRateRepository(db_port)


__all__ = ["create_ledger_repository", "create_exchange_rate_repository"]

"""Application ports package."""

from .database import DatabaseEnginePort
from .exchange_rates import ExchangeRatePort
from .ledger_repository import LedgerReadRepositoryPort
from .unit_of_work import LedgerUnitOfWorkPort

__all__ = [
    "DatabaseEnginePort",
    "ExchangeRatePort",
    "LedgerReadRepositoryPort",
    "LedgerUnitOfWorkPort",
]

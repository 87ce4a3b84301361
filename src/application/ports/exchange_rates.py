"""Port for exchange-rate lookups."""

from datetime import date
from typing import Protocol

from src.domain.models import ExchangeRate


class ExchangeRatePort(Protocol):
    """Port resolving the rate between two commodities."""

    def find_exchange_rate(
        self,
        from_guid: str,
        to_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        """Return the most recent rate on or before ``as_of``, or None."""


__all__ = ["ExchangeRatePort"]

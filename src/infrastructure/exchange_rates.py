"""Exchange-rate lookups against GnuCash price data.

A rate is resolved in order from a direct price, the inverse of the opposite
price, and finally a triangulation through USD then EUR. Triangulation only
combines direct or inverse legs.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import text

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.exchange_rates import ExchangeRatePort
from src.domain.constants import CURRENCY_NAMESPACE, TRIANGULATION_CURRENCIES
from src.domain.models import ExchangeRate
from src.infrastructure.ledger_sql import coerce_date, select_commodity


class ExchangeRateResolver(ExchangeRatePort, ABC):
    """Shared fallback chain; subclasses provide the price reads."""

    def find_exchange_rate(
        self,
        from_guid: str,
        to_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        """Return the rate converting ``from_guid`` into ``to_guid``.

        Args:
            from_guid: Source commodity GUID.
            to_guid: Target commodity GUID.
            as_of: Latest price date considered.

        Returns:
            ExchangeRate | None: Rate with its derivation, None when no
            price path exists.
        """
        if from_guid == to_guid:
            return ExchangeRate(
                from_commodity_guid=from_guid,
                to_commodity_guid=to_guid,
                rate=Decimal("1"),
                date=as_of,
                source="identity",
            )
        rate = self._direct_or_inverse(from_guid, to_guid, as_of)
        if rate is not None:
            return rate
        for mnemonic in TRIANGULATION_CURRENCIES:
            pivot_guid = self._currency_guid(mnemonic)
            if not pivot_guid or pivot_guid in (from_guid, to_guid):
                continue
            first = self._direct_or_inverse(from_guid, pivot_guid, as_of)
            if first is None:
                continue
            second = self._direct_or_inverse(pivot_guid, to_guid, as_of)
            if second is None:
                continue
            return ExchangeRate(
                from_commodity_guid=from_guid,
                to_commodity_guid=to_guid,
                rate=first.rate * second.rate,
                date=_earliest(first.date, second.date),
                source=f"triangulated:{mnemonic}",
            )
        return None

    def _direct_or_inverse(
        self,
        from_guid: str,
        to_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        direct = self._latest_price(from_guid, to_guid, as_of)
        if direct is not None:
            return direct
        opposite = self._latest_price(to_guid, from_guid, as_of)
        if opposite is None or opposite.rate == 0:
            return None
        return ExchangeRate(
            from_commodity_guid=from_guid,
            to_commodity_guid=to_guid,
            rate=Decimal("1") / opposite.rate,
            date=opposite.date,
            source=f"inverse:{opposite.source}",
        )

    @abstractmethod
    def _latest_price(
        self,
        commodity_guid: str,
        currency_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        """Return the latest stored price on or before ``as_of``."""

    @abstractmethod
    def _currency_guid(self, mnemonic: str) -> str | None:
        """Return the GUID of a CURRENCY commodity, or None."""


class SqlAlchemyExchangeRateRepository(ExchangeRateResolver):
    """Exchange rates read from the ``prices`` table."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the GnuCash engine.
        """
        self._db_port = db_port
        self._currency_guids: dict[str, str | None] = {}

    def _latest_price(
        self,
        commodity_guid: str,
        currency_guid: str,
        as_of: date,
    ) -> ExchangeRate | None:
        query = text(
            """
            SELECT value_num, value_denom, date, source
            FROM prices
            WHERE commodity_guid = :commodity_guid
              AND currency_guid = :currency_guid
              AND date <= :as_of
            ORDER BY date DESC
            LIMIT 1
            """
        )
        params = {
            "commodity_guid": commodity_guid,
            "currency_guid": currency_guid,
            "as_of": datetime.combine(as_of, time.max),
        }
        engine = self._db_port.get_gnucash_engine()
        with engine.connect() as conn:
            row = conn.execute(query, params).first()
        if row is None or not row.value_denom:
            return None
        return ExchangeRate(
            from_commodity_guid=commodity_guid,
            to_commodity_guid=currency_guid,
            rate=Decimal(int(row.value_num)) / Decimal(int(row.value_denom)),
            date=coerce_date(row.date),
            source=row.source,
        )

    def _currency_guid(self, mnemonic: str) -> str | None:
        if mnemonic not in self._currency_guids:
            engine = self._db_port.get_gnucash_engine()
            with engine.connect() as conn:
                commodity = select_commodity(conn, CURRENCY_NAMESPACE, mnemonic)
            self._currency_guids[mnemonic] = commodity.guid if commodity else None
        return self._currency_guids[mnemonic]


def _earliest(first: date | None, second: date | None) -> date | None:
    if first is None:
        return second
    if second is None:
        return first
    return min(first, second)


__all__ = ["ExchangeRateResolver", "SqlAlchemyExchangeRateRepository"]

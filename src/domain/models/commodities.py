"""Domain models for commodities."""

from dataclasses import dataclass

from src.domain.constants import CURRENCY_NAMESPACE, DEFAULT_CURRENCY_DENOM


@dataclass(frozen=True)
class Commodity:
    """Currency or tradable instrument.

    Attributes:
        guid: GnuCash GUID.
        namespace: Namespace such as CURRENCY or NASDAQ.
        mnemonic: Symbol such as USD or AAPL.
        fraction: Default denominator for amounts in this commodity.
        fullname: Optional display name.
        quote_source: Optional price quote source.
    """

    guid: str
    namespace: str
    mnemonic: str
    fraction: int = DEFAULT_CURRENCY_DENOM
    fullname: str | None = None
    quote_source: str | None = None

    @property
    def is_currency(self) -> bool:
        """Return True for commodities in the CURRENCY namespace."""
        return (self.namespace or "").upper() == CURRENCY_NAMESPACE


__all__ = ["Commodity"]

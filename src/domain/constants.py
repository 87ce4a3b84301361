"""Domain constants for the ledger engine."""

from fractions import Fraction

CURRENCY_NAMESPACE = "CURRENCY"

DEFAULT_CURRENCY_DENOM = 100

DEBIT_NORMAL_TYPES = (
    "ASSET",
    "BANK",
    "CASH",
    "STOCK",
    "MUTUAL",
    "EXPENSE",
    "RECEIVABLE",
)

CREDIT_NORMAL_TYPES = (
    "LIABILITY",
    "CREDIT",
    "EQUITY",
    "INCOME",
    "PAYABLE",
)

TRADING_ROOT_NAME = "Trading"
TRADING_GROUP_NAME = CURRENCY_NAMESPACE
TRADING_SPLIT_MEMO = "Trading split"

# Quantities arriving from float arithmetic upstream can leave residue below
# this magnitude; it is ignored when deciding which commodities need trading.
IMBALANCE_EPSILON = Fraction(1, 10000)

TRIANGULATION_CURRENCIES = ("USD", "EUR")


__all__ = [
    "CURRENCY_NAMESPACE",
    "DEFAULT_CURRENCY_DENOM",
    "DEBIT_NORMAL_TYPES",
    "CREDIT_NORMAL_TYPES",
    "TRADING_ROOT_NAME",
    "TRADING_GROUP_NAME",
    "TRADING_SPLIT_MEMO",
    "IMBALANCE_EPSILON",
    "TRIANGULATION_CURRENCIES",
]

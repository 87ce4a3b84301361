"""Domain services package."""

from .aggregation import (
    AccountTree,
    aggregate_balances,
    in_period,
    rate_commodities,
)
from .invariants import assert_balanced, check_transaction_balance
from .normalization import (
    coerce_flag,
    normalize_account_type,
    normalize_mnemonic,
    normalize_namespace,
)
from .trading import (
    BalancedSplits,
    balance_splits,
    calculate_quantity_imbalances,
    generate_trading_splits,
    needs_trading_accounts,
)
from .validation import validate_balance_sign, validate_transaction

__all__ = [
    "AccountTree",
    "aggregate_balances",
    "in_period",
    "rate_commodities",
    "assert_balanced",
    "check_transaction_balance",
    "coerce_flag",
    "normalize_account_type",
    "normalize_mnemonic",
    "normalize_namespace",
    "BalancedSplits",
    "balance_splits",
    "calculate_quantity_imbalances",
    "generate_trading_splits",
    "needs_trading_accounts",
    "validate_balance_sign",
    "validate_transaction",
]

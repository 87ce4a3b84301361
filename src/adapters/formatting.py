"""Display helpers shared by the CLI and Streamlit adapters."""

from decimal import Decimal

from src.domain.constants import CREDIT_NORMAL_TYPES


def display_balance(account_type: str, amount: Decimal) -> Decimal:
    """Return the amount with the sign a reader expects.

    GnuCash stores credits as negative numbers; income, liability, equity
    and similar credit-normal accounts are shown positive when they carry
    their normal balance.
    """
    if account_type in CREDIT_NORMAL_TYPES:
        return -amount
    return amount


def format_amount(value: Decimal, currency_code: str) -> str:
    """Format an amount with thousands separators and its currency."""
    return f"{value:,.2f} {currency_code}"


__all__ = ["display_balance", "format_amount"]

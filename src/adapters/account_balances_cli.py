"""CLI adapter printing the account balance tree.

The period comes from ``BALANCES_START_DATE`` / ``BALANCES_END_DATE`` (ISO
dates, either may be omitted) or ``BALANCES_PERIOD``; ``BALANCES_ROOT_GUID``
limits the output to one subtree.
"""

import os

from src.adapters.formatting import display_balance, format_amount
from src.domain.models import AccountBalancesReport, BalanceQuery
from src.infrastructure.container import build_account_balances_use_case
from src.infrastructure.logging.logger import get_app_logger, get_usage_logger


def _query_from_env() -> BalanceQuery:
    """Build the balance query from environment variables."""
    start_date = os.getenv("BALANCES_START_DATE")
    end_date = os.getenv("BALANCES_END_DATE")
    payload = {
        "period": os.getenv("BALANCES_PERIOD", "all_time"),
        "root_guid": os.getenv("BALANCES_ROOT_GUID"),
    }
    if start_date or end_date:
        payload.update(
            period="range",
            start_date=start_date,
            end_date=end_date,
        )
    return BalanceQuery.from_mapping(payload)


def _format_report(report: AccountBalancesReport) -> list[str]:
    """Render one line per account, indented by depth."""
    lines = []
    for balance in report.balances:
        total = display_balance(balance.account_type, balance.total_balance)
        period = display_balance(balance.account_type, balance.period_balance)
        marker = " *" if balance.rate_missing or balance.partial else ""
        lines.append(
            f"{'  ' * balance.depth}{balance.name}: "
            f"{format_amount(total, report.currency_code)} "
            f"(period {format_amount(period, report.currency_code)}){marker}"
        )
    return lines


def main() -> None:
    """Compute and print account balances."""
    logger = get_app_logger()
    get_usage_logger().info("account_balances_cli run")
    query = _query_from_env()
    use_case = build_account_balances_use_case()

    report = use_case.execute(query)

    for line in _format_report(report):
        print(line)
    if report.is_partial:
        print(
            "* partial: no exchange rate for "
            f"{', '.join(report.missing_rates)}"
        )
    logger.info(f"Printed {len(report.balances)} balances as of {report.as_of}")


if __name__ == "__main__":  # pragma: no cover
    main()

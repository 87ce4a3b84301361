"""Streamlit page showing the account balance tree."""

from datetime import date

import streamlit as st

from src.adapters.formatting import display_balance, format_amount
from src.domain.models import AccountBalancesReport, BalanceQuery, PeriodKind
from src.infrastructure.container import build_account_balances_use_case
from src.infrastructure.logging.logger import get_usage_logger

PERIOD_OPTIONS = {
    "All Time": PeriodKind.ALL_TIME,
    "YTD": PeriodKind.YEAR_TO_DATE,
    "QTD": PeriodKind.QUARTER_TO_DATE,
    "MTD": PeriodKind.MONTH_TO_DATE,
    "Last Month": PeriodKind.LAST_MONTH,
    "Custom Range": PeriodKind.RANGE,
}


def _fetch_balances(
    period: str,
    start_date: date | None,
    end_date: date | None,
    root_guid: str | None,
) -> AccountBalancesReport:
    """Run the balances use case for the selected period."""
    query = BalanceQuery.from_mapping(
        {
            "period": period,
            "start_date": start_date,
            "end_date": end_date,
            "root_guid": root_guid,
        }
    )
    use_case = build_account_balances_use_case()
    return use_case.execute(query)


@st.cache_data(show_spinner=False)
def _load_balances(
    period: str,
    start_date: date | None,
    end_date: date | None,
    root_guid: str | None,
) -> AccountBalancesReport:
    """Cached wrapper around _fetch_balances."""
    return _fetch_balances(period, start_date, end_date, root_guid)


def _balance_rows(
    report: AccountBalancesReport,
    hide_zero: bool = False,
) -> list[dict[str, str]]:
    """Build table rows with display signs applied."""
    rows = []
    for balance in report.balances:
        if hide_zero and not balance.total_balance and not balance.period_balance:
            continue
        total = display_balance(balance.account_type, balance.total_balance)
        period = display_balance(balance.account_type, balance.period_balance)
        status = ""
        if balance.rate_missing:
            status = "No rate"
        elif balance.partial:
            status = "Partial"
        rows.append(
            {
                "Account": f"{' ' * balance.depth}{balance.name}",
                "Type": balance.account_type,
                "Balance": format_amount(total, report.currency_code),
                "Period": format_amount(period, report.currency_code),
                "Status": status,
            }
        )
    return rows


def main() -> None:
    """Render the Streamlit app."""
    st.set_page_config(page_title="GnuCash Ledger", layout="wide")
    st.title("Account Balances")
    get_usage_logger().info("streamlit balances page viewed")

    period_label = st.sidebar.selectbox("Period", list(PERIOD_OPTIONS))
    period = PERIOD_OPTIONS[period_label]
    start_date = None
    end_date = None
    if period == PeriodKind.RANGE:
        start_date = st.sidebar.date_input("Start date", value=None)
        end_date = st.sidebar.date_input("End date", value=None)
    root_guid = st.sidebar.text_input("Subtree root GUID", value="").strip()
    hide_zero = st.sidebar.checkbox("Hide zero balances", value=True)

    try:
        report = _load_balances(
            period.value,
            start_date,
            end_date,
            root_guid or None,
        )
    except ValueError as exc:
        st.error(str(exc))
        return

    st.caption(f"Balances in {report.currency_code} as of {report.as_of}")
    if report.is_partial:
        st.warning(
            "Totals are partial; no exchange rate for "
            f"{', '.join(report.missing_rates)}"
        )
    rows = _balance_rows(report, hide_zero=hide_zero)
    if not rows:
        st.info("No balances for the selected period.")
        return
    st.dataframe(rows, width="stretch", hide_index=True, height=600)


if __name__ == "__main__":  # pragma: no cover
    main()

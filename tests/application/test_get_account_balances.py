"""Tests for the account balances use case."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.use_cases.get_account_balances import (
    GetAccountBalancesUseCase,
)
from src.domain.models import (
    Account,
    BalanceQuery,
    Commodity,
    ExchangeRate,
    LedgerBook,
    Money,
    PeriodKind,
    SplitQuantityRow,
)

ROOT = "0" * 32
ASSETS = "a" * 32
CHECKING = "b" * 32
EURO = "c" * 32
STOCK = "d" * 32
INCOME = "e" * 32

USD = Commodity(guid="usd", namespace="CURRENCY", mnemonic="USD")
EUR = Commodity(guid="eur", namespace="CURRENCY", mnemonic="EUR")
XYZ = Commodity(guid="xyz", namespace="NYSE", mnemonic="XYZ")


class _FakeRepository:
    def __init__(self):
        self.accounts = [
            Account(ROOT, "Root Account", "ROOT", None, None),
            Account(ASSETS, "Assets", "ASSET", ROOT, "usd"),
            Account(CHECKING, "Checking", "BANK", ASSETS, "usd"),
            Account(EURO, "Euro", "BANK", ASSETS, "eur"),
            Account(STOCK, "Stock", "STOCK", ASSETS, "xyz"),
            Account(INCOME, "Income", "INCOME", ROOT, "usd"),
        ]
        self.rows = [
            SplitQuantityRow(CHECKING, date(2024, 1, 15), Money(100000)),
            SplitQuantityRow(CHECKING, date(2024, 2, 10), Money(-2500)),
            SplitQuantityRow(INCOME, date(2024, 1, 15), Money(-100000)),
            SplitQuantityRow(EURO, date(2024, 2, 1), Money(10000)),
            SplitQuantityRow(STOCK, date(2024, 2, 1), Money(300)),
        ]
        self.split_requests = []

    def fetch_book_account_guids(self, root_guid):
        assert root_guid == ROOT
        return [account.guid for account in self.accounts]

    def fetch_accounts(self, account_guids=None):
        return [
            account
            for account in self.accounts
            if account_guids is None or account.guid in account_guids
        ]

    def fetch_split_quantities(self, account_guids):
        self.split_requests.append(list(account_guids))
        return [row for row in self.rows if row.account_guid in account_guids]

    def fetch_commodities(self, guids):
        known = {"usd": USD, "eur": EUR, "xyz": XYZ}
        return {guid: known[guid] for guid in guids if guid in known}


class _FakeRates:
    def __init__(self, rates):
        self.rates = rates
        self.calls = []

    def find_exchange_rate(self, from_guid, to_guid, as_of):
        self.calls.append((from_guid, to_guid, as_of))
        rate = self.rates.get(from_guid)
        if rate is None:
            return None
        return ExchangeRate(from_guid, to_guid, rate, as_of)


def _use_case(repository, rates, logger=None):
    return GetAccountBalancesUseCase(
        repository,
        rates,
        LedgerBook(ROOT, USD),
        logger=logger or MagicMock(),
        today=lambda: date(2024, 2, 20),
    )


def test_execute_rolls_up_in_base_currency():
    repository = _FakeRepository()
    rates = _FakeRates({"eur": Decimal("1.1"), "xyz": Decimal("50.125")})

    report = _use_case(repository, rates).execute()
    balances = report.by_guid()

    assert report.currency_code == "USD"
    assert report.as_of == date(2024, 2, 20)
    assert report.is_partial is False
    assert balances[CHECKING].total_balance == Decimal("975.00")
    assert balances[EURO].total_balance == Decimal("110.00")
    assert balances[STOCK].total_balance == Decimal("150.38")
    assert balances[ASSETS].total_balance == Decimal("1235.38")
    assert balances[INCOME].total_balance == Decimal("-1000.00")
    assert balances[ROOT].total_balance == Decimal("235.38")
    assert report.balances[0].guid == ROOT
    assert len(repository.split_requests) == 1


def test_execute_fetches_one_rate_per_commodity():
    rates = _FakeRates({"eur": Decimal("1.1"), "xyz": Decimal("2")})

    _use_case(_FakeRepository(), rates).execute()

    assert sorted(call[0] for call in rates.calls) == ["eur", "xyz"]
    assert all(call[2] == date(2024, 2, 20) for call in rates.calls)


def test_period_query_uses_range_and_end_date_for_rates():
    rates = _FakeRates({"eur": Decimal("1.1"), "xyz": Decimal("2")})
    query = BalanceQuery(
        period=PeriodKind.RANGE,
        start_date=date(2024, 2, 1),
        end_date=date(2024, 2, 15),
    )

    report = _use_case(_FakeRepository(), rates).execute(query)
    balances = report.by_guid()

    assert report.as_of == date(2024, 2, 15)
    assert balances[CHECKING].period_balance == Decimal("-25.00")
    assert balances[CHECKING].total_balance == Decimal("975.00")
    assert balances[INCOME].period_balance == Decimal("0.00")
    assert rates.calls[0][2] == date(2024, 2, 15)


def test_missing_rate_returns_partial_report():
    """A missing rate degrades to a partial report instead of failing."""
    logger = MagicMock()
    rates = _FakeRates({"eur": Decimal("1.1")})

    report = _use_case(_FakeRepository(), rates, logger).execute()
    balances = report.by_guid()

    assert report.missing_rates == ("XYZ",)
    assert report.is_partial is True
    assert balances[STOCK].rate_missing is True
    assert balances[ASSETS].partial is True
    assert balances[ASSETS].total_balance == Decimal("1085.00")
    logger.warning.assert_any_call("Balances are partial; missing rates for XYZ")


def test_subtree_query_limits_accounts():
    repository = _FakeRepository()
    rates = _FakeRates({"eur": Decimal("1.1"), "xyz": Decimal("2")})

    report = _use_case(repository, rates).execute(BalanceQuery(root_guid=ASSETS))

    assert [balance.guid for balance in report.balances][0] == ASSETS
    assert INCOME not in report.by_guid()
    assert INCOME not in repository.split_requests[0]


def test_unknown_subtree_root_is_rejected():
    with pytest.raises(ValueError, match="not part of the book"):
        _use_case(_FakeRepository(), _FakeRates({})).execute(
            BalanceQuery(root_guid="f" * 32)
        )


def test_missing_base_currency_is_an_error():
    use_case = GetAccountBalancesUseCase(
        _FakeRepository(),
        _FakeRates({}),
        LedgerBook(ROOT),
        logger=MagicMock(),
    )

    with pytest.raises(RuntimeError):
        use_case.execute()

"""Tests for the ledger audit use case."""

from datetime import date, datetime
from fractions import Fraction
from unittest.mock import MagicMock

from src.application.use_cases.audit_ledger import AuditLedgerUseCase
from src.domain.models import (
    Account,
    Commodity,
    LedgerBook,
    Money,
    SplitDraft,
    Transaction,
)

USD = Commodity(guid="usd", namespace="CURRENCY", mnemonic="USD")
EUR = Commodity(guid="eur", namespace="CURRENCY", mnemonic="EUR")


def _transaction(guid, *splits):
    return Transaction(
        guid=guid,
        currency_guid="usd",
        post_date=date(2024, 1, 1),
        enter_date=datetime(2024, 1, 1),
        description=f"tx {guid}",
        splits=tuple(splits),
    )


def _split(account, value, quantity=None):
    return SplitDraft(
        account,
        Money(value),
        Money(value if quantity is None else quantity),
    )


class _FakeRepository:
    def __init__(self, transactions):
        self.transactions = transactions

    def fetch_book_account_guids(self, root_guid):
        return [root_guid, "checking", "savings", "expense"]

    def fetch_accounts(self, account_guids=None):
        return [
            Account("root", "Root Account", "ROOT", None, None),
            Account("checking", "Checking", "BANK", "root", "usd"),
            Account("savings", "Savings", "BANK", "root", "eur"),
            Account("expense", "Expense", "EXPENSE", "root", "usd"),
        ]

    def fetch_transactions(self, account_guids=None):
        return self.transactions

    def fetch_commodities(self, guids):
        return {guid: {"usd": USD, "eur": EUR}[guid] for guid in guids}


def test_clean_ledger_has_no_findings():
    repository = _FakeRepository(
        [_transaction("t1", _split("checking", -500), _split("expense", 500))]
    )
    logger = MagicMock()

    report = AuditLedgerUseCase(repository, LedgerBook("root", USD), logger).execute()

    assert report.clean is True
    assert report.checked == 1
    logger.info.assert_called_once_with("Ledger audit passed for 1 transactions")


def test_imbalanced_transactions_are_reported():
    """Value and quantity residuals are reported with their commodities."""
    repository = _FakeRepository(
        [
            _transaction("ok", _split("checking", -500), _split("expense", 500)),
            _transaction(
                "value",
                _split("checking", -500),
                _split("expense", 400),
            ),
            _transaction(
                "fx",
                _split("checking", -10000),
                _split("savings", 10000, 8500),
            ),
        ]
    )

    report = AuditLedgerUseCase(
        repository,
        LedgerBook("root", USD),
        MagicMock(),
    ).execute()

    assert report.checked == 3
    findings = {finding.tx_guid: finding for finding in report.findings}
    assert set(findings) == {"value", "fx"}
    value_residuals = findings["value"].residuals
    assert value_residuals[0].mnemonic == "USD"
    assert value_residuals[0].imbalance == Fraction(-1)
    fx = {item.mnemonic: item.imbalance for item in findings["fx"].residuals}
    assert fx == {"USD": Fraction(-100), "EUR": Fraction(85)}


def test_missing_commodity_becomes_a_finding():
    repository = _FakeRepository(
        [_transaction("bad", _split("checking", -1), _split("ghost", 1))]
    )

    report = AuditLedgerUseCase(
        repository,
        LedgerBook("root", USD),
        MagicMock(),
    ).execute()

    assert report.clean is False
    assert report.findings[0].error == "Cannot resolve commodity for account ghost"

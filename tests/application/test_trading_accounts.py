"""Tests for trading account provisioning."""

from unittest.mock import MagicMock

import pytest

from src.application.use_cases.trading_accounts import TradingAccountProvisioner
from src.domain.errors import (
    ConcurrentCreateConflict,
    TradingAccountMismatchError,
)
from src.domain.models import Account, Commodity, LedgerBook

USD = Commodity(guid="usd", namespace="CURRENCY", mnemonic="USD")
EUR = Commodity(guid="eur", namespace="CURRENCY", mnemonic="EUR")
AAPL = Commodity(guid="aapl", namespace="NASDAQ", mnemonic="AAPL", fraction=10000)
XYZ_CURRENCY = Commodity(guid="xyz-cur", namespace="CURRENCY", mnemonic="XYZ")
XYZ_STOCK = Commodity(guid="xyz-stock", namespace="NYSE", mnemonic="XYZ")


class _FakeUnitOfWork:
    def __init__(self, accounts=None, any_currency=None):
        self.accounts = {account.guid: account for account in accounts or []}
        self.any_currency = any_currency
        self.created = []
        self.conflicts = {}

    def find_child_account(self, parent_guid, name, account_type=None):
        for account in self.accounts.values():
            if (
                account.parent_guid == parent_guid
                and account.name == name
                and account_type in (None, account.account_type)
            ):
                return account
        return None

    def find_any_currency(self):
        return self.any_currency

    def create_account(self, account):
        winner = self.conflicts.pop(account.name, None)
        if winner is not None:
            self.accounts[winner.guid] = winner
            raise ConcurrentCreateConflict(account.parent_guid, account.name)
        self.accounts[account.guid] = account
        self.created.append(account)
        return account


def _provisioner(uow, logger=None, base_currency=USD):
    return TradingAccountProvisioner(
        uow,
        LedgerBook("root", base_currency),
        logger=logger or MagicMock(),
    )


def test_resolve_creates_full_hierarchy_once():
    """Trading, CURRENCY and the leaf are created on first use only."""
    uow = _FakeUnitOfWork()
    provisioner = _provisioner(uow)

    eur_leaf = provisioner.resolve(EUR)
    again = provisioner.resolve(EUR)
    usd_leaf = provisioner.resolve(USD)

    assert again is eur_leaf
    assert usd_leaf.guid != eur_leaf.guid
    names = [account.name for account in uow.created]
    assert names == ["Trading", "CURRENCY", "EUR", "USD"]
    trading, group, leaf, _ = uow.created
    assert trading.parent_guid == "root"
    assert trading.placeholder is True
    assert trading.account_type == "TRADING"
    assert trading.commodity_guid == "usd"
    assert group.parent_guid == trading.guid
    assert group.account_type == "TRADING"
    assert leaf.parent_guid == group.guid
    assert leaf.placeholder is False
    assert leaf.commodity_guid == "eur"


def test_resolve_reuses_existing_accounts():
    existing = [
        Account("t", "Trading", "TRADING", "root", "usd", placeholder=True),
        Account("g", "CURRENCY", "TRADING", "t", "usd", placeholder=True),
        Account("leaf", "EUR", "TRADING", "g", "eur"),
    ]
    uow = _FakeUnitOfWork(existing)

    assert _provisioner(uow).resolve(EUR).guid == "leaf"
    assert uow.created == []


def test_user_account_named_trading_is_not_reused():
    """A non-TRADING account called Trading gets a TRADING sibling."""
    brokerage = Account("brokerage", "Trading", "ASSET", "root", "usd")
    uow = _FakeUnitOfWork([brokerage])

    leaf = _provisioner(uow).resolve(EUR)

    trading, group, created_leaf = uow.created
    assert trading.guid != "brokerage"
    assert trading.parent_guid == "root"
    assert trading.account_type == "TRADING"
    assert group.parent_guid == trading.guid
    assert leaf is created_leaf
    assert all(account.parent_guid != "brokerage" for account in uow.created)


def test_non_trading_children_are_skipped_at_every_level():
    existing = [
        Account("t", "Trading", "TRADING", "root", "usd", placeholder=True),
        Account("user-group", "CURRENCY", "EQUITY", "t", "usd"),
        Account("g", "CURRENCY", "TRADING", "t", "usd", placeholder=True),
        Account("user-leaf", "EUR", "BANK", "g", "eur"),
    ]
    uow = _FakeUnitOfWork(existing)

    leaf = _provisioner(uow).resolve(EUR)

    assert leaf.guid != "user-leaf"
    assert leaf.parent_guid == "g"
    assert [account.name for account in uow.created] == ["EUR"]


def test_leaf_holding_other_commodity_is_rejected():
    """Commodities sharing a mnemonic cannot share a trading leaf."""
    uow = _FakeUnitOfWork()
    provisioner = _provisioner(uow)
    provisioner.resolve(XYZ_CURRENCY)

    with pytest.raises(TradingAccountMismatchError) as excinfo:
        _provisioner(uow).resolve(XYZ_STOCK)

    assert excinfo.value.expected_guid == "xyz-stock"
    assert excinfo.value.actual_guid == "xyz-cur"


def test_leaf_uses_commodity_fraction():
    uow = _FakeUnitOfWork()

    _provisioner(uow).resolve(AAPL)

    assert uow.created[-1].commodity_scu == 10000
    assert uow.created[-1].commodity_guid == "aapl"


def test_root_commodity_falls_back_without_base_currency():
    """Any stored currency, then the target, stands in for the base."""
    uow = _FakeUnitOfWork(any_currency=EUR)
    _provisioner(uow, base_currency=None).resolve(AAPL)

    assert uow.created[0].commodity_guid == "eur"

    bare = _FakeUnitOfWork()
    _provisioner(bare, base_currency=None).resolve(AAPL)

    assert bare.created[0].commodity_guid == "aapl"


def test_concurrent_creation_uses_winner():
    """A lost insert race resolves to the account the other writer made."""
    uow = _FakeUnitOfWork()
    logger = MagicMock()
    provisioner = _provisioner(uow, logger=logger)
    usd_leaf = provisioner.resolve(USD)
    uow.conflicts["EUR"] = Account(
        "winner",
        "EUR",
        "TRADING",
        usd_leaf.parent_guid,
        "eur",
    )

    assert provisioner.resolve(EUR).guid == "winner"
    assert [account.name for account in uow.created] == [
        "Trading",
        "CURRENCY",
        "USD",
    ]
    logger.info.assert_any_call(
        "Trading account 'EUR' created concurrently; using winner"
    )


def test_conflict_without_winner_is_raised():
    class _LosingUnitOfWork(_FakeUnitOfWork):
        def create_account(self, account):
            raise ConcurrentCreateConflict(account.parent_guid, account.name)

    with pytest.raises(ConcurrentCreateConflict):
        _provisioner(_LosingUnitOfWork()).resolve(EUR)

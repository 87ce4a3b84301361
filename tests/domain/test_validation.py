"""Tests for payload validation and balance sign warnings."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from src.domain.errors import InvalidTransactionError
from src.domain.models import Money, ReconcileState, SplitDraft
from src.domain.services import (
    coerce_flag,
    normalize_account_type,
    normalize_mnemonic,
    normalize_namespace,
    validate_balance_sign,
    validate_transaction,
)
from src.domain.services.validation import collect_transaction_issues

CURRENCY = "a" * 32
CHECKING = "b" * 32
EXPENSE = "c" * 32


def _split(account, value, **kwargs):
    return SplitDraft(
        account_guid=account,
        value=Money(value, 100),
        quantity=Money(value, 100),
        **kwargs,
    )


def test_valid_transaction_passes():
    validate_transaction(
        CURRENCY,
        date(2024, 1, 1),
        [_split(CHECKING, -100), _split(EXPENSE, 100)],
    )


def test_all_issues_are_collected():
    """Every problem is reported, not just the first."""
    with pytest.raises(InvalidTransactionError) as excinfo:
        validate_transaction("bad", None, [_split("", 100)])

    fields = [issue.field for issue in excinfo.value.issues]
    assert fields == [
        "currency_guid",
        "post_date",
        "splits",
        "splits[0].account_guid",
    ]
    assert isinstance(excinfo.value, ValueError)


def test_reconciled_split_needs_date():
    issues = collect_transaction_issues(
        CURRENCY,
        date(2024, 1, 1),
        [
            _split(CHECKING, -100, reconcile_state=ReconcileState.RECONCILED),
            _split(EXPENSE, 100, reconcile_state="x"),
        ],
    )

    assert [issue.field for issue in issues] == [
        "splits[0].reconcile_date",
        "splits[1].reconcile_state",
    ]


def test_validate_balance_sign_warns_on_unusual_sign():
    logger = MagicMock()

    validate_balance_sign("BANK", Decimal("-5"), logger)
    validate_balance_sign("INCOME", Decimal("5"), logger)
    validate_balance_sign("EXPENSE", Decimal("5"), logger)

    assert logger.warning.call_count == 2


def test_normalization_helpers():
    assert normalize_namespace(" currency ") == "CURRENCY"
    assert normalize_namespace("  ") is None
    assert normalize_mnemonic("usd") == "USD"
    assert normalize_mnemonic(None) is None
    assert normalize_account_type(SimpleNamespace(name="bank")) == "BANK"
    assert normalize_account_type(" asset ") == "ASSET"
    assert normalize_account_type(None) == ""
    assert coerce_flag("1") is True
    assert coerce_flag(None) is False
    assert coerce_flag(0) is False

"""Boundary validation for transaction payloads and balance signs."""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from logging import Logger

from src.domain.constants import CREDIT_NORMAL_TYPES, DEBIT_NORMAL_TYPES
from src.domain.errors import InvalidTransactionError, ValidationIssue
from src.domain.models import ReconcileState, SplitDraft
from src.utils.guid import is_valid_guid


def collect_transaction_issues(
    currency_guid: str | None,
    post_date: date | None,
    splits: Sequence[SplitDraft],
) -> list[ValidationIssue]:
    """Return every structural problem of a transaction payload.

    Args:
        currency_guid: Transaction currency GUID.
        post_date: Posting date.
        splits: Candidate splits.

    Returns:
        list[ValidationIssue]: Problems found, empty when the payload is valid.
    """
    issues: list[ValidationIssue] = []
    if not currency_guid:
        issues.append(ValidationIssue("currency_guid", "Currency is required"))
    elif not is_valid_guid(currency_guid):
        issues.append(
            ValidationIssue("currency_guid", "Invalid currency GUID format")
        )
    if post_date is None:
        issues.append(ValidationIssue("post_date", "Post date is required"))
    if len(splits) < 2:
        issues.append(
            ValidationIssue(
                "splits",
                "At least 2 splits are required (double-entry)",
            )
        )
    for index, split in enumerate(splits):
        prefix = f"splits[{index}]"
        label = f"Split {index + 1}"
        if not split.account_guid:
            issues.append(
                ValidationIssue(
                    f"{prefix}.account_guid",
                    f"{label}: Account is required",
                )
            )
        elif not is_valid_guid(split.account_guid):
            issues.append(
                ValidationIssue(
                    f"{prefix}.account_guid",
                    f"{label}: Invalid account GUID format",
                )
            )
        if not isinstance(split.reconcile_state, ReconcileState):
            issues.append(
                ValidationIssue(
                    f"{prefix}.reconcile_state",
                    f"{label}: Invalid reconcile state",
                )
            )
        elif (
            split.reconcile_state == ReconcileState.RECONCILED
            and split.reconcile_date is None
        ):
            issues.append(
                ValidationIssue(
                    f"{prefix}.reconcile_date",
                    f"{label}: Reconciled splits need a reconcile date",
                )
            )
    return issues


def validate_transaction(
    currency_guid: str | None,
    post_date: date | None,
    splits: Sequence[SplitDraft],
) -> None:
    """Raise when a transaction payload is structurally invalid.

    Raises:
        InvalidTransactionError: With every issue found.
    """
    issues = collect_transaction_issues(currency_guid, post_date, splits)
    if issues:
        raise InvalidTransactionError(issues)


def validate_balance_sign(
    account_type: str,
    balance: Decimal,
    logger: Logger,
    debit_types: Iterable[str] = DEBIT_NORMAL_TYPES,
    credit_types: Iterable[str] = CREDIT_NORMAL_TYPES,
) -> None:
    """Warn when a raw balance has the unusual sign for its account type.

    Args:
        account_type: Account type of the balance.
        balance: Raw stored balance (credits negative).
        logger: Logger used for warnings.
        debit_types: Account types that normally carry debit balances.
        credit_types: Account types that normally carry credit balances.
    """
    if account_type in debit_types and balance < 0:
        logger.warning(
            f"Debit-normal balance is negative for account_type={account_type}: {balance}"
        )
    if account_type in credit_types and balance > 0:
        logger.warning(
            f"Credit-normal balance is positive for account_type={account_type}: {balance}"
        )


__all__ = [
    "collect_transaction_issues",
    "validate_transaction",
    "validate_balance_sign",
]

"""CLI adapter auditing stored transactions for double-entry violations."""

from src.infrastructure.container import build_audit_ledger_use_case
from src.infrastructure.logging.logger import get_usage_logger


def main() -> int:
    """Run the audit and print every imbalanced transaction.

    Returns:
        int: Process exit code, 1 when findings exist.
    """
    get_usage_logger().info("audit_ledger_cli run")
    use_case = build_audit_ledger_use_case()

    report = use_case.execute()

    for finding in report.findings:
        details = finding.error or ", ".join(
            f"{item.mnemonic}={item.display_amount}"
            for item in finding.residuals
        )
        print(
            f"{finding.post_date} {finding.tx_guid} "
            f"{finding.description!r}: {details}"
        )
    print(
        f"Checked {report.checked} transactions, "
        f"{len(report.findings)} imbalanced."
    )
    return 0 if report.clean else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""Validated balance query configuration.

Saved reports and schedules store their balance settings as JSON. The payload
is parsed here into an explicit period variant before it reaches the
aggregator, so the engine never receives untyped maps.
"""

from calendar import monthrange
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum

from src.utils.guid import is_valid_guid


class PeriodKind(str, Enum):
    """Supported period variants for a balance query."""

    RANGE = "range"
    ALL_TIME = "all_time"
    YEAR_TO_DATE = "year_to_date"
    QUARTER_TO_DATE = "quarter_to_date"
    MONTH_TO_DATE = "month_to_date"
    LAST_MONTH = "last_month"


@dataclass(frozen=True)
class BalanceQuery:
    """Parameters for an account balance rollup.

    Attributes:
        period: Period variant.
        start_date: Inclusive start for RANGE queries.
        end_date: Inclusive end for RANGE queries.
        root_guid: Optional subtree root; defaults to the book root.
    """

    period: PeriodKind = PeriodKind.ALL_TIME
    start_date: date | None = None
    end_date: date | None = None
    root_guid: str | None = None

    def __post_init__(self) -> None:
        if self.period != PeriodKind.RANGE and (
            self.start_date is not None or self.end_date is not None
        ):
            raise ValueError(
                f"Explicit dates are only allowed for the range period, "
                f"got period={self.period.value}"
            )
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date > self.end_date
        ):
            raise ValueError(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        if self.root_guid is not None and not is_valid_guid(self.root_guid):
            raise ValueError(f"Invalid root account GUID: {self.root_guid}")

    @classmethod
    def from_mapping(cls, payload: Mapping) -> "BalanceQuery":
        """Validate a stored JSON payload and build a query.

        Args:
            payload: Mapping with ``period`` and, for ranges, ISO
                ``start_date``/``end_date`` strings. ``root_guid`` is optional.

        Returns:
            BalanceQuery: Validated query.

        Raises:
            ValueError: If the payload shape or values are invalid.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Balance query config must be a mapping")
        raw_period = payload.get("period", PeriodKind.ALL_TIME.value)
        try:
            period = PeriodKind(str(raw_period).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported period: {raw_period}") from exc
        return cls(
            period=period,
            start_date=_parse_date(payload.get("start_date"), "start_date"),
            end_date=_parse_date(payload.get("end_date"), "end_date"),
            root_guid=payload.get("root_guid") or None,
        )

    def resolve_range(self, today: date) -> tuple[date | None, date | None]:
        """Return the inclusive date range for this query.

        Args:
            today: Reference date for relative periods.

        Returns:
            tuple[date | None, date | None]: Start and end, None when open.
        """
        if self.period == PeriodKind.RANGE:
            return self.start_date, self.end_date
        if self.period == PeriodKind.YEAR_TO_DATE:
            return date(today.year, 1, 1), today
        if self.period == PeriodKind.QUARTER_TO_DATE:
            quarter = (today.month - 1) // 3
            return date(today.year, quarter * 3 + 1, 1), today
        if self.period == PeriodKind.MONTH_TO_DATE:
            return date(today.year, today.month, 1), today
        if self.period == PeriodKind.LAST_MONTH:
            year = today.year if today.month > 1 else today.year - 1
            month = today.month - 1 if today.month > 1 else 12
            last_day = monthrange(year, month)[1]
            return date(year, month, 1), date(year, month, last_day)
        return None, None


def _parse_date(raw_value, field_name: str) -> date | None:
    if raw_value in (None, ""):
        return None
    if isinstance(raw_value, date):
        return raw_value
    try:
        return date.fromisoformat(str(raw_value))
    except ValueError as exc:
        raise ValueError(
            f"Invalid {field_name} '{raw_value}'. Expected format YYYY-MM-DD."
        ) from exc


__all__ = ["PeriodKind", "BalanceQuery"]

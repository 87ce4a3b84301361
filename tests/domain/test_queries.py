"""Tests for balance query parsing and period resolution."""

from datetime import date

import pytest

from src.domain.models import BalanceQuery, PeriodKind

ROOT_GUID = "0123456789abcdef0123456789abcdef"


def test_from_mapping_parses_range():
    query = BalanceQuery.from_mapping(
        {
            "period": "range",
            "start_date": "2024-01-01",
            "end_date": "2024-03-31",
            "root_guid": ROOT_GUID,
        }
    )

    assert query.period == PeriodKind.RANGE
    assert query.resolve_range(date(2024, 6, 1)) == (
        date(2024, 1, 1),
        date(2024, 3, 31),
    )
    assert query.root_guid == ROOT_GUID


def test_from_mapping_defaults_to_all_time():
    query = BalanceQuery.from_mapping({})

    assert query.period == PeriodKind.ALL_TIME
    assert query.resolve_range(date(2024, 6, 1)) == (None, None)


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"period": "fortnight"}, "Unsupported period"),
        (
            {"period": "range", "start_date": "01/02/2024"},
            "Expected format YYYY-MM-DD",
        ),
        (
            {"period": "month_to_date", "start_date": "2024-01-01"},
            "only allowed for the range period",
        ),
        (
            {
                "period": "range",
                "start_date": "2024-02-01",
                "end_date": "2024-01-01",
            },
            "is after end_date",
        ),
        ({"root_guid": "not-a-guid"}, "Invalid root account GUID"),
    ],
)
def test_from_mapping_rejects_invalid_payloads(payload, message):
    with pytest.raises(ValueError, match=message):
        BalanceQuery.from_mapping(payload)


def test_from_mapping_requires_a_mapping():
    with pytest.raises(ValueError):
        BalanceQuery.from_mapping(["period", "range"])


@pytest.mark.parametrize(
    ("period", "today", "expected"),
    [
        (
            PeriodKind.YEAR_TO_DATE,
            date(2024, 5, 15),
            (date(2024, 1, 1), date(2024, 5, 15)),
        ),
        (
            PeriodKind.QUARTER_TO_DATE,
            date(2024, 5, 15),
            (date(2024, 4, 1), date(2024, 5, 15)),
        ),
        (
            PeriodKind.MONTH_TO_DATE,
            date(2024, 5, 15),
            (date(2024, 5, 1), date(2024, 5, 15)),
        ),
        (
            PeriodKind.LAST_MONTH,
            date(2024, 3, 10),
            (date(2024, 2, 1), date(2024, 2, 29)),
        ),
        (
            PeriodKind.LAST_MONTH,
            date(2024, 1, 10),
            (date(2023, 12, 1), date(2023, 12, 31)),
        ),
    ],
)
def test_resolve_range_relative_periods(period, today, expected):
    assert BalanceQuery(period=period).resolve_range(today) == expected

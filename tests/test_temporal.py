from datetime import date, datetime
from types import SimpleNamespace

import pytest

from finanza.services.errors import InvalidInputError
from finanza.services.temporal import (
    current_month, in_month, month_of, parse_month, shift_month, validate_month
)


def test_month_of_accepts_dates_datetimes_and_iso_strings():
    assert month_of(date(2024, 3, 9)) == "2024-03"
    assert month_of(datetime(2024, 12, 31, 23, 59)) == "2024-12"
    assert month_of("2023-01-15") == "2023-01"


def test_in_month_uses_transaction_date():
    record = SimpleNamespace(transaction_date=date(2024, 2, 29))
    assert in_month(record, "2024-02")
    assert not in_month(record, "2024-03")


def test_in_month_falls_back_to_date_and_dicts():
    assert in_month(SimpleNamespace(date=date(2024, 5, 1)), "2024-05")
    assert in_month({"transaction_date": "2024-05-31"}, "2024-05")
    assert not in_month({}, "2024-05")


@pytest.mark.parametrize("token, offset, expected", [
    ("2024-01", -1, "2023-12"),
    ("2024-12", 1, "2025-01"),
    ("2024-06", 0, "2024-06"),
    ("2024-06", 13, "2025-07"),
    ("2024-06", -18, "2022-12"),
])
def test_shift_month_rolls_years(token, offset, expected):
    assert shift_month(token, offset) == expected


@pytest.mark.parametrize("token", ["2024-13", "2024-00", "2024-1", "24-01", "2024/01", "2024-01\n", "", None])
def test_malformed_month_is_rejected(token):
    with pytest.raises(InvalidInputError):
        parse_month(token)


def test_validate_month_returns_token():
    assert validate_month("1999-09") == "1999-09"
    assert parse_month("1999-09") == (1999, 9)


def test_current_month_uses_injected_today():
    assert current_month(date(2025, 7, 4)) == "2025-07"


def test_tokens_order_chronologically_as_strings():
    tokens = ["2024-10", "2023-12", "2024-02"]
    assert sorted(tokens) == ["2023-12", "2024-02", "2024-10"]

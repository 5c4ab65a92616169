"""
Month scoping helpers.

Months are carried as "YYYY-MM" tokens; zero padding makes plain string
comparison chronological.
"""
import re
from datetime import date, datetime
from typing import Optional, Tuple

from finanza.services.errors import InvalidInputError

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(token: str) -> Tuple[int, int]:
    match = MONTH_PATTERN.fullmatch(token) if isinstance(token, str) else None
    if not match:
        raise InvalidInputError(f"Month must be formatted as YYYY-MM, got {token!r}")
    return int(match.group(1)), int(match.group(2))


def validate_month(token: str) -> str:
    parse_month(token)
    return token


def month_of(value) -> str:
    """Return the month token for a date, datetime or ISO date string."""
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidInputError(f"Not an ISO date: {value!r}") from None
    if not isinstance(value, date):
        raise InvalidInputError(f"Cannot take the month of {value!r}")
    return f"{value.year:04d}-{value.month:02d}"


def record_date(record):
    if isinstance(record, dict):
        return record.get("transaction_date", record.get("date"))
    value = getattr(record, "transaction_date", None)
    return value if value is not None else getattr(record, "date", None)


def in_month(record, target_month: str) -> bool:
    validate_month(target_month)
    value = record_date(record)
    if value is None:
        return False
    return month_of(value) == target_month


def shift_month(token: str, offset: int) -> str:
    year, month = parse_month(token)
    index = year * 12 + (month - 1) + offset
    new_year, new_month = divmod(index, 12)
    if new_year < 1 or new_year > 9999:
        raise InvalidInputError(f"Shifting {token} by {offset} months leaves the calendar range")
    return f"{new_year:04d}-{new_month + 1:02d}"


def current_month(today: Optional[date] = None) -> str:
    return month_of(today or date.today())

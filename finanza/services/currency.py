"""
Currency Conversion

Converts amounts between the primary (USD) and secondary (VES) currencies
using one externally supplied exchange rate, expressed as units of the
secondary currency per one unit of the primary currency.
"""
from decimal import Decimal, InvalidOperation
from typing import Union

from finanza.db.core import Currency, PRIMARY_CURRENCY, SECONDARY_CURRENCY
from finanza.services.errors import InvalidInputError

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number, field: str = "amount") -> Decimal:
    """Coerce a numeric input to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"{field} must be a number, got {value!r}") from None


def parse_currency(code) -> Currency:
    if isinstance(code, Currency):
        return code
    if code is None:
        raise InvalidInputError("Currency is required")
    try:
        return Currency(str(code).strip().upper())
    except ValueError:
        raise InvalidInputError(f"Unsupported currency '{code}'") from None


def validate_rate(rate: Number) -> Decimal:
    value = to_decimal(rate, field="exchange rate")
    if not value.is_finite() or value <= 0:
        raise InvalidInputError(f"Exchange rate must be a positive finite number, got {rate!r}")
    return value


def convert(amount: Number, from_currency, to_currency, rate: Number) -> Decimal:
    """
    Convert an amount between the two supported currencies.

    Primary to secondary multiplies by the rate, secondary to primary divides.
    Full precision is kept; rounding is left to the display boundary.
    """
    rate_value = validate_rate(rate)
    source = parse_currency(from_currency)
    target = parse_currency(to_currency)
    value = to_decimal(amount)

    if source == target:
        return value
    if source == PRIMARY_CURRENCY and target == SECONDARY_CURRENCY:
        return value * rate_value
    return value / rate_value


def to_primary(amount: Number, currency, rate: Number) -> Decimal:
    return convert(amount, currency, PRIMARY_CURRENCY, rate)

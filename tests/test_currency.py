from decimal import Decimal

import pytest

from finanza.db.core import Currency
from finanza.services.currency import convert, parse_currency, to_primary, validate_rate
from finanza.services.errors import InvalidInputError

RATE = Decimal("45.50")


def test_primary_to_secondary_multiplies():
    assert convert(Decimal("10"), "USD", "VES", RATE) == Decimal("455.00")


def test_secondary_to_primary_divides():
    assert convert(Decimal("455"), Currency.VES, Currency.USD, RATE) == Decimal("10")


def test_same_currency_is_identity():
    assert convert(Decimal("12.34"), "VES", "VES", RATE) == Decimal("12.34")
    assert to_primary(Decimal("7"), "USD", RATE) == Decimal("7")


def test_round_trip_keeps_value():
    there = convert(Decimal("3.33"), "USD", "VES", RATE)
    assert convert(there, "VES", "USD", RATE) == Decimal("3.33")


def test_currency_codes_are_case_and_space_insensitive():
    assert parse_currency(" usd ") == Currency.USD
    assert parse_currency("Ves") == Currency.VES


@pytest.mark.parametrize("code", ["EUR", "", None, "US D"])
def test_unknown_currency_is_rejected(code):
    with pytest.raises(InvalidInputError):
        parse_currency(code)


@pytest.mark.parametrize("rate", [0, -1, "0", "NaN", "Infinity", "abc", None])
def test_invalid_rate_is_rejected(rate):
    with pytest.raises(InvalidInputError):
        validate_rate(rate)


def test_same_currency_still_validates_rate():
    with pytest.raises(InvalidInputError):
        convert(Decimal("1"), "USD", "USD", 0)


def test_float_rate_avoids_binary_artifacts():
    assert validate_rate(45.5) == Decimal("45.5")


def test_invalid_rate_is_a_value_error():
    with pytest.raises(ValueError):
        validate_rate(-3)

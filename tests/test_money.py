from decimal import Decimal

import pytest

from finstatements.money import format_amount, minor_to_decimal, to_minor_units


def test_to_minor_units_accepts_strings_decimals_and_ints() -> None:
    assert to_minor_units("1234.56", 2) == 123456
    assert to_minor_units(Decimal("10"), 2) == 1000
    assert to_minor_units(250000, 0) == 250000
    assert to_minor_units("1,000,000", 0) == 1_000_000


def test_to_minor_units_floats_use_shortest_repr() -> None:
    """0.1 + 0.2 style drift must not leak into minor units."""
    assert to_minor_units(0.1, 2) == 10
    assert to_minor_units(19.99, 2) == 1999


def test_to_minor_units_rounds_half_away_from_zero() -> None:
    assert to_minor_units("0.005", 2) == 1
    assert to_minor_units("-0.005", 2) == -1
    assert to_minor_units("0.5", 0) == 1
    assert to_minor_units("0.4", 0) == 0


@pytest.mark.parametrize("value", ["abc", "", None, True, float("nan"), "inf"])
def test_to_minor_units_rejects_invalid_values(value) -> None:
    with pytest.raises(ValueError):
        to_minor_units(value, 2)


def test_digits_out_of_range_are_rejected() -> None:
    with pytest.raises(ValueError):
        to_minor_units("1", 5)
    with pytest.raises(ValueError):
        minor_to_decimal(1, -1)


def test_minor_to_decimal_is_exact() -> None:
    assert minor_to_decimal(123456, 2) == Decimal("1234.56")
    assert minor_to_decimal(-5, 0) == Decimal("-5")


def test_format_amount() -> None:
    assert format_amount(123456789, 2, "EUR") == "1,234,567.89 EUR"
    assert format_amount(-250000, 0) == "-250,000"
    assert format_amount(0, 2) == "0.00"

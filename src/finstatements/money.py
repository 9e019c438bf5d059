# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Money helpers.

All engine arithmetic runs on signed integers expressed in minor currency
units (cents for EUR/USD, yen for JPY). Conversion happens exactly once,
at the adapter boundary, through ``to_minor_units``. Decimal formatting is
reserved for display (``format_amount``).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

AmountLike = Union[int, str, Decimal, float]

MAX_MINOR_UNIT_DIGITS = 4


def _check_digits(digits: int) -> None:
    if not isinstance(digits, int) or not 0 <= digits <= MAX_MINOR_UNIT_DIGITS:
        raise ValueError(
            f"minor_unit_digits must be an integer between 0 and "
            f"{MAX_MINOR_UNIT_DIGITS}, got {digits!r}."
        )


def to_minor_units(value: AmountLike, digits: int) -> int:
    """Convert a major-unit amount into an integer number of minor units.

    ``value`` may be an int, a Decimal, a numeric string (as stored in
    decimal database columns) or a float. Floats go through their shortest
    ``repr`` so that 0.1 becomes Decimal('0.1'), not its binary expansion.
    Sub-minor fractions are rounded half away from zero.

    Examples (digits=2):
        "1234.56" -> 123456
        10        -> 1000
        0.005     -> 1

    Raises:
        ValueError: if the value is not a finite number.
    """
    _check_digits(digits)
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")

    if isinstance(value, float):
        raw = Decimal(repr(value))
    else:
        try:
            raw = Decimal(str(value).strip().replace(",", ""))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc

    if not raw.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    scaled = (raw * (Decimal(10) ** digits)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return int(scaled)


def minor_to_decimal(amount_minor: int, digits: int) -> Decimal:
    """Return the exact major-unit Decimal for an integer minor amount."""
    _check_digits(digits)
    return Decimal(int(amount_minor)).scaleb(-digits)


def format_amount(amount_minor: int, digits: int, currency: str = "") -> str:
    """Format a minor-unit amount for display.

    Uses a thousands separator and exactly ``digits`` decimals; the
    currency code, when given, is appended.

        format_amount(123456789, 2, "EUR") -> "1,234,567.89 EUR"
        format_amount(-250000, 0)         -> "-250,000"
    """
    value = minor_to_decimal(amount_minor, digits)
    text = f"{value:,.{digits}f}"
    return f"{text} {currency}" if currency else text

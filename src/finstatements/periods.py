# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for FinStatements.

This module defines the DateRange value object used by every engine
operation, and helpers to derive reporting ranges (fiscal year, YTD, MTD,
last month, last fiscal year) from the configured fiscal year and CLI
arguments.
"""

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .config import FiscalYear
from .errors import InvalidDateRange


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] date range with an optional display label.

    Raises:
        InvalidDateRange: if ``end`` is before ``start``.
    """

    start: date
    end: date
    label: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidDateRange(
                f"Date range end {self.end.isoformat()} is before start "
                f"{self.start.isoformat()}."
            )

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} → {self.end.isoformat()}"


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_fy(fy: FiscalYear) -> DateRange:
    """Full current fiscal year."""
    return DateRange(
        start=fy.start_date,
        end=fy.end_date,
        label=f"Fiscal year {fy.start_date.year}",
    )


def period_ytd(fy: FiscalYear) -> DateRange:
    """Year-to-date within the fiscal year."""
    today = _today()
    end = min(max(today, fy.start_date), fy.end_date)
    return DateRange(start=fy.start_date, end=end, label="Year to date")


def period_mtd(fy: FiscalYear) -> DateRange:
    """Month-to-date within the fiscal year."""
    today = _today()

    # Outside the fiscal year: fall back to the whole fiscal year.
    if today < fy.start_date or today > fy.end_date:
        return period_fy(fy)

    return DateRange(start=today.replace(day=1), end=today, label="Month to date")


def period_last_month(fy: FiscalYear) -> DateRange:
    """Full previous calendar month, clamped to the fiscal year if needed."""
    today = _today()

    if today.month == 1:
        year, month = today.year - 1, 12
    else:
        year, month = today.year, today.month - 1

    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])

    if end < fy.start_date or start > fy.end_date:
        return period_fy(fy)

    return DateRange(
        start=max(start, fy.start_date),
        end=min(end, fy.end_date),
        label="Last month",
    )


def period_last_fy(fy: FiscalYear) -> DateRange:
    """Previous fiscal year, with the same month/day boundaries one year back."""
    start = _shift_year(fy.start_date, -1)
    end = _shift_year(fy.end_date, -1)
    return DateRange(
        start=start,
        end=end,
        label=f"Previous fiscal year ({start.year})",
    )


def _shift_year(day: date, years: int) -> date:
    """Shift a date by whole years, mapping Feb 29 to Feb 28 when needed."""
    target = day.year + years
    last = monthrange(target, day.month)[1]
    return day.replace(year=target, day=min(day.day, last))


def determine_range_from_args(args, fy: FiscalYear) -> DateRange:
    """
    Determine the date range to use based on CLI args and the fiscal year.

    Priority (highest to lowest):

        1. args.period (fy, ytd, mtd, last-month, last-fy)
        2. args.from_date / args.to_date (custom range)
        3. fiscal year by default

    Raises:
        ValueError: for an unknown period keyword.
        InvalidDateRange: for a custom range whose end is before its start.
    """
    if getattr(args, "period", None):
        p = args.period
        if p == "fy":
            return period_fy(fy)
        if p == "ytd":
            return period_ytd(fy)
        if p == "mtd":
            return period_mtd(fy)
        if p == "last-month":
            return period_last_month(fy)
        if p == "last-fy":
            return period_last_fy(fy)
        raise ValueError(f"Unknown period: {p!r}")

    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        start = date.fromisoformat(from_raw) if from_raw else fy.start_date
        end = date.fromisoformat(to_raw) if to_raw else fy.end_date
        return DateRange(start=start, end=end, label=f"Custom period ({start} → {end})")

    return period_fy(fy)

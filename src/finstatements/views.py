# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FinStatements.

This module turns engine results into pandas DataFrames ready for display
or CSV export:

- statement snapshots (one row per statement line, results and
  components, in presentation order),
- category totals (with taxonomy group and label),
- warnings attached to a result,
- the payroll/agency summary.

Amounts stay integers in minor units in the ``amount`` column; when a
number of minor-unit digits is given, a ``formatted`` column is added
using ``money.format_amount``. No arithmetic happens here.
"""

from collections.abc import Iterable
from typing import Optional

import pandas as pd

from .aggregator import CategoryTotal
from .errors import EngineWarning, UnknownCategory
from .money import format_amount
from .statements import Snapshot
from .taxonomy import Taxonomy

STATEMENT_TITLES = {
    "pl": "Profit & Loss",
    "bs": "Balance Sheet",
    "cf": "Cash Flow",
}


def _renumber_display_order(
    df: pd.DataFrame, start: int = 10, step: int = 10
) -> pd.DataFrame:
    """Reassign display_order to be strictly sequential: start, start+step, ...
    Preserves the current order of the lines (as it appears in df).
    """
    df = df.reset_index(drop=True)
    df["display_order"] = [start + i * step for i in range(len(df))]
    return df


def _with_formatted(
    df: pd.DataFrame, column: str, digits: Optional[int], currency: str
) -> pd.DataFrame:
    if digits is not None:
        df["formatted"] = [format_amount(int(v), digits, currency) for v in df[column]]
    return df


def snapshot_to_dataframe(
    snapshot: Snapshot,
    digits: Optional[int] = None,
    currency: str = "",
) -> pd.DataFrame:
    """
    Return the statement lines of a snapshot.

    Columns: display_order, key, level, name, type, amount[, formatted].
    ``type`` is 'total' for result lines (gross profit, total assets, ...)
    and 'line' for their components.
    """
    values = snapshot.to_dict()
    rows = [
        {"key": key, "level": level, "name": label, "type": kind, "amount": values[key]}
        for key, label, level, kind in snapshot.LINES
    ]
    df = _renumber_display_order(pd.DataFrame(rows))
    df = df[["display_order", "key", "level", "name", "type", "amount"]]
    return _with_formatted(df, "amount", digits, currency)


def category_totals_to_dataframe(
    totals: Iterable[CategoryTotal],
    taxonomy: Taxonomy,
    digits: Optional[int] = None,
    currency: str = "",
) -> pd.DataFrame:
    """
    Return category totals with their taxonomy group and label.

    Columns: statement_type, group, category, label, sub_category,
    total[, formatted]. Row order is the order of ``totals``.
    """
    columns = ["statement_type", "group", "category", "label", "sub_category", "total"]
    rows = []
    for t in totals:
        try:
            cat = taxonomy.lookup(t.category)
            group, label = cat.group, cat.label
        except UnknownCategory:
            group, label = "", t.category
        rows.append(
            {
                "statement_type": t.statement_type,
                "group": group,
                "category": t.category,
                "label": label,
                "sub_category": t.sub_category or "",
                "total": t.total,
            }
        )
    df = pd.DataFrame(rows, columns=columns)
    return _with_formatted(df, "total", digits, currency)


def warnings_to_dataframe(warnings: Iterable[EngineWarning]) -> pd.DataFrame:
    """Return warnings as a DataFrame (kind, source, category, delta, message)."""
    columns = ["kind", "source", "category", "delta", "message"]
    rows = [
        {
            "kind": w.kind,
            "source": w.source or "",
            "category": w.category or "",
            "delta": w.delta,
            "message": w.message,
        }
        for w in warnings
    ]
    return pd.DataFrame(rows, columns=columns)


def summary_to_dataframe(
    summary, digits: Optional[int] = None, currency: str = ""
) -> pd.DataFrame:
    """Return the payroll/agency summary as (key, label, value[, formatted]) rows.

    Counts are never formatted as amounts.
    """
    lines = [
        ("payroll_total", "Payroll total", True),
        ("payroll_count", "Salary payments", False),
        ("agency_revenue_total", "Agency revenue", True),
        ("agency_commission_total", "Agency commissions", True),
        ("agency_sales_count", "Agency sales", False),
    ]
    rows = []
    for key, label, is_amount in lines:
        value = getattr(summary, key)
        row = {"key": key, "label": label, "value": value}
        if digits is not None:
            row["formatted"] = (
                format_amount(value, digits, currency) if is_amount else str(value)
            )
        rows.append(row)
    return pd.DataFrame(rows)

# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FinStatements.

This module reads source records (business sales, salary payments, agency
sales, manual ledger entries, investments) from CSV files and normalizes
them into DataFrames ready for ``db.import_records``.

Expected input formats
----------------------

Column names are case-insensitive. ``amount`` (and ``commission`` for
agency sales) are given in major currency units ("1234.50") and converted
to integer minor units with the configured number of digits. ``date`` is
an ISO date (YYYY-MM-DD).

    sales        business_id, type, amount, date [, description]
                 type is 'revenue' or 'expense'
    salaries     amount, date [, employee_name, notes]
    agency       amount, date [, agency_id, business_id, client_name,
                 commission, status, description]
                 status defaults to 'pending'
    entries      statement_type, category, amount, date
                 [, sub_category, description]
    investments  amount, date [, business_id, type, category, description]

The column ``label`` is accepted as an alias for ``description``.

Output schema
-------------
The returned DataFrame holds exactly the columns ``db.import_records``
expects for the source, with ``amount_minor`` (and ``commission_minor``)
as Python integers and ``date`` as ``datetime.date``. Missing optional
columns are filled with None.

Any structural or value problem raises a ValueError naming the offending
column (and row, 1-based, for value errors).
"""

import os
from typing import Optional, Union

import pandas as pd

from .db import _IMPORT_COLUMNS, AGENCY_SALE_STATUSES
from .money import to_minor_units
from .taxonomy import STATEMENT_TYPES, Taxonomy

_REQUIRED: dict[str, tuple[str, ...]] = {
    "sales": ("business_id", "type", "amount", "date"),
    "salaries": ("amount", "date"),
    "agency": ("amount", "date"),
    "entries": ("statement_type", "category", "amount", "date"),
    "investments": ("amount", "date"),
}

RECORD_SOURCES: tuple[str, ...] = tuple(_REQUIRED)


def _to_minor_column(d: pd.DataFrame, column: str, digits: int) -> list[Optional[int]]:
    """Convert a text column of major-unit amounts; blanks become None."""
    out: list[Optional[int]] = []
    for i, raw in enumerate(d[column], start=1):
        text = str(raw).strip()
        if not text:
            out.append(None)
            continue
        try:
            out.append(to_minor_units(text, digits))
        except ValueError as exc:
            raise ValueError(f"Invalid value {text!r} in '{column}' column (row {i}).") from exc
    return out


def _check_allowed(d: pd.DataFrame, column: str, allowed: tuple[str, ...]) -> None:
    bad = d.loc[~d[column].isin(allowed), column]
    if not bad.empty:
        row = int(bad.index[0]) + 1
        raise ValueError(
            f"Invalid value {bad.iloc[0]!r} in '{column}' column (row {row}). "
            f"Expected one of: {', '.join(allowed)}."
        )


def read_source_records(
    path: Union[str, "os.PathLike[str]"],
    source: str,
    minor_unit_digits: int,
    taxonomy: Optional[Taxonomy] = None,
) -> pd.DataFrame:
    """
    Read source records of one kind from a CSV file and normalize them.

    Parameters
    ----------
    path:
        CSV file to read.
    source:
        One of ``RECORD_SOURCES``.
    minor_unit_digits:
        Number of decimal digits of the currency's minor unit.
    taxonomy:
        When given, manual entry categories are checked against it (and
        against their statement type).

    Returns
    -------
    pandas.DataFrame
        Columns as expected by ``db.import_records`` for ``source``.

    Raises
    ------
    ValueError
        For an unknown source, missing columns, or invalid values.
    UnknownCategory
        For a manual entry category absent from ``taxonomy``.
    """
    if source not in _REQUIRED:
        raise ValueError(
            f"Unknown record source {source!r}. Expected one of: "
            f"{', '.join(RECORD_SOURCES)}."
        )

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).lower().strip() for c in df.columns]
    if "label" in df.columns and "description" not in df.columns:
        df = df.rename(columns={"label": "description"})

    missing = [c for c in _REQUIRED[source] if c not in df.columns]
    if missing:
        raise ValueError(
            f"Invalid {source} CSV structure, missing column(s): {', '.join(missing)}. "
            f"Expected at least: {', '.join(_REQUIRED[source])}."
        )

    d = df.reset_index(drop=True).copy()
    for col in d.columns:
        d[col] = d[col].astype(str).str.strip()

    # Dates: missing or invalid values fail loudly
    if (d["date"] == "").any():
        raise ValueError("Missing values in 'date' column.")
    try:
        d["date"] = pd.to_datetime(d["date"], format="%Y-%m-%d", errors="raise").dt.date
    except (ValueError, TypeError) as exc:
        raise ValueError("Invalid values in 'date' column (expected YYYY-MM-DD).") from exc

    amounts = _to_minor_column(d, "amount", minor_unit_digits)
    if any(a is None for a in amounts):
        raise ValueError("Missing values in 'amount' column.")
    d["amount_minor"] = pd.Series(amounts, dtype=object)

    if source == "sales":
        d["type"] = d["type"].str.lower()
        _check_allowed(d, "type", ("revenue", "expense"))
    elif source == "agency":
        if "commission" in d.columns:
            d["commission_minor"] = pd.Series(
                _to_minor_column(d, "commission", minor_unit_digits), dtype=object
            )
        if "status" in d.columns:
            d["status"] = d["status"].str.lower().replace("", "pending")
        else:
            d["status"] = "pending"
        _check_allowed(d, "status", AGENCY_SALE_STATUSES)
    elif source == "entries":
        d["statement_type"] = d["statement_type"].str.lower()
        _check_allowed(d, "statement_type", STATEMENT_TYPES)
        if taxonomy is not None:
            for st, code in zip(d["statement_type"], d["category"]):
                taxonomy.lookup(code, st)

    columns = _IMPORT_COLUMNS[source]
    for col in columns:
        if col not in d.columns:
            d[col] = None

    out = d[list(columns)].copy()
    # Blank optional text becomes None
    return out.replace({"": None})


# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for FinStatements.

This module provides the low-level accessors for the SQLite database that
holds the records of the subsystems feeding the statement engine:

- business sales and expenses (per business unit),
- salary payments (payroll),
- agency sales and their commissions,
- free-form financial statement entries (manual ledger rows),
- capital investments.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) business_sales
   - id, business_id, type ('revenue' | 'expense'), amount_minor,
     sale_date, description, created_at

2) salary_payments
   - id, employee_name, amount_minor, paid_date, notes, created_at

3) agency_sales
   - id, agency_id, business_id, client_name, amount_minor,
     commission_minor (nullable), status, sale_date, description, created_at

4) financial_entries
   - id, statement_type ('pl' | 'bs' | 'cf'), category, sub_category,
     amount_minor, entry_date, description, created_at, updated_at

5) investments
   - id, business_id, type, category, amount_minor, investment_date,
     description, created_at

Amounts are stored as signed integers in minor currency units
(``amount_minor``); dates as ISO text 'YYYY-MM-DD'; timestamps as ISO
datetimes in UTC.

------------------------------------------------------------------------------
Notes
------------------------------------------------------------------------------

- Every public function opens and closes its own connection, so the
  functions are safe to call from concurrent worker threads.
- The store is intentionally permissive: category codes of financial
  entries are not validated here. Validation against the taxonomy happens
  when statements are computed (unknown categories are reported as
  warnings) and in the CLI before a manual entry is written.
- Read functions return plain dictionaries (one per row), the raw shape
  consumed by the source layer (``sources.py``).
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Literal, Optional

import pandas as pd

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for FinStatements.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


RecordSource = Literal["sales", "salaries", "agency", "entries", "investments"]
"""Kind of records handled by ``import_records``."""

SaleType = Literal["revenue", "expense"]

AGENCY_SALE_STATUSES = ("pending", "confirmed", "paid", "cancelled")


@dataclass(frozen=True)
class NewFinancialEntry:
    """Fields required to insert a manual financial statement entry."""

    statement_type: str
    category: str
    amount_minor: int
    entry_date: date
    sub_category: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class FinancialEntryUpdate:
    """
    Partial update of a financial entry.

    Fields left to None are not modified.
    """

    statement_type: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    amount_minor: Optional[int] = None
    entry_date: Optional[date] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class FinancialEntry:
    """Stored financial statement entry."""

    id: int
    statement_type: str
    category: str
    sub_category: Optional[str]
    amount_minor: int
    entry_date: date
    description: Optional[str]
    created_at: str
    updated_at: Optional[str]


@dataclass(frozen=True)
class NewInvestment:
    """Fields required to insert a capital investment record."""

    amount_minor: int
    investment_date: date
    business_id: Optional[str] = None
    type: str = "asset_purchase"
    category: Optional[str] = None
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS business_sales (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id  TEXT    NOT NULL,
            type         TEXT    NOT NULL DEFAULT 'revenue',
            amount_minor INTEGER NOT NULL,
            sale_date    TEXT    NOT NULL,
            description  TEXT,
            created_at   TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS salary_payments (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            employee_name TEXT,
            amount_minor  INTEGER NOT NULL,
            paid_date     TEXT    NOT NULL,
            notes         TEXT,
            created_at    TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS agency_sales (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            agency_id        TEXT,
            business_id      TEXT,
            client_name      TEXT,
            amount_minor     INTEGER NOT NULL,
            commission_minor INTEGER,
            status           TEXT    NOT NULL DEFAULT 'pending',
            sale_date        TEXT    NOT NULL,
            description      TEXT,
            created_at       TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS financial_entries (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            statement_type TEXT    NOT NULL,  -- 'pl' | 'bs' | 'cf'
            category       TEXT    NOT NULL,
            sub_category   TEXT,
            amount_minor   INTEGER NOT NULL,
            entry_date     TEXT    NOT NULL,
            description    TEXT,
            created_at     TEXT    NOT NULL,
            updated_at     TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS investments (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id     TEXT,
            type            TEXT    NOT NULL DEFAULT 'asset_purchase',
            category        TEXT,
            amount_minor    INTEGER NOT NULL,
            investment_date TEXT    NOT NULL,
            description     TEXT,
            created_at      TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_business_sales_date ON business_sales(sale_date);"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_salary_payments_date ON salary_payments(paid_date);"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_agency_sales_date ON agency_sales(sale_date);"
    )
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_financial_entries_type_date
            ON financial_entries(statement_type, entry_date);
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_investments_date ON investments(investment_date);"
    )

    conn.commit()


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, pd.Timestamp):
        return value.date().isoformat()
    return date.fromisoformat(str(value)).isoformat()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _optional_str(value) -> Optional[str]:
    """Return None for missing values (None, NaN, empty string)."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return text or None


def _fetch_dicts(cur: sqlite3.Cursor) -> list[dict[str, Any]]:
    """Return all remaining rows of a cursor as dictionaries."""
    columns = [d[0] for d in cur.description]
    return [dict(zip(columns, row)) for row in cur.fetchall()]


def _select(cfg: DatabaseConfig, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(sql, params)
        return _fetch_dicts(cur)
    finally:
        conn.close()


def _row_to_financial_entry(row: dict[str, Any]) -> FinancialEntry:
    return FinancialEntry(
        id=int(row["id"]),
        statement_type=row["statement_type"],
        category=row["category"],
        sub_category=row["sub_category"],
        amount_minor=int(row["amount_minor"]),
        entry_date=date.fromisoformat(row["entry_date"]),
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API: schema
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates tables and indexes if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def has_records(cfg: DatabaseConfig) -> bool:
    """Return True if at least one source table contains a row."""
    rows = _select(
        cfg,
        """
        SELECT EXISTS (SELECT 1 FROM business_sales)
            OR EXISTS (SELECT 1 FROM salary_payments)
            OR EXISTS (SELECT 1 FROM agency_sales)
            OR EXISTS (SELECT 1 FROM financial_entries)
            OR EXISTS (SELECT 1 FROM investments) AS has_rows;
        """,
    )
    return bool(rows[0]["has_rows"])


# ---------------------------------------------------------------------------
# Public API: inserts for source subsystems
# ---------------------------------------------------------------------------


def insert_business_sale(
    cfg: DatabaseConfig,
    *,
    business_id: str,
    type: SaleType,
    amount_minor: int,
    sale_date: date,
    description: Optional[str] = None,
) -> int:
    """Insert a business revenue or expense record and return its id."""
    if type not in ("revenue", "expense"):
        raise ValueError(f"Invalid business sale type: {type!r}")

    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO business_sales (
                business_id, type, amount_minor, sale_date, description, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                business_id,
                type,
                int(amount_minor),
                _to_iso_date(sale_date),
                description,
                _now_utc_iso(),
            ),
        )
        conn.commit()
        return int(cur.lastrowid)
    finally:
        conn.close()


def insert_salary_payment(
    cfg: DatabaseConfig,
    *,
    amount_minor: int,
    paid_date: date,
    employee_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> int:
    """Insert a salary payment and return its id."""
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO salary_payments (
                employee_name, amount_minor, paid_date, notes, created_at
            )
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                employee_name,
                int(amount_minor),
                _to_iso_date(paid_date),
                notes,
                _now_utc_iso(),
            ),
        )
        conn.commit()
        return int(cur.lastrowid)
    finally:
        conn.close()


def insert_agency_sale(
    cfg: DatabaseConfig,
    *,
    amount_minor: int,
    sale_date: date,
    commission_minor: Optional[int] = None,
    status: str = "pending",
    agency_id: Optional[str] = None,
    business_id: Optional[str] = None,
    client_name: Optional[str] = None,
    description: Optional[str] = None,
) -> int:
    """Insert an agency sale and return its id."""
    if status not in AGENCY_SALE_STATUSES:
        raise ValueError(
            f"Invalid agency sale status {status!r}. "
            f"Expected one of: {', '.join(AGENCY_SALE_STATUSES)}."
        )

    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO agency_sales (
                agency_id, business_id, client_name, amount_minor,
                commission_minor, status, sale_date, description, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                agency_id,
                business_id,
                client_name,
                int(amount_minor),
                None if commission_minor is None else int(commission_minor),
                status,
                _to_iso_date(sale_date),
                description,
                _now_utc_iso(),
            ),
        )
        conn.commit()
        return int(cur.lastrowid)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Public API: reads for source subsystems
# ---------------------------------------------------------------------------


def fetch_business_sales(
    cfg: DatabaseConfig,
    start: date,
    end: date,
    business_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Return business revenue/expense rows dated within [start, end].

    Each row has: id, business_id, type, amount_minor, sale_date,
    description. When ``business_id`` is given, only that business is
    returned.
    """
    sql = """
        SELECT id, business_id, type, amount_minor, sale_date, description
          FROM business_sales
         WHERE sale_date BETWEEN ? AND ?
    """
    params: list[Any] = [start.isoformat(), end.isoformat()]
    if business_id is not None:
        sql += " AND business_id = ?"
        params.append(business_id)
    sql += " ORDER BY sale_date, id;"
    return _select(cfg, sql, tuple(params))


def fetch_salary_payments(
    cfg: DatabaseConfig, start: date, end: date
) -> list[dict[str, Any]]:
    """Return salary payments paid within [start, end]."""
    return _select(
        cfg,
        """
        SELECT id, employee_name, amount_minor, paid_date, notes
          FROM salary_payments
         WHERE paid_date BETWEEN ? AND ?
         ORDER BY paid_date, id;
        """,
        (start.isoformat(), end.isoformat()),
    )


def fetch_agency_sales(
    cfg: DatabaseConfig, start: date, end: date
) -> list[dict[str, Any]]:
    """Return agency sales dated within [start, end], any status."""
    return _select(
        cfg,
        """
        SELECT id, agency_id, business_id, client_name, amount_minor,
               commission_minor, status, sale_date, description
          FROM agency_sales
         WHERE sale_date BETWEEN ? AND ?
         ORDER BY sale_date, id;
        """,
        (start.isoformat(), end.isoformat()),
    )


def fetch_financial_entries(
    cfg: DatabaseConfig, statement_type: str, start: date, end: date
) -> list[dict[str, Any]]:
    """Return manual financial entries of one statement type within [start, end]."""
    return _select(
        cfg,
        """
        SELECT id, statement_type, category, sub_category, amount_minor,
               entry_date, description
          FROM financial_entries
         WHERE statement_type = ?
           AND entry_date BETWEEN ? AND ?
         ORDER BY entry_date, id;
        """,
        (statement_type, start.isoformat(), end.isoformat()),
    )


def fetch_investments(
    cfg: DatabaseConfig,
    start: date,
    end: date,
    business_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Return investment records dated within [start, end], optionally per business."""
    sql = """
        SELECT id, business_id, type, category, amount_minor,
               investment_date, description
          FROM investments
         WHERE investment_date BETWEEN ? AND ?
    """
    params: list[Any] = [start.isoformat(), end.isoformat()]
    if business_id is not None:
        sql += " AND business_id = ?"
        params.append(business_id)
    sql += " ORDER BY investment_date, id;"
    return _select(cfg, sql, tuple(params))


# ---------------------------------------------------------------------------
# Public API: financial entries CRUD
# ---------------------------------------------------------------------------


def insert_financial_entry(cfg: DatabaseConfig, new_entry: NewFinancialEntry) -> FinancialEntry:
    """Insert a manual financial entry and return the stored row."""
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO financial_entries (
                statement_type, category, sub_category, amount_minor,
                entry_date, description, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (
                new_entry.statement_type,
                new_entry.category,
                new_entry.sub_category,
                int(new_entry.amount_minor),
                _to_iso_date(new_entry.entry_date),
                new_entry.description,
                _now_utc_iso(),
            ),
        )
        conn.commit()
        entry_id = int(cur.lastrowid)
    finally:
        conn.close()

    entry = get_financial_entry(cfg, entry_id)
    if entry is None:
        raise RuntimeError(f"Financial entry {entry_id} vanished after write.")
    return entry


def get_financial_entry(cfg: DatabaseConfig, entry_id: int) -> Optional[FinancialEntry]:
    """Return a financial entry by id, or None if it does not exist."""
    rows = _select(
        cfg,
        """
        SELECT id, statement_type, category, sub_category, amount_minor,
               entry_date, description, created_at, updated_at
          FROM financial_entries
         WHERE id = ?;
        """,
        (int(entry_id),),
    )
    if not rows:
        return None
    return _row_to_financial_entry(rows[0])


def update_financial_entry(
    cfg: DatabaseConfig, entry_id: int, update: FinancialEntryUpdate
) -> FinancialEntry:
    """
    Apply a partial update to a financial entry.

    Only the fields set in ``update`` are written; ``updated_at`` is always
    refreshed.

    Raises:
        ValueError: if the entry does not exist.
    """
    if get_financial_entry(cfg, entry_id) is None:
        raise ValueError(f"Financial entry {entry_id} not found.")

    assignments: list[str] = []
    params: list[Any] = []
    if update.statement_type is not None:
        assignments.append("statement_type = ?")
        params.append(update.statement_type)
    if update.category is not None:
        assignments.append("category = ?")
        params.append(update.category)
    if update.sub_category is not None:
        assignments.append("sub_category = ?")
        params.append(update.sub_category)
    if update.amount_minor is not None:
        assignments.append("amount_minor = ?")
        params.append(int(update.amount_minor))
    if update.entry_date is not None:
        assignments.append("entry_date = ?")
        params.append(_to_iso_date(update.entry_date))
    if update.description is not None:
        assignments.append("description = ?")
        params.append(update.description)

    assignments.append("updated_at = ?")
    params.append(_now_utc_iso())
    params.append(int(entry_id))

    conn = _connect(cfg)
    try:
        conn.execute(
            f"UPDATE financial_entries SET {', '.join(assignments)} WHERE id = ?;",
            tuple(params),
        )
        conn.commit()
    finally:
        conn.close()

    entry = get_financial_entry(cfg, entry_id)
    if entry is None:
        raise RuntimeError(f"Financial entry {entry_id} vanished after write.")
    return entry


def delete_financial_entry(cfg: DatabaseConfig, entry_id: int) -> bool:
    """Delete a financial entry. Return True if a row was removed."""
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "DELETE FROM financial_entries WHERE id = ?;", (int(entry_id),)
        )
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()


def list_financial_entries(
    cfg: DatabaseConfig,
    start: date,
    end: date,
    statement_type: Optional[str] = None,
) -> pd.DataFrame:
    """
    List financial entries within [start, end] as a DataFrame.

    Columns: id, statement_type, category, sub_category, amount_minor,
    entry_date, description.
    """
    sql = """
        SELECT id, statement_type, category, sub_category, amount_minor,
               entry_date, description
          FROM financial_entries
         WHERE entry_date BETWEEN ? AND ?
    """
    params: list[Any] = [start.isoformat(), end.isoformat()]
    if statement_type is not None:
        sql += " AND statement_type = ?"
        params.append(statement_type)
    sql += " ORDER BY entry_date, id;"

    columns = [
        "id",
        "statement_type",
        "category",
        "sub_category",
        "amount_minor",
        "entry_date",
        "description",
    ]
    rows = _select(cfg, sql, tuple(params))
    return pd.DataFrame(rows, columns=columns)


# ---------------------------------------------------------------------------
# Public API: investments
# ---------------------------------------------------------------------------


def insert_investment(cfg: DatabaseConfig, new_investment: NewInvestment) -> int:
    """Insert an investment record and return its id."""
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO investments (
                business_id, type, category, amount_minor,
                investment_date, description, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (
                new_investment.business_id,
                new_investment.type,
                new_investment.category,
                int(new_investment.amount_minor),
                _to_iso_date(new_investment.investment_date),
                new_investment.description,
                _now_utc_iso(),
            ),
        )
        conn.commit()
        return int(cur.lastrowid)
    finally:
        conn.close()


def delete_investment(cfg: DatabaseConfig, investment_id: int) -> bool:
    """Delete an investment record. Return True if a row was removed."""
    init_database(cfg)
    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM investments WHERE id = ?;", (int(investment_id),))
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()


def list_investments(
    cfg: DatabaseConfig,
    start: date,
    end: date,
    business_id: Optional[str] = None,
) -> pd.DataFrame:
    """List investment records within [start, end] as a DataFrame."""
    columns = [
        "id",
        "business_id",
        "type",
        "category",
        "amount_minor",
        "investment_date",
        "description",
    ]
    rows = fetch_investments(cfg, start, end, business_id)
    return pd.DataFrame(rows, columns=columns)


# ---------------------------------------------------------------------------
# Public API: bulk import
# ---------------------------------------------------------------------------


_IMPORT_COLUMNS: dict[str, tuple[str, ...]] = {
    "sales": ("business_id", "type", "amount_minor", "date", "description"),
    "salaries": ("employee_name", "amount_minor", "date", "notes"),
    "agency": (
        "agency_id",
        "business_id",
        "client_name",
        "amount_minor",
        "commission_minor",
        "status",
        "date",
        "description",
    ),
    "entries": (
        "statement_type",
        "category",
        "sub_category",
        "amount_minor",
        "date",
        "description",
    ),
    "investments": (
        "business_id",
        "type",
        "category",
        "amount_minor",
        "date",
        "description",
    ),
}


def import_records(df: pd.DataFrame, cfg: DatabaseConfig, source: RecordSource) -> int:
    """
    Insert a batch of normalized records into the table of ``source``.

    ``df`` is typically produced by ``io.read_source_records`` and must
    contain the columns listed for the source in ``_IMPORT_COLUMNS``
    (amounts already converted to integer minor units).

    The whole batch is written in a single transaction.

    Returns:
        Number of rows inserted.

    Raises:
        ValueError: for an unknown source or missing columns.
    """
    if source not in _IMPORT_COLUMNS:
        raise ValueError(f"Unknown record source: {source!r}")

    required = set(_IMPORT_COLUMNS[source])
    missing = required.difference(df.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"DataFrame is missing required column(s): {cols}")

    init_database(cfg)
    created_at = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        for _, row in df.iterrows():
            iso_date = _to_iso_date(row["date"])
            amount_minor = int(row["amount_minor"])

            if source == "sales":
                cur.execute(
                    """
                    INSERT INTO business_sales (
                        business_id, type, amount_minor, sale_date,
                        description, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    (
                        str(row["business_id"]),
                        str(row["type"]),
                        amount_minor,
                        iso_date,
                        _optional_str(row["description"]),
                        created_at,
                    ),
                )
            elif source == "salaries":
                cur.execute(
                    """
                    INSERT INTO salary_payments (
                        employee_name, amount_minor, paid_date, notes, created_at
                    )
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    (
                        _optional_str(row["employee_name"]),
                        amount_minor,
                        iso_date,
                        _optional_str(row["notes"]),
                        created_at,
                    ),
                )
            elif source == "agency":
                commission = row["commission_minor"]
                cur.execute(
                    """
                    INSERT INTO agency_sales (
                        agency_id, business_id, client_name, amount_minor,
                        commission_minor, status, sale_date, description,
                        created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        _optional_str(row["agency_id"]),
                        _optional_str(row["business_id"]),
                        _optional_str(row["client_name"]),
                        amount_minor,
                        None if pd.isna(commission) else int(commission),
                        str(row["status"]),
                        iso_date,
                        _optional_str(row["description"]),
                        created_at,
                    ),
                )
            elif source == "entries":
                cur.execute(
                    """
                    INSERT INTO financial_entries (
                        statement_type, category, sub_category, amount_minor,
                        entry_date, description, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
                    """,
                    (
                        str(row["statement_type"]),
                        str(row["category"]),
                        _optional_str(row["sub_category"]),
                        amount_minor,
                        iso_date,
                        _optional_str(row["description"]),
                        created_at,
                    ),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO investments (
                        business_id, type, category, amount_minor,
                        investment_date, description, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        _optional_str(row["business_id"]),
                        _optional_str(row["type"]) or "asset_purchase",
                        _optional_str(row["category"]),
                        amount_minor,
                        iso_date,
                        _optional_str(row["description"]),
                        created_at,
                    ),
                )

        conn.commit()
        return len(df)
    finally:
        conn.close()

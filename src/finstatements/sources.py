# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Read contracts of the subsystems feeding the statement engine.

Each subsystem (business sales, payroll, agency sales, manual ledger
entries, investments) is owned by another part of the application. The
engine only depends on the read methods below, expressed as
``typing.Protocol`` classes so that any object with the right method can be
plugged in (SQLite store, HTTP client, in-memory fake in tests).

Records are returned as plain mappings, in the shape the owning subsystem
produces. Amounts are major-unit decimals (``Decimal``, numeric strings or
numbers); normalization into integer minor units is the job of the
adapters (``adapters.py``), never of the sources.

Record shapes
-------------
BusinessSalesSource.fetch_sales
    {id, business_id, type: 'revenue' | 'expense', amount, date, description}
PayrollSource.fetch_salaries
    {id, amount, paid_date, employee_name}
AgencyCommissionSource.fetch_agency_sales
    {id, revenue, commission, status, date, agency_id}
ManualEntryStore.fetch_entries
    {id, category, sub_category, amount, date, description}
InvestmentStore.fetch_investments
    {id, business_id, type, category, amount, date, description}
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from . import db
from .db import DatabaseConfig
from .money import minor_to_decimal
from .periods import DateRange

RawRecord = Mapping[str, Any]


class BusinessSalesSource(Protocol):
    def fetch_sales(
        self, date_range: DateRange, business_id: Optional[str] = None
    ) -> Sequence[RawRecord]: ...


class PayrollSource(Protocol):
    def fetch_salaries(self, date_range: DateRange) -> Sequence[RawRecord]: ...


class AgencyCommissionSource(Protocol):
    def fetch_agency_sales(self, date_range: DateRange) -> Sequence[RawRecord]: ...


class ManualEntryStore(Protocol):
    def fetch_entries(
        self, statement_type: str, date_range: DateRange
    ) -> Sequence[RawRecord]: ...


class InvestmentStore(Protocol):
    def fetch_investments(
        self, date_range: DateRange, business_id: Optional[str] = None
    ) -> Sequence[RawRecord]: ...


@dataclass(frozen=True)
class SourceSet:
    """The five sources one engine instance reads from."""

    sales: BusinessSalesSource
    payroll: PayrollSource
    agency: AgencyCommissionSource
    manual_entries: ManualEntryStore
    investments: InvestmentStore


# ---------------------------------------------------------------------------
# SQLite-backed implementations
# ---------------------------------------------------------------------------


class _SqliteSource:
    """Common state of the SQLite sources: where to read, how to scale."""

    def __init__(self, cfg: DatabaseConfig, minor_unit_digits: int):
        self.cfg = cfg
        self.minor_unit_digits = minor_unit_digits

    def _amount(self, amount_minor: Optional[int]):
        if amount_minor is None:
            return None
        return minor_to_decimal(amount_minor, self.minor_unit_digits)


class SqliteBusinessSalesSource(_SqliteSource):
    def fetch_sales(
        self, date_range: DateRange, business_id: Optional[str] = None
    ) -> list[dict[str, Any]]:
        rows = db.fetch_business_sales(
            self.cfg, date_range.start, date_range.end, business_id
        )
        return [
            {
                "id": r["id"],
                "business_id": r["business_id"],
                "type": r["type"],
                "amount": self._amount(r["amount_minor"]),
                "date": r["sale_date"],
                "description": r["description"],
            }
            for r in rows
        ]


class SqlitePayrollSource(_SqliteSource):
    def fetch_salaries(self, date_range: DateRange) -> list[dict[str, Any]]:
        rows = db.fetch_salary_payments(self.cfg, date_range.start, date_range.end)
        return [
            {
                "id": r["id"],
                "amount": self._amount(r["amount_minor"]),
                "paid_date": r["paid_date"],
                "employee_name": r["employee_name"],
            }
            for r in rows
        ]


class SqliteAgencyCommissionSource(_SqliteSource):
    def fetch_agency_sales(self, date_range: DateRange) -> list[dict[str, Any]]:
        rows = db.fetch_agency_sales(self.cfg, date_range.start, date_range.end)
        return [
            {
                "id": r["id"],
                "revenue": self._amount(r["amount_minor"]),
                "commission": self._amount(r["commission_minor"]),
                "status": r["status"],
                "date": r["sale_date"],
                "agency_id": r["agency_id"],
            }
            for r in rows
        ]


class SqliteManualEntryStore(_SqliteSource):
    def fetch_entries(
        self, statement_type: str, date_range: DateRange
    ) -> list[dict[str, Any]]:
        rows = db.fetch_financial_entries(
            self.cfg, statement_type, date_range.start, date_range.end
        )
        return [
            {
                "id": r["id"],
                "category": r["category"],
                "sub_category": r["sub_category"],
                "amount": self._amount(r["amount_minor"]),
                "date": r["entry_date"],
                "description": r["description"],
            }
            for r in rows
        ]


class SqliteInvestmentStore(_SqliteSource):
    def fetch_investments(
        self, date_range: DateRange, business_id: Optional[str] = None
    ) -> list[dict[str, Any]]:
        rows = db.fetch_investments(
            self.cfg, date_range.start, date_range.end, business_id
        )
        return [
            {
                "id": r["id"],
                "business_id": r["business_id"],
                "type": r["type"],
                "category": r["category"],
                "amount": self._amount(r["amount_minor"]),
                "date": r["investment_date"],
                "description": r["description"],
            }
            for r in rows
        ]


def sqlite_sources(cfg: DatabaseConfig, minor_unit_digits: int) -> SourceSet:
    """Build a SourceSet reading every subsystem from the SQLite store."""
    return SourceSet(
        sales=SqliteBusinessSalesSource(cfg, minor_unit_digits),
        payroll=SqlitePayrollSource(cfg, minor_unit_digits),
        agency=SqliteAgencyCommissionSource(cfg, minor_unit_digits),
        manual_entries=SqliteManualEntryStore(cfg, minor_unit_digits),
        investments=SqliteInvestmentStore(cfg, minor_unit_digits),
    )

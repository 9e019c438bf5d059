from datetime import date
from decimal import Decimal

import pytest

from finstatements.config import EngineOptions
from finstatements.db import DatabaseConfig
from finstatements.engine import StatementEngine
from finstatements.periods import DateRange
from finstatements.sources import SourceSet


class FakeSource:
    """In-memory stand-in for every source contract.

    ``records`` is a list of dicts (or, for manual entries, a dict keyed by
    statement type). When ``error`` is set, every fetch raises it.
    """

    def __init__(self, records=None, error=None):
        self.records = records if records is not None else []
        self.error = error
        self.calls = []

    def _fetch(self, name, *args):
        self.calls.append((name, *args))
        if self.error is not None:
            raise self.error

    def fetch_sales(self, date_range, business_id=None):
        self._fetch("fetch_sales", date_range, business_id)
        return [
            r
            for r in self.records
            if business_id is None or r.get("business_id") == business_id
        ]

    def fetch_salaries(self, date_range):
        self._fetch("fetch_salaries", date_range)
        return list(self.records)

    def fetch_agency_sales(self, date_range):
        self._fetch("fetch_agency_sales", date_range)
        return list(self.records)

    def fetch_entries(self, statement_type, date_range):
        self._fetch("fetch_entries", statement_type, date_range)
        if isinstance(self.records, dict):
            return list(self.records.get(statement_type, []))
        return []

    def fetch_investments(self, date_range, business_id=None):
        self._fetch("fetch_investments", date_range, business_id)
        return [
            r
            for r in self.records
            if business_id is None or r.get("business_id") == business_id
        ]


def make_sources(
    sales=None, payroll=None, agency=None, entries=None, investments=None
) -> SourceSet:
    """Build a SourceSet; each argument is a FakeSource or a record list."""

    def wrap(value):
        if isinstance(value, FakeSource):
            return value
        return FakeSource(value)

    return SourceSet(
        sales=wrap(sales),
        payroll=wrap(payroll),
        agency=wrap(agency),
        manual_entries=wrap(entries if entries is not None else {}),
        investments=wrap(investments),
    )


def sale(id, amount, type="revenue", business_id="B1", day=date(2024, 1, 10)):
    return {
        "id": id,
        "business_id": business_id,
        "type": type,
        "amount": Decimal(str(amount)),
        "date": day,
        "description": f"sale {id}",
    }


def entry(id, category, amount, sub_category=None, day=date(2024, 1, 15)):
    return {
        "id": id,
        "category": category,
        "sub_category": sub_category,
        "amount": Decimal(str(amount)),
        "date": day,
        "description": None,
    }


@pytest.fixture
def january() -> DateRange:
    return DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31), label="January")


@pytest.fixture
def make_engine():
    """Factory fixture: make_engine(sales=[...], entries={...}, ...)."""

    def _make(digits=0, timeout=5.0, **sources):
        return StatementEngine(
            make_sources(**sources),
            minor_unit_digits=digits,
            options=EngineOptions(max_workers=5, source_timeout=timeout),
        )

    return _make


@pytest.fixture
def db_cfg(tmp_path) -> DatabaseConfig:
    """DatabaseConfig pointing to a temporary SQLite file."""
    return DatabaseConfig(engine="sqlite", path=tmp_path / "test_db.sqlite")

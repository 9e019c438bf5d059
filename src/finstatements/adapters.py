# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Source adapters: from subsystem records to canonical ledger entries.

Each adapter wraps one source (see ``sources.py``) and exposes:

- ``fetch(date_range, scope)``: read the raw records of its subsystem,
- ``normalize(record)``: turn one raw record into zero, one or several
  ``LedgerEntry`` instances.

``LedgerEntry`` is the only shape the aggregator and statement builders
ever see. Everything source-specific (field names, amount types, sign
conventions, statuses) is resolved here.

Sign convention
---------------
Adapters of the operational subsystems (business sales, payroll, agency
sales, investments) always emit positive magnitudes: whether an amount
increases or decreases a result is encoded by the category's group and
direction in the taxonomy, never by the sign of the number. Manual ledger
entries are passed through with their sign so that users can book
corrections.

Amounts are converted to integer minor units here, through
``money.to_minor_units``, and nowhere else.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

import pandas as pd

from . import taxonomy as tx
from .errors import EngineWarning, UnknownCategory
from .money import to_minor_units
from .periods import DateRange
from .sources import (
    AgencyCommissionSource,
    BusinessSalesSource,
    InvestmentStore,
    ManualEntryStore,
    PayrollSource,
    RawRecord,
    SourceSet,
)
from .taxonomy import STATEMENT_TYPES, Taxonomy

logger = logging.getLogger(__name__)

SourceType = Literal[
    "business_sale", "payroll", "agency_commission", "manual_entry", "investment"
]


@dataclass(frozen=True)
class Scope:
    """Restriction of a request. ``business_id=None`` means the whole company."""

    business_id: Optional[str] = None


@dataclass(frozen=True)
class LedgerEntry:
    """
    Canonical ledger entry produced by an adapter.

    Attributes
    ----------
    id:
        Identifier unique within one request (source type + origin id).
    source_type:
        Adapter that produced the entry.
    statement_type / category / sub_category:
        Classification, validated against the taxonomy.
    amount_minor:
        Signed integer amount in minor currency units.
    date:
        Booking date of the origin record.
    provenance_ref:
        Origin table/record (and business id where relevant).
    """

    id: str
    source_type: str
    statement_type: str
    category: str
    amount_minor: int
    date: date
    sub_category: Optional[str] = None
    description: Optional[str] = None
    provenance_ref: str = ""


@dataclass
class NormalizedBatch:
    """Entries produced from one source's records, plus dropped-record warnings."""

    entries: list[LedgerEntry] = field(default_factory=list)
    warnings: list[EngineWarning] = field(default_factory=list)


def coerce_date(value: Any) -> date:
    """Return a ``date`` from a date, datetime, Timestamp or ISO string.

    Strings are either an ISO date or an ISO datetime; anything trailing
    the date that is not a time part is rejected.

    Raises:
        ValueError: if the value cannot be interpreted as a date.
    """
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise ValueError("Missing date.")
    text = str(value).strip()
    try:
        if len(text) > 10:
            # Only a real time part may follow the date ("T" or space separated)
            if text[10] not in "T ":
                raise ValueError(text)
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}") from exc


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class SourceAdapter:
    """Base class of all adapters.

    Subclasses set ``source_type`` and implement ``fetch`` and ``normalize``.
    """

    source_type: str = ""

    def __init__(self, taxonomy: Taxonomy, minor_unit_digits: int):
        self.taxonomy = taxonomy
        self.minor_unit_digits = minor_unit_digits

    def fetch(
        self, date_range: DateRange, scope: Optional[Scope] = None
    ) -> Sequence[RawRecord]:
        raise NotImplementedError

    def normalize(self, record: RawRecord) -> tuple[LedgerEntry, ...]:
        raise NotImplementedError

    # -- helpers -------------------------------------------------------------

    def _minor(self, value: Any) -> int:
        if value is None:
            raise ValueError("Missing amount.")
        return to_minor_units(value, self.minor_unit_digits)

    def _magnitude(self, value: Any) -> int:
        return abs(self._minor(value))

    def _entry(
        self,
        *,
        entry_id: str,
        category: str,
        statement_type: str,
        amount_minor: int,
        day: date,
        provenance_ref: str,
        sub_category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """Build an entry after checking its category against the taxonomy."""
        cat = self.taxonomy.lookup(category, statement_type)
        return LedgerEntry(
            id=entry_id,
            source_type=self.source_type,
            statement_type=cat.statement_type,
            category=cat.code,
            sub_category=sub_category,
            amount_minor=amount_minor,
            date=day,
            description=description,
            provenance_ref=provenance_ref,
        )

    def normalize_all(self, records: Sequence[RawRecord]) -> NormalizedBatch:
        """Normalize every record, dropping (with a warning) those that fail.

        An unknown category yields an ``unknown_category`` warning; an
        unreadable amount or date yields an ``invalid_record`` warning.
        Other records are unaffected.
        """
        batch = NormalizedBatch()
        for record in records:
            ref = record.get("id") if isinstance(record, Mapping) else None
            try:
                batch.entries.extend(self.normalize(record))
            except UnknownCategory as exc:
                logger.warning("%s record %s dropped: %s", self.source_type, ref, exc)
                batch.warnings.append(
                    EngineWarning(
                        kind="unknown_category",
                        message=f"{self.source_type} record {ref} dropped: {exc}",
                        source=self.source_type,
                        category=exc.code,
                    )
                )
            except (ValueError, TypeError, KeyError) as exc:
                logger.warning("%s record %s is invalid: %s", self.source_type, ref, exc)
                batch.warnings.append(
                    EngineWarning(
                        kind="invalid_record",
                        message=f"{self.source_type} record {ref} dropped: {exc}",
                        source=self.source_type,
                    )
                )
        return batch


class BusinessSalesAdapter(SourceAdapter):
    """Business unit revenue/expense records → sales revenue / general expense."""

    source_type = "business_sale"

    def __init__(self, source: BusinessSalesSource, taxonomy: Taxonomy, minor_unit_digits: int):
        super().__init__(taxonomy, minor_unit_digits)
        self.source = source

    def fetch(self, date_range, scope=None):
        business_id = scope.business_id if scope is not None else None
        return self.source.fetch_sales(date_range, business_id)

    def normalize(self, record):
        kind = str(record.get("type") or "revenue").strip().lower()
        if kind == "revenue":
            category = tx.SALES_REVENUE
        elif kind == "expense":
            category = tx.GENERAL_EXPENSE
        else:
            raise ValueError(f"Unknown business sale type {kind!r}.")

        business_id = record.get("business_id")
        ref = f"business_sales/{record['id']}"
        if business_id:
            ref = f"{ref}@{business_id}"

        return (
            self._entry(
                entry_id=f"{self.source_type}:{record['id']}",
                category=category,
                statement_type="pl",
                amount_minor=self._magnitude(record.get("amount")),
                day=coerce_date(record.get("date")),
                description=_optional_text(record.get("description")),
                provenance_ref=ref,
            ),
        )


class PayrollAdapter(SourceAdapter):
    """Salary payments → SG&A personnel expense."""

    source_type = "payroll"

    def __init__(self, source: PayrollSource, taxonomy: Taxonomy, minor_unit_digits: int):
        super().__init__(taxonomy, minor_unit_digits)
        self.source = source

    def fetch(self, date_range, scope=None):
        return self.source.fetch_salaries(date_range)

    def normalize(self, record):
        return (
            self._entry(
                entry_id=f"{self.source_type}:{record['id']}",
                category=tx.PERSONNEL_EXPENSE,
                statement_type="pl",
                amount_minor=self._magnitude(record.get("amount")),
                day=coerce_date(record.get("paid_date")),
                description=_optional_text(record.get("employee_name")),
                provenance_ref=f"salary_payments/{record['id']}",
            ),
        )


class AgencyCommissionAdapter(SourceAdapter):
    """Agency sales → agency revenue and agency commission, as two entries.

    The two amounts are never netted here: revenue and commission land in
    distinct categories (revenue and SG&A). Cancelled sales produce no
    entry at all. A missing commission is booked as zero.
    """

    source_type = "agency_commission"

    def __init__(self, source: AgencyCommissionSource, taxonomy: Taxonomy, minor_unit_digits: int):
        super().__init__(taxonomy, minor_unit_digits)
        self.source = source

    def fetch(self, date_range, scope=None):
        return self.source.fetch_agency_sales(date_range)

    def normalize(self, record):
        if str(record.get("status") or "").strip().lower() == "cancelled":
            return ()

        day = coerce_date(record.get("date"))
        ref = f"agency_sales/{record['id']}"
        commission = record.get("commission")
        commission_minor = 0 if commission is None else self._magnitude(commission)

        return (
            self._entry(
                entry_id=f"{self.source_type}:{record['id']}:revenue",
                category=tx.AGENCY_REVENUE,
                statement_type="pl",
                amount_minor=self._magnitude(record.get("revenue")),
                day=day,
                provenance_ref=ref,
            ),
            self._entry(
                entry_id=f"{self.source_type}:{record['id']}:commission",
                category=tx.AGENCY_COMMISSION,
                statement_type="pl",
                amount_minor=commission_minor,
                day=day,
                provenance_ref=ref,
            ),
        )


class ManualEntryAdapter(SourceAdapter):
    """User-entered ledger rows for every statement type, passed through.

    The category must exist in the taxonomy under the statement type the
    row was filed under; otherwise the row is rejected with
    ``UnknownCategory``.
    """

    source_type = "manual_entry"

    def __init__(
        self,
        source: ManualEntryStore,
        taxonomy: Taxonomy,
        minor_unit_digits: int,
        statement_types: Sequence[str] = STATEMENT_TYPES,
    ):
        super().__init__(taxonomy, minor_unit_digits)
        self.source = source
        self.statement_types = tuple(statement_types)

    def fetch(self, date_range, scope=None):
        records: list[dict[str, Any]] = []
        for statement_type in self.statement_types:
            for r in self.source.fetch_entries(statement_type, date_range):
                records.append({**r, "statement_type": statement_type})
        return records

    def normalize(self, record):
        statement_type = record["statement_type"]
        category = str(record.get("category") or "").strip()
        return (
            self._entry(
                entry_id=f"{self.source_type}:{statement_type}:{record['id']}",
                category=category,
                statement_type=statement_type,
                amount_minor=self._minor(record.get("amount")),
                day=coerce_date(record.get("date")),
                sub_category=_optional_text(record.get("sub_category")),
                description=_optional_text(record.get("description")),
                provenance_ref=f"financial_entries/{record['id']}",
            ),
        )


class InvestmentAdapter(SourceAdapter):
    """Investment records → dedicated investing outflow category.

    Investments are a ledger of their own, parallel to the manual
    ``purchase_fixed_assets``-style cash-flow entries; both are kept and
    summed. The record's free-form category (or its type) becomes the
    sub-category.
    """

    source_type = "investment"

    def __init__(self, source: InvestmentStore, taxonomy: Taxonomy, minor_unit_digits: int):
        super().__init__(taxonomy, minor_unit_digits)
        self.source = source

    def fetch(self, date_range, scope=None):
        business_id = scope.business_id if scope is not None else None
        return self.source.fetch_investments(date_range, business_id)

    def normalize(self, record):
        business_id = record.get("business_id")
        ref = f"investments/{record['id']}"
        if business_id:
            ref = f"{ref}@{business_id}"

        sub_category = _optional_text(record.get("category")) or _optional_text(
            record.get("type")
        )
        return (
            self._entry(
                entry_id=f"{self.source_type}:{record['id']}",
                category=tx.CAPITAL_INVESTMENT,
                statement_type="cf",
                amount_minor=self._magnitude(record.get("amount")),
                day=coerce_date(record.get("date")),
                sub_category=sub_category,
                description=_optional_text(record.get("description")),
                provenance_ref=ref,
            ),
        )


def build_adapters(
    sources: SourceSet, taxonomy: Taxonomy, minor_unit_digits: int
) -> list[SourceAdapter]:
    """Return the five adapters, in the fixed order used for joining results."""
    return [
        BusinessSalesAdapter(sources.sales, taxonomy, minor_unit_digits),
        PayrollAdapter(sources.payroll, taxonomy, minor_unit_digits),
        AgencyCommissionAdapter(sources.agency, taxonomy, minor_unit_digits),
        ManualEntryAdapter(sources.manual_entries, taxonomy, minor_unit_digits),
        InvestmentAdapter(sources.investments, taxonomy, minor_unit_digits),
    ]

# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial statement engine for FinStatements.

This module wires the pipeline together and exposes the read operations
used by the reporting layer (CLI, web views):

1. compute_statement(statement_type, date_range, business_id=None)
   ----------------------------------------------------------------
   Collects entries from all sources concurrently, aggregates them into
   category totals, builds the PL, then the BS and CF (which both need the
   PL net profit for the same range), and returns the requested snapshot
   together with:
   - the category totals of that statement type,
   - ``is_partial`` / ``failed_sources`` when a source could not be read,
   - the warnings of the request (dropped entries, unavailable sources,
     and the consistency check relevant to the statement).

2. compute_all(date_range, business_id=None)
   -----------------------------------------
   Same pipeline, returning the three snapshots and every consistency
   warning at once.

3. compute_summary(date_range, business_id=None)
   ---------------------------------------------
   Payroll and agency figures for dashboards: totals and record counts.

4. business_totals / summarize_manual_entries
   -------------------------------------------
   Narrow views on a single source (one business unit's revenue and
   expenses, per-category totals of the manual ledger).

Notes
-----
The engine holds no mutable state: each call fetches, normalizes and
aggregates from scratch, so one instance can serve concurrent callers and
two calls over unchanged data return equal results. An inverted date
range is rejected before any source is queried.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from . import taxonomy as tx
from .adapters import (
    AgencyCommissionAdapter,
    BusinessSalesAdapter,
    ManualEntryAdapter,
    PayrollAdapter,
    Scope,
    build_adapters,
)
from .aggregator import CategoryTotal, CollectionResult, aggregate, collect_entries
from .config import AppConfig, EngineOptions
from .consistency import check_consistency
from .errors import EngineWarning, SourceUnavailable
from .periods import DateRange
from .sources import SourceSet, sqlite_sources
from .statements import (
    BSSnapshot,
    CFSnapshot,
    PLSnapshot,
    Snapshot,
    build_bs,
    build_cf,
    build_pl,
)
from .taxonomy import STATEMENT_TYPES, Taxonomy, default_taxonomy

logger = logging.getLogger(__name__)
RangeLike = Union[DateRange, tuple[date, date]]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


def _warnings_to_dicts(warnings: tuple[EngineWarning, ...]) -> list[dict[str, Any]]:
    return [
        {
            "kind": w.kind,
            "message": w.message,
            "source": w.source,
            "category": w.category,
            "delta": w.delta,
        }
        for w in warnings
    ]


def _totals_to_dicts(totals: tuple[CategoryTotal, ...]) -> list[dict[str, Any]]:
    return [
        {
            "statement_type": t.statement_type,
            "category": t.category,
            "sub_category": t.sub_category,
            "total": t.total,
        }
        for t in totals
    ]


@dataclass(frozen=True)
class Summary:
    """Payroll and agency figures over a date range (minor units)."""

    payroll_total: int
    agency_revenue_total: int
    agency_commission_total: int
    payroll_count: int
    agency_sales_count: int
    is_partial: bool = False
    failed_sources: tuple[str, ...] = ()
    warnings: tuple[EngineWarning, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "payroll_total": self.payroll_total,
            "agency_revenue_total": self.agency_revenue_total,
            "agency_commission_total": self.agency_commission_total,
            "payroll_count": self.payroll_count,
            "agency_sales_count": self.agency_sales_count,
            "is_partial": self.is_partial,
            "failed_sources": list(self.failed_sources),
            "warnings": _warnings_to_dicts(self.warnings),
        }


@dataclass(frozen=True)
class StatementResult:
    """One statement computed over a date range (and optional business)."""

    statement_type: str
    date_range: DateRange
    category_totals: tuple[CategoryTotal, ...]
    snapshot: Snapshot
    is_partial: bool = False
    failed_sources: tuple[str, ...] = ()
    warnings: tuple[EngineWarning, ...] = ()
    business_id: Optional[str] = None
    taxonomy_version: str = tx.TAXONOMY_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "statement_type": self.statement_type,
            "start": self.date_range.start.isoformat(),
            "end": self.date_range.end.isoformat(),
            "business_id": self.business_id,
            "taxonomy_version": self.taxonomy_version,
            "category_totals": _totals_to_dicts(self.category_totals),
            "snapshot": self.snapshot.to_dict(),
            "is_partial": self.is_partial,
            "failed_sources": list(self.failed_sources),
            "warnings": _warnings_to_dicts(self.warnings),
        }


@dataclass(frozen=True)
class CombinedResult:
    """The three statements computed from a single collection pass."""

    date_range: DateRange
    category_totals: tuple[CategoryTotal, ...]
    pl: PLSnapshot
    bs: BSSnapshot
    cf: CFSnapshot
    is_partial: bool = False
    failed_sources: tuple[str, ...] = ()
    warnings: tuple[EngineWarning, ...] = ()
    business_id: Optional[str] = None
    taxonomy_version: str = tx.TAXONOMY_VERSION

    def snapshot(self, statement_type: str) -> Snapshot:
        return {"pl": self.pl, "bs": self.bs, "cf": self.cf}[statement_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.date_range.start.isoformat(),
            "end": self.date_range.end.isoformat(),
            "business_id": self.business_id,
            "taxonomy_version": self.taxonomy_version,
            "category_totals": _totals_to_dicts(self.category_totals),
            "pl": self.pl.to_dict(),
            "bs": self.bs.to_dict(),
            "cf": self.cf.to_dict(),
            "is_partial": self.is_partial,
            "failed_sources": list(self.failed_sources),
            "warnings": _warnings_to_dicts(self.warnings),
        }


@dataclass(frozen=True)
class BusinessTotals:
    """Revenue and expense of one business unit (minor units)."""

    business_id: str
    revenue: int
    expense: int
    is_partial: bool = False
    warnings: tuple[EngineWarning, ...] = ()

    @property
    def profit(self) -> int:
        return self.revenue - self.expense


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _as_range(date_range: RangeLike) -> DateRange:
    """Return a DateRange; a (start, end) pair is validated on conversion.

    Raises:
        InvalidDateRange: if the range ends before it starts.
    """
    if isinstance(date_range, DateRange):
        return date_range
    start, end = date_range
    return DateRange(start=start, end=end)


def _check_statement_type(statement_type: str) -> None:
    if statement_type not in STATEMENT_TYPES:
        raise ValueError(
            f"Invalid statement type {statement_type!r}. "
            f"Expected one of: {', '.join(STATEMENT_TYPES)}."
        )


class StatementEngine:
    """
    Stateless statement engine over a fixed set of sources.

    Parameters
    ----------
    sources:
        The five subsystem read contracts.
    taxonomy:
        Category taxonomy; the built-in one when omitted.
    minor_unit_digits:
        Decimal digits of the currency's minor unit (0 for JPY, 2 for EUR).
    options:
        Concurrency and timeout options of the collection step.
    """

    def __init__(
        self,
        sources: SourceSet,
        taxonomy: Optional[Taxonomy] = None,
        minor_unit_digits: int = 0,
        options: Optional[EngineOptions] = None,
    ):
        self.sources = sources
        self.taxonomy = taxonomy or default_taxonomy()
        self.minor_unit_digits = minor_unit_digits
        self.options = options or EngineOptions()

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "StatementEngine":
        """Build an engine reading from the configured SQLite database."""
        if cfg.taxonomy_file is not None:
            taxonomy = Taxonomy.from_csv(cfg.taxonomy_file)
        else:
            taxonomy = default_taxonomy()
        return cls(
            sources=sqlite_sources(cfg.database, cfg.minor_unit_digits),
            taxonomy=taxonomy,
            minor_unit_digits=cfg.minor_unit_digits,
            options=cfg.engine,
        )

    # -- internals -----------------------------------------------------------

    def _collect(self, adapters, date_range: DateRange, scope: Scope) -> CollectionResult:
        return collect_entries(
            adapters,
            date_range,
            scope,
            max_workers=self.options.max_workers,
            timeout=self.options.source_timeout,
        )

    def _build_all(
        self, date_range: RangeLike, business_id: Optional[str]
    ) -> tuple[CombinedResult, tuple[EngineWarning, ...]]:
        """Run the full pipeline; also return the collection warnings alone."""
        dr = _as_range(date_range)
        adapters = build_adapters(self.sources, self.taxonomy, self.minor_unit_digits)
        collected = self._collect(adapters, dr, Scope(business_id))

        totals = tuple(aggregate(collected.entries, self.taxonomy))
        pl = build_pl(totals, self.taxonomy)
        bs = build_bs(totals, pl.net_profit, self.taxonomy)
        cf = build_cf(totals, pl.net_profit, self.taxonomy)

        logger.debug(
            "Computed statements for %s (business=%s): %d totals, net profit %d",
            dr,
            business_id,
            len(totals),
            pl.net_profit,
        )

        base_warnings = tuple(collected.warnings)
        combined = CombinedResult(
            date_range=dr,
            category_totals=totals,
            pl=pl,
            bs=bs,
            cf=cf,
            is_partial=collected.is_partial,
            failed_sources=tuple(collected.failed_sources),
            warnings=base_warnings + tuple(check_consistency(bs=bs, cf=cf)),
            business_id=business_id,
            taxonomy_version=self.taxonomy.version,
        )
        return combined, base_warnings

    # -- public API ----------------------------------------------------------

    def compute_all(
        self, date_range: RangeLike, business_id: Optional[str] = None
    ) -> CombinedResult:
        """Compute PL, BS and CF together, with every consistency warning."""
        combined, _ = self._build_all(date_range, business_id)
        return combined

    def compute_statement(
        self,
        statement_type: str,
        date_range: RangeLike,
        business_id: Optional[str] = None,
    ) -> StatementResult:
        """
        Compute one statement.

        Raises:
            ValueError: for an unknown statement type.
            InvalidDateRange: if the range ends before it starts.
        """
        _check_statement_type(statement_type)
        combined, warnings = self._build_all(date_range, business_id)

        if statement_type == "bs":
            warnings += tuple(check_consistency(bs=combined.bs))
        elif statement_type == "cf":
            warnings += tuple(check_consistency(cf=combined.cf))

        return StatementResult(
            statement_type=statement_type,
            date_range=combined.date_range,
            category_totals=tuple(
                t for t in combined.category_totals if t.statement_type == statement_type
            ),
            snapshot=combined.snapshot(statement_type),
            is_partial=combined.is_partial,
            failed_sources=combined.failed_sources,
            warnings=warnings,
            business_id=business_id,
            taxonomy_version=combined.taxonomy_version,
        )

    def compute_summary(
        self, date_range: RangeLike, business_id: Optional[str] = None
    ) -> Summary:
        """
        Payroll and agency totals and counts over a date range.

        Payroll and agency sales are company-wide; ``business_id`` is
        accepted for symmetry with the other operations and does not
        filter them. Cancelled agency sales are not counted.
        """
        dr = _as_range(date_range)
        adapters = [
            PayrollAdapter(self.sources.payroll, self.taxonomy, self.minor_unit_digits),
            AgencyCommissionAdapter(
                self.sources.agency, self.taxonomy, self.minor_unit_digits
            ),
        ]
        collected = self._collect(adapters, dr, Scope(business_id))

        payroll = [e for e in collected.entries if e.source_type == "payroll"]
        agency_revenue = [
            e
            for e in collected.entries
            if e.source_type == "agency_commission" and e.category == tx.AGENCY_REVENUE
        ]
        agency_commission = [
            e
            for e in collected.entries
            if e.source_type == "agency_commission"
            and e.category == tx.AGENCY_COMMISSION
        ]

        return Summary(
            payroll_total=sum(e.amount_minor for e in payroll),
            agency_revenue_total=sum(e.amount_minor for e in agency_revenue),
            agency_commission_total=sum(e.amount_minor for e in agency_commission),
            payroll_count=len(payroll),
            agency_sales_count=len(agency_revenue),
            is_partial=collected.is_partial,
            failed_sources=tuple(collected.failed_sources),
            warnings=tuple(collected.warnings),
        )

    def business_totals(self, business_id: str, date_range: RangeLike) -> BusinessTotals:
        """Revenue and expense of one business unit over a date range."""
        dr = _as_range(date_range)
        adapter = BusinessSalesAdapter(
            self.sources.sales, self.taxonomy, self.minor_unit_digits
        )
        collected = self._collect([adapter], dr, Scope(business_id))

        revenue = sum(
            e.amount_minor for e in collected.entries if e.category == tx.SALES_REVENUE
        )
        expense = sum(
            e.amount_minor for e in collected.entries if e.category == tx.GENERAL_EXPENSE
        )
        return BusinessTotals(
            business_id=business_id,
            revenue=revenue,
            expense=expense,
            is_partial=collected.is_partial,
            warnings=tuple(collected.warnings),
        )

    def summarize_manual_entries(
        self, statement_type: str, date_range: RangeLike
    ) -> list[CategoryTotal]:
        """
        Per (category, sub-category) totals of the manual ledger.

        Entries with an unknown category are left out (and logged).

        Raises:
            ValueError: for an unknown statement type.
            InvalidDateRange: if the range ends before it starts.
            SourceUnavailable: if the manual entry store cannot be read.
        """
        _check_statement_type(statement_type)
        dr = _as_range(date_range)
        adapter = ManualEntryAdapter(
            self.sources.manual_entries,
            self.taxonomy,
            self.minor_unit_digits,
            statement_types=(statement_type,),
        )
        collected = self._collect([adapter], dr, Scope())
        if collected.failed_sources:
            reason = collected.warnings[-1].message if collected.warnings else ""
            raise SourceUnavailable(adapter.source_type, reason)
        return aggregate(collected.entries, self.taxonomy)

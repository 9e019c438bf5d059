import threading
from datetime import date

import pytest
from conftest import FakeSource, sale

from finstatements.adapters import BusinessSalesAdapter, LedgerEntry, PayrollAdapter
from finstatements.aggregator import CategoryTotal, aggregate, collect_entries
from finstatements.errors import SourceUnavailable, UnknownCategory
from finstatements.taxonomy import default_taxonomy

TAX = default_taxonomy()
DAY = date(2024, 1, 10)


def _e(id, statement_type, category, amount, sub=None) -> LedgerEntry:
    return LedgerEntry(
        id=id,
        source_type="manual_entry",
        statement_type=statement_type,
        category=category,
        amount_minor=amount,
        date=DAY,
        sub_category=sub,
    )


def test_aggregate_empty_input() -> None:
    assert aggregate([], TAX) == []


def test_aggregate_groups_and_sums() -> None:
    totals = aggregate(
        [
            _e("1", "pl", "rent", 100),
            _e("2", "pl", "rent", 50),
            _e("3", "pl", "rent", 25, sub="office"),
            _e("4", "pl", "rent", -5, sub="office"),
        ],
        TAX,
    )
    assert totals == [
        CategoryTotal("pl", "rent", None, 150),
        CategoryTotal("pl", "rent", "office", 20),
    ]
    assert all(type(t.total) is int for t in totals)


def test_aggregate_follows_taxonomy_order() -> None:
    entries = [
        _e("1", "cf", "borrowings", 1),
        _e("2", "bs", "cash", 1),
        _e("3", "pl", "rent", 1),
        _e("4", "pl", "sales_revenue", 1),
    ]
    totals = aggregate(entries, TAX)
    assert [(t.statement_type, t.category) for t in totals] == [
        ("pl", "sales_revenue"),
        ("pl", "rent"),
        ("bs", "cash"),
        ("cf", "borrowings"),
    ]
    # Input order has no influence
    assert aggregate(list(reversed(entries)), TAX) == totals


def test_aggregate_rejects_unknown_or_misfiled_category() -> None:
    with pytest.raises(UnknownCategory):
        aggregate([_e("1", "pl", "foo_bar", 1)], TAX)
    with pytest.raises(UnknownCategory):
        aggregate([_e("1", "bs", "rent", 1)], TAX)


def test_collect_entries_joins_sources_in_adapter_order(january) -> None:
    adapters = [
        BusinessSalesAdapter(FakeSource([sale(1, 100)]), TAX, 0),
        PayrollAdapter(
            FakeSource([{"id": 1, "amount": 40, "paid_date": DAY, "employee_name": None}]),
            TAX,
            0,
        ),
    ]

    result = collect_entries(adapters, january)

    assert [e.source_type for e in result.entries] == ["business_sale", "payroll"]
    assert result.failed_sources == []
    assert result.is_partial is False


def test_collect_entries_is_fail_soft(january) -> None:
    adapters = [
        BusinessSalesAdapter(FakeSource(error=SourceUnavailable("sales", "down")), TAX, 0),
        PayrollAdapter(FakeSource(error=ConnectionError("refused")), TAX, 0),
        BusinessSalesAdapter(FakeSource([sale(7, 10)]), TAX, 0),
    ]

    result = collect_entries(adapters, january)

    assert [e.id for e in result.entries] == ["business_sale:7"]
    assert result.failed_sources == ["business_sale", "payroll"]
    assert result.is_partial is True
    assert [w.kind for w in result.warnings] == ["source_unavailable"] * 2
    assert "ConnectionError" in result.warnings[1].message


def test_collect_entries_times_out_slow_sources(january) -> None:
    release = threading.Event()

    class SlowSource(FakeSource):
        def fetch_salaries(self, date_range):
            release.wait(5)
            return []

    adapters = [
        BusinessSalesAdapter(FakeSource([sale(1, 10)]), TAX, 0),
        PayrollAdapter(SlowSource(), TAX, 0),
    ]
    try:
        result = collect_entries(adapters, january, timeout=0.2)
    finally:
        release.set()

    assert [e.id for e in result.entries] == ["business_sale:1"]
    assert result.failed_sources == ["payroll"]
    assert "timed out" in result.warnings[0].message


def test_collect_entries_keeps_normalization_warnings(january) -> None:
    adapters = [BusinessSalesAdapter(FakeSource([sale(1, 10), sale(2, 5, type="gift")]), TAX, 0)]

    result = collect_entries(adapters, january)

    assert len(result.entries) == 1
    assert result.is_partial is False
    assert [w.kind for w in result.warnings] == ["invalid_record"]


def test_collect_entries_without_adapters(january) -> None:
    result = collect_entries([], january)
    assert result.entries == [] and result.failed_sources == []


def test_aggregate_keeps_exact_integers_beyond_int64() -> None:
    totals = aggregate([_e("1", "pl", "rent", 2**62), _e("2", "pl", "rent", 2**62)], TAX)
    assert totals == [CategoryTotal("pl", "rent", None, 2**63)]


def test_collect_entries_unusable_payload_fails_only_that_source(january) -> None:
    class NoneSource(FakeSource):
        def fetch_salaries(self, date_range):
            return None

    adapters = [
        BusinessSalesAdapter(FakeSource([sale(1, 1000)]), TAX, 0),
        PayrollAdapter(NoneSource(), TAX, 0),
    ]

    result = collect_entries(adapters, january)

    assert [e.id for e in result.entries] == ["business_sale:1"]
    assert result.failed_sources == ["payroll"]
    assert [w.kind for w in result.warnings] == ["source_unavailable"]
    assert "TypeError" in result.warnings[0].message

from datetime import date

import pandas as pd
import pytest

from finstatements.db import (
    FinancialEntryUpdate,
    NewFinancialEntry,
    NewInvestment,
    delete_financial_entry,
    delete_investment,
    fetch_agency_sales,
    fetch_business_sales,
    fetch_financial_entries,
    fetch_investments,
    fetch_salary_payments,
    get_financial_entry,
    has_records,
    import_records,
    init_database,
    insert_agency_sale,
    insert_business_sale,
    insert_financial_entry,
    insert_investment,
    insert_salary_payment,
    list_financial_entries,
    list_investments,
    update_financial_entry,
)

JAN_START, JAN_END = date(2024, 1, 1), date(2024, 1, 31)


def test_init_database_creates_file_and_schema(db_cfg) -> None:
    """init_database should create the SQLite file and an empty schema."""
    assert not db_cfg.path.exists()
    init_database(db_cfg)
    assert db_cfg.path.exists()
    assert has_records(db_cfg) is False

    # Idempotent
    init_database(db_cfg)
    assert has_records(db_cfg) is False


def test_business_sales_are_filtered_by_date_and_business(db_cfg) -> None:
    insert_business_sale(
        db_cfg, business_id="B1", type="revenue", amount_minor=1000, sale_date=date(2024, 1, 5)
    )
    insert_business_sale(
        db_cfg, business_id="B2", type="expense", amount_minor=300, sale_date=date(2024, 1, 6)
    )
    insert_business_sale(
        db_cfg, business_id="B1", type="revenue", amount_minor=999, sale_date=date(2024, 2, 1)
    )

    assert has_records(db_cfg) is True
    rows = fetch_business_sales(db_cfg, JAN_START, JAN_END)
    assert [r["amount_minor"] for r in rows] == [1000, 300]

    rows_b1 = fetch_business_sales(db_cfg, JAN_START, JAN_END, business_id="B1")
    assert len(rows_b1) == 1
    assert rows_b1[0]["sale_date"] == "2024-01-05"


def test_invalid_sale_type_and_agency_status_are_rejected(db_cfg) -> None:
    with pytest.raises(ValueError):
        insert_business_sale(
            db_cfg, business_id="B1", type="refund", amount_minor=1, sale_date=JAN_START
        )
    with pytest.raises(ValueError):
        insert_agency_sale(db_cfg, amount_minor=1, sale_date=JAN_START, status="lost")


def test_salary_and_agency_reads(db_cfg) -> None:
    insert_salary_payment(db_cfg, amount_minor=250000, paid_date=date(2024, 1, 25))
    insert_agency_sale(
        db_cfg,
        amount_minor=500000,
        commission_minor=50000,
        sale_date=date(2024, 1, 20),
        status="paid",
        agency_id="A1",
    )
    insert_agency_sale(db_cfg, amount_minor=100, sale_date=date(2024, 1, 21))

    salaries = fetch_salary_payments(db_cfg, JAN_START, JAN_END)
    assert [s["amount_minor"] for s in salaries] == [250000]

    agency = fetch_agency_sales(db_cfg, JAN_START, JAN_END)
    assert len(agency) == 2
    assert agency[0]["commission_minor"] == 50000
    assert agency[1]["commission_minor"] is None
    assert agency[1]["status"] == "pending"


def test_financial_entry_crud(db_cfg) -> None:
    created = insert_financial_entry(
        db_cfg,
        NewFinancialEntry(
            statement_type="pl",
            category="rent",
            amount_minor=80000,
            entry_date=date(2024, 1, 31),
            description="January rent",
        ),
    )
    assert created.id > 0
    assert created.updated_at is None

    updated = update_financial_entry(
        db_cfg, created.id, FinancialEntryUpdate(amount_minor=85000, sub_category="office")
    )
    assert updated.amount_minor == 85000
    assert updated.sub_category == "office"
    assert updated.category == "rent"
    assert updated.updated_at is not None

    assert get_financial_entry(db_cfg, created.id) == updated
    assert delete_financial_entry(db_cfg, created.id) is True
    assert get_financial_entry(db_cfg, created.id) is None
    assert delete_financial_entry(db_cfg, created.id) is False


def test_update_missing_entry_raises(db_cfg) -> None:
    with pytest.raises(ValueError):
        update_financial_entry(db_cfg, 42, FinancialEntryUpdate(amount_minor=1))


def test_store_keeps_unknown_categories(db_cfg) -> None:
    """The store is permissive; taxonomy checks happen at read time."""
    insert_financial_entry(
        db_cfg,
        NewFinancialEntry(
            statement_type="pl", category="foo_bar", amount_minor=1, entry_date=JAN_START
        ),
    )
    rows = fetch_financial_entries(db_cfg, "pl", JAN_START, JAN_END)
    assert rows[0]["category"] == "foo_bar"
    assert fetch_financial_entries(db_cfg, "bs", JAN_START, JAN_END) == []


def test_list_financial_entries_filters_statement_type(db_cfg) -> None:
    for amount, sub in [(100, "a"), (200, "a"), (50, None)]:
        insert_financial_entry(
            db_cfg,
            NewFinancialEntry(
                statement_type="cf",
                category="purchase_fixed_assets",
                sub_category=sub,
                amount_minor=amount,
                entry_date=date(2024, 1, 10),
            ),
        )

    listed = list_financial_entries(db_cfg, JAN_START, JAN_END, statement_type="cf")
    assert len(listed) == 3
    assert "amount_minor" in listed.columns

    assert listed["amount_minor"].sum() == 350
    assert list_financial_entries(db_cfg, JAN_START, JAN_END, statement_type="pl").empty


def test_investments_crud(db_cfg) -> None:
    inv_id = insert_investment(
        db_cfg,
        NewInvestment(amount_minor=50000, investment_date=date(2024, 1, 12), business_id="B1"),
    )
    insert_investment(
        db_cfg,
        NewInvestment(
            amount_minor=70000,
            investment_date=date(2024, 1, 13),
            business_id="B2",
            type="software",
            category="saas",
        ),
    )

    rows = fetch_investments(db_cfg, JAN_START, JAN_END, business_id="B1")
    assert [(r["amount_minor"], r["type"]) for r in rows] == [(50000, "asset_purchase")]

    df = list_investments(db_cfg, JAN_START, JAN_END)
    assert len(df) == 2

    assert delete_investment(db_cfg, inv_id) is True
    assert len(list_investments(db_cfg, JAN_START, JAN_END)) == 1


def test_import_records_writes_batch(db_cfg) -> None:
    df = pd.DataFrame(
        [
            {
                "statement_type": "bs",
                "category": "cash",
                "sub_category": None,
                "amount_minor": 1_000_000,
                "date": date(2024, 1, 1),
                "description": "Opening cash",
            },
            {
                "statement_type": "bs",
                "category": "capital_stock",
                "sub_category": None,
                "amount_minor": 1_000_000,
                "date": date(2024, 1, 1),
                "description": None,
            },
        ]
    )

    assert import_records(df, db_cfg, "entries") == 2
    assert len(fetch_financial_entries(db_cfg, "bs", JAN_START, JAN_END)) == 2


def test_import_records_validates_columns(db_cfg) -> None:
    with pytest.raises(ValueError, match="missing"):
        import_records(pd.DataFrame([{"amount_minor": 1}]), db_cfg, "sales")
    with pytest.raises(ValueError, match="Unknown"):
        import_records(pd.DataFrame(), db_cfg, "refunds")

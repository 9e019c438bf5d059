from finstatements.aggregator import CategoryTotal
from finstatements.engine import Summary
from finstatements.errors import EngineWarning
from finstatements.statements import CFSnapshot, PLSnapshot
from finstatements.taxonomy import default_taxonomy
from finstatements.views import (
    category_totals_to_dataframe,
    snapshot_to_dataframe,
    summary_to_dataframe,
    warnings_to_dataframe,
)


def test_snapshot_lines_in_presentation_order() -> None:
    pl = PLSnapshot.from_components(1_000_000, 400_000, 300_000, 0, 0)

    df = snapshot_to_dataframe(pl)

    assert df["key"].tolist()[:3] == ["revenue", "cost_of_sales", "gross_profit"]
    assert df["display_order"].tolist() == [10 * (i + 1) for i in range(len(df))]
    gross = df.loc[df["key"] == "gross_profit"].iloc[0]
    assert gross["type"] == "total"
    assert gross["amount"] == 600_000
    assert "formatted" not in df.columns


def test_snapshot_formatted_column() -> None:
    cf = CFSnapshot.from_components(123456, -50000, 0)

    df = snapshot_to_dataframe(cf, digits=2, currency="EUR")

    assert df["formatted"].tolist() == [
        "1,234.56 EUR",
        "-500.00 EUR",
        "0.00 EUR",
        "734.56 EUR",
    ]


def test_category_totals_carry_group_and_label() -> None:
    totals = [
        CategoryTotal("pl", "sales_revenue", None, 10),
        CategoryTotal("cf", "capital_investment", "software", 5),
    ]

    df = category_totals_to_dataframe(totals, default_taxonomy(), digits=0)

    assert df["group"].tolist() == ["revenue", "investing"]
    assert df["label"].tolist() == ["Sales revenue", "Capital investments"]
    assert df["sub_category"].tolist() == ["", "software"]
    assert df["formatted"].tolist() == ["10", "5"]


def test_empty_frames_keep_their_columns() -> None:
    assert list(category_totals_to_dataframe([], default_taxonomy()).columns) == [
        "statement_type",
        "group",
        "category",
        "label",
        "sub_category",
        "total",
    ]
    assert warnings_to_dataframe([]).empty


def test_warnings_to_dataframe() -> None:
    df = warnings_to_dataframe(
        [EngineWarning(kind="balance_mismatch", message="off by 5", delta=5)]
    )
    row = df.iloc[0]
    assert (row["kind"], row["source"], row["delta"]) == ("balance_mismatch", "", 5)


def test_summary_counts_are_not_formatted_as_amounts() -> None:
    summary = Summary(
        payroll_total=250000,
        agency_revenue_total=100,
        agency_commission_total=10,
        payroll_count=3,
        agency_sales_count=1,
    )

    df = summary_to_dataframe(summary, digits=2, currency="USD")
    formatted = dict(zip(df["key"], df["formatted"]))

    assert formatted["payroll_total"] == "2,500.00 USD"
    assert formatted["payroll_count"] == "3"

from datetime import date

import pytest

from finstatements.errors import UnknownCategory
from finstatements.io import read_source_records
from finstatements.taxonomy import default_taxonomy


def _csv(tmp_path, text: str):
    path = tmp_path / "records.csv"
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def test_read_sales_converts_amounts_and_dates(tmp_path) -> None:
    path = _csv(
        tmp_path,
        """
Business_ID,Type,Amount,Date,Label
B1,Revenue,1234.50,2024-01-05,Consulting
B2,expense,99,2024-01-06,
""",
    )

    df = read_source_records(path, "sales", minor_unit_digits=2)

    assert list(df.columns) == ["business_id", "type", "amount_minor", "date", "description"]
    assert df["amount_minor"].tolist() == [123450, 9900]
    assert df["type"].tolist() == ["revenue", "expense"]
    assert df["date"].tolist() == [date(2024, 1, 5), date(2024, 1, 6)]
    assert df["description"].tolist() == ["Consulting", None]


def test_read_agency_defaults_status_and_keeps_missing_commission(tmp_path) -> None:
    path = _csv(
        tmp_path,
        """
amount,commission,date,status
500000,50000,2024-01-20,paid
100,,2024-01-21,
""",
    )

    df = read_source_records(path, "agency", minor_unit_digits=0)

    assert df["commission_minor"].tolist() == [50000, None]
    assert df["status"].tolist() == ["paid", "pending"]


def test_read_entries_checks_taxonomy_when_given(tmp_path) -> None:
    path = _csv(
        tmp_path,
        """
statement_type,category,amount,date
PL,rent,-30,2024-01-31
pl,foo_bar,10,2024-01-31
""",
    )

    df = read_source_records(path, "entries", minor_unit_digits=0)
    assert df["statement_type"].tolist() == ["pl", "pl"]
    assert df["amount_minor"].tolist() == [-30, 10]

    with pytest.raises(UnknownCategory):
        read_source_records(path, "entries", minor_unit_digits=0, taxonomy=default_taxonomy())


@pytest.mark.parametrize(
    "source, text, match",
    [
        ("sales", "business_id,amount,date\nB1,1,2024-01-01", "missing column"),
        ("sales", "business_id,type,amount,date\nB1,refund,1,2024-01-01", "type"),
        ("salaries", "amount,date\n1,01/02/2024", "date"),
        ("salaries", "amount,date\n1,", "date"),
        ("salaries", "amount,date\nabc,2024-01-01", "amount"),
        ("agency", "amount,date,status\n1,2024-01-01,lost", "status"),
        ("entries", "statement_type,category,amount,date\ntb,x,1,2024-01-01", "statement_type"),
    ],
)
def test_read_source_records_rejects_bad_input(tmp_path, source, text, match) -> None:
    with pytest.raises(ValueError, match=match):
        read_source_records(_csv(tmp_path, text), source, minor_unit_digits=0)


def test_unknown_source_raises(tmp_path) -> None:
    with pytest.raises(ValueError, match="Unknown record source"):
        read_source_records(_csv(tmp_path, "amount,date\n1,2024-01-01"), "refunds", 0)

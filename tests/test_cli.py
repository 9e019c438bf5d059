from datetime import date

import pytest

from finstatements import __version__
from finstatements.cli import main
from finstatements.db import DatabaseConfig, fetch_financial_entries, list_investments


@pytest.fixture
def cfg_path(tmp_path):
    path = tmp_path / "finstatements_config.toml"
    path.write_text(
        """
[fiscal_year]
start_date = "2024-01-01"
end_date = "2024-12-31"

[accounting]
currency = "EUR"
minor_unit_digits = 2

[database]
path = "db.sqlite"

[display]
mode = "table"
""",
        encoding="utf-8",
    )
    return path


def _run(cfg_path, *argv):
    main(["--config", str(cfg_path), *argv])


def _january():
    return date(2024, 1, 1), date(2024, 1, 31)


def _db(cfg_path) -> DatabaseConfig:
    return DatabaseConfig(engine="sqlite", path=cfg_path.parent / "db.sqlite")


def test_version(capsys) -> None:
    main(["--version"])
    assert __version__ in capsys.readouterr().out


def test_missing_config_is_a_usage_error(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main(["--config", str(tmp_path / "none.toml"), "statement", "pl"])


def test_import_then_statement(cfg_path, tmp_path, capsys) -> None:
    sales = tmp_path / "sales.csv"
    sales.write_text(
        "business_id,type,amount,date\nB1,revenue,1000.00,2024-02-01\nB1,expense,250.50,2024-02-02\n",
        encoding="utf-8",
    )

    _run(cfg_path, "import", "--source", "sales", str(sales))
    assert "Imported 2 sales record(s)." in capsys.readouterr().out

    _run(cfg_path, "--from-date", "2024-02-01", "--to-date", "2024-02-29", "statement", "pl")
    out = capsys.readouterr().out
    assert "=== Profit & Loss ===" in out
    assert "1,000.00 EUR" in out
    assert "749.50 EUR" in out


def test_statement_on_empty_database_warns(cfg_path, capsys) -> None:
    _run(cfg_path, "statement", "all")
    out = capsys.readouterr().out
    assert "database is empty" in out
    assert "=== Balance Sheet ===" in out
    assert "=== Cash Flow ===" in out


def test_statement_csv_output(cfg_path, tmp_path, capsys) -> None:
    out_dir = tmp_path / "out"
    _run(cfg_path, "--display-mode", "csv", "--output-dir", str(out_dir), "statement", "cf")

    names = sorted(p.name for p in out_dir.iterdir())
    assert any(n.startswith("cf_statement_") for n in names)
    assert any(n.startswith("cf_category_totals_") for n in names)
    assert "=== Cash Flow ===" not in capsys.readouterr().out


def test_inverted_period_is_a_usage_error(cfg_path) -> None:
    with pytest.raises(SystemExit):
        _run(cfg_path, "--from-date", "2024-03-01", "--to-date", "2024-02-01", "statement", "pl")


def test_entries_add_validates_category(cfg_path, capsys) -> None:
    with pytest.raises(SystemExit, match="foo_bar"):
        _run(
            cfg_path, "entries", "add", "--statement-type", "pl",
            "--category", "foo_bar", "--amount", "10", "--date", "2024-01-10",
        )

    _run(
        cfg_path, "entries", "add", "--statement-type", "pl",
        "--category", "rent", "--amount", "800", "--date", "2024-01-31",
    )
    assert "Created entry #1." in capsys.readouterr().out

    rows = fetch_financial_entries(_db(cfg_path), "pl", *_january())
    assert [(r["category"], r["amount_minor"]) for r in rows] == [("rent", 80000)]


def test_entries_update_list_and_delete(cfg_path, capsys) -> None:
    _run(
        cfg_path, "entries", "add", "--statement-type", "cf",
        "--category", "borrowings", "--amount", "100", "--date", "2024-01-05",
    )
    _run(cfg_path, "entries", "update", "1", "--amount", "150", "--sub-category", "bank")
    with pytest.raises(SystemExit):
        _run(cfg_path, "entries", "update", "1", "--category", "rent")
    capsys.readouterr()

    _run(cfg_path, "entries", "list", "--statement-type", "cf")
    out = capsys.readouterr().out
    assert "bank" in out
    assert "Total entries: 1" in out
    assert "150.00 EUR" in out

    _run(cfg_path, "entries", "delete", "1")
    _run(cfg_path, "entries", "delete", "1")
    out = capsys.readouterr().out
    assert "Deleted entry #1." in out
    assert "No entry with id 1." in out


def test_investments_add_and_list(cfg_path, capsys) -> None:
    _run(
        cfg_path, "--business", "B1", "investments", "add",
        "--amount", "500", "--date", "2024-01-12", "--category", "machines",
    )
    assert "Created investment #1." in capsys.readouterr().out

    df = list_investments(_db(cfg_path), *_january())
    assert df["business_id"].tolist() == ["B1"]
    assert df["amount_minor"].tolist() == [50000]

    _run(cfg_path, "--from-date", "2024-01-01", "--to-date", "2024-01-31", "statement", "cf")
    assert "-500.00 EUR" in capsys.readouterr().out


def test_invalid_amount_exits(cfg_path) -> None:
    with pytest.raises(SystemExit, match="Invalid amount"):
        _run(
            cfg_path, "investments", "add", "--amount", "lots", "--date", "2024-01-12",
        )


def test_taxonomy_command(cfg_path, capsys) -> None:
    _run(cfg_path, "taxonomy")
    out = capsys.readouterr().out
    assert "Taxonomy version" in out
    assert "capital_investment" in out


def test_summary_command(cfg_path, tmp_path, capsys) -> None:
    salaries = tmp_path / "salaries.csv"
    salaries.write_text("amount,date,employee_name\n3000,2024-01-25,Sato\n", encoding="utf-8")
    _run(cfg_path, "import", "--source", "salaries", str(salaries))
    capsys.readouterr()

    _run(cfg_path, "summary")
    out = capsys.readouterr().out
    assert "Payroll total" in out
    assert "3,000.00 EUR" in out

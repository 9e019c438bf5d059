# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FinStatements.

This module wires together the main building blocks of FinStatements:

- global configuration (fiscal year, currency, database, engine options),
- the SQLite store of source records and its CSV import,
- the statement engine (PL, BS, CF, payroll/agency summary),
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement accounting logic
itself. It resolves a reporting period, calls the engine and renders the
result.


Commands
--------

    statement {pl,bs,cf,all}
        Compute one statement (or the three of them) for the period.
        Partial results and warnings are printed after the statement.

    summary
        Payroll and agency totals and record counts.

    import --source {sales,salaries,agency,entries,investments} FILE
        Load records from a CSV file into the database.

    entries {list,add,update,delete}
        Manage manual ledger entries. Categories are checked against the
        taxonomy before anything is written.

    investments {list,add,delete}
        Manage capital investment records.

    taxonomy
        Print the category taxonomy in use.


Periods
-------

``--period {fy,ytd,mtd,last-month,last-fy}`` or ``--from-date`` /
``--to-date`` select the reporting range; by default the full fiscal year
from the configuration is used. ``--business ID`` restricts business
sales and investments to one business unit.


Display
-------

``--display-mode table|csv|both`` overrides ``[display].mode``. CSV files
are written to ``--output-dir`` (``data/output`` by default) with a
timestamp in their name.
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import AppConfig, load_app_config
from .db import (
    FinancialEntryUpdate,
    NewFinancialEntry,
    NewInvestment,
    delete_financial_entry,
    delete_investment,
    get_financial_entry,
    has_records,
    import_records,
    init_database,
    insert_financial_entry,
    insert_investment,
    list_financial_entries,
    list_investments,
    update_financial_entry,
)
from .engine import StatementEngine
from .errors import InvalidDateRange, UnknownCategory
from .io import RECORD_SOURCES, read_source_records
from .money import format_amount, to_minor_units
from .periods import DateRange, determine_range_from_args
from .taxonomy import STATEMENT_TYPES
from .views import (
    STATEMENT_TITLES,
    category_totals_to_dataframe,
    snapshot_to_dataframe,
    summary_to_dataframe,
    warnings_to_dataframe,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="finstatements",
        description=(
            "FinStatements - Financial statement engine for back-office "
            "applications. Aggregates business sales, payroll, agency sales, "
            "manual ledger entries and investments into PL, BS and CF "
            "statements."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of finstatements and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            "'finstatements_config.toml' in the current directory is used."
        ),
    )

    # Period selection
    ap.add_argument(
        "--period",
        choices=["fy", "ytd", "mtd", "last-month", "last-fy"],
        help=(
            "Predefined reporting period. If not provided, the full fiscal "
            "year from config is used."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD).",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD).",
    )
    ap.add_argument(
        "--business",
        dest="business_id",
        help="Restrict business sales and investments to one business unit.",
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, 'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output-dir",
        "--output",
        dest="output_dir",
        help="Directory for CSV files (default: data/output).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # statement
    statement = subparsers.add_parser("statement", help="Compute a financial statement.")
    statement.add_argument("statement_type", choices=[*STATEMENT_TYPES, "all"])

    # summary
    subparsers.add_parser("summary", help="Payroll and agency totals for the period.")

    # import
    imp = subparsers.add_parser("import", help="Import source records from a CSV file.")
    imp.add_argument("--source", required=True, choices=list(RECORD_SOURCES))
    imp.add_argument("csv_path", metavar="FILE")

    # taxonomy
    subparsers.add_parser("taxonomy", help="Print the category taxonomy.")

    # entries
    entries = subparsers.add_parser("entries", help="Manage manual ledger entries.")
    entries_sub = entries.add_subparsers(dest="entries_command", metavar="entries-command")

    e_list = entries_sub.add_parser("list", help="List entries of the period.")
    e_list.add_argument("--statement-type", dest="statement_type", choices=STATEMENT_TYPES)

    e_add = entries_sub.add_parser("add", help="Add an entry.")
    e_add.add_argument(
        "--statement-type", dest="statement_type", required=True, choices=STATEMENT_TYPES
    )
    e_add.add_argument("--category", required=True)
    e_add.add_argument("--sub-category", dest="sub_category")
    e_add.add_argument("--amount", required=True, help="Amount in major units, e.g. 1234.50")
    e_add.add_argument("--date", dest="entry_date", required=True, help="YYYY-MM-DD")
    e_add.add_argument("--description")

    e_update = entries_sub.add_parser("update", help="Update fields of an entry.")
    e_update.add_argument("entry_id", type=int)
    e_update.add_argument("--statement-type", dest="statement_type", choices=STATEMENT_TYPES)
    e_update.add_argument("--category")
    e_update.add_argument("--sub-category", dest="sub_category")
    e_update.add_argument("--amount")
    e_update.add_argument("--date", dest="entry_date")
    e_update.add_argument("--description")

    e_delete = entries_sub.add_parser("delete", help="Delete an entry.")
    e_delete.add_argument("entry_id", type=int)

    # investments
    inv = subparsers.add_parser("investments", help="Manage investment records.")
    inv_sub = inv.add_subparsers(dest="investments_command", metavar="investments-command")

    inv_sub.add_parser("list", help="List investments of the period.")

    i_add = inv_sub.add_parser("add", help="Add an investment record.")
    i_add.add_argument("--amount", required=True)
    i_add.add_argument("--date", dest="investment_date", required=True)
    i_add.add_argument("--type", dest="investment_type", default="asset_purchase")
    i_add.add_argument("--category")
    i_add.add_argument("--description")
    i_add.add_argument("--investment-business", dest="investment_business_id")

    i_delete = inv_sub.add_parser("delete", help="Delete an investment record.")
    i_delete.add_argument("investment_id", type=int)

    return ap


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_date(value: str) -> date:
    """Parse a CLI date (YYYY-MM-DD) or exit with a clear message."""
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid date format: {value!r}. Expected YYYY-MM-DD.") from exc


def _parse_amount(value: str, digits: int) -> int:
    """Parse a CLI amount in major units into minor units, or exit."""
    try:
        return to_minor_units(value, digits)
    except ValueError as exc:
        raise SystemExit(f"Invalid amount: {value!r}.") from exc


def _print_period(dr: DateRange, business_id: Optional[str]) -> None:
    print(f"Applied period: {dr.label or 'Custom period'} ({dr})")
    if business_id:
        print(f"Business scope: {business_id}")


def _print_table(title: str, df: pd.DataFrame) -> None:
    print()
    print(f"=== {title} ===")
    if df.empty:
        print("(no rows)")
    else:
        print(df.to_string(index=False))


class _Output:
    """Render DataFrames to console and/or timestamped CSV files."""

    def __init__(self, display_mode: str, output_dir: Optional[str]):
        self.to_table = display_mode in {"table", "both"}
        self.to_csv = display_mode in {"csv", "both"}
        self.output_dir = Path(output_dir) if output_dir else Path("data/output")
        self.timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    def emit(self, title: str, name: str, df: pd.DataFrame) -> None:
        if self.to_table:
            _print_table(title, df)
        if self.to_csv:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"{name}_{self.timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _report_partial(is_partial: bool, failed_sources) -> None:
    if is_partial:
        print()
        print(
            "Warning: partial result, the following sources could not be read: "
            + ", ".join(failed_sources)
        )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_statement(args, config: AppConfig, engine: StatementEngine, dr: DateRange) -> None:
    out = _Output(args.display_mode or config.display_mode, args.output_dir)
    digits, currency = config.minor_unit_digits, config.currency

    if args.statement_type == "all":
        result = engine.compute_all(dr, args.business_id)
        parts = [
            (
                st,
                result.snapshot(st),
                [t for t in result.category_totals if t.statement_type == st],
            )
            for st in STATEMENT_TYPES
        ]
    else:
        result = engine.compute_statement(args.statement_type, dr, args.business_id)
        parts = [(result.statement_type, result.snapshot, result.category_totals)]

    _print_period(dr, args.business_id)
    for st, snapshot, totals in parts:
        title = STATEMENT_TITLES[st]
        out.emit(
            title,
            f"{st}_statement",
            snapshot_to_dataframe(snapshot, digits, currency),
        )
        out.emit(
            f"{title}: category totals",
            f"{st}_category_totals",
            category_totals_to_dataframe(totals, engine.taxonomy, digits, currency),
        )

    _report_partial(result.is_partial, result.failed_sources)
    if result.warnings:
        out.emit("Warnings", "warnings", warnings_to_dataframe(result.warnings))


def _handle_summary(args, config: AppConfig, engine: StatementEngine, dr: DateRange) -> None:
    out = _Output(args.display_mode or config.display_mode, args.output_dir)
    summary = engine.compute_summary(dr, args.business_id)

    _print_period(dr, args.business_id)
    out.emit(
        "Payroll & agency summary",
        "summary",
        summary_to_dataframe(summary, config.minor_unit_digits, config.currency),
    )
    _report_partial(summary.is_partial, summary.failed_sources)
    if summary.warnings:
        out.emit("Warnings", "warnings", warnings_to_dataframe(summary.warnings))


def _handle_import(args, config: AppConfig, engine: StatementEngine) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        raise SystemExit(f"CSV file not found: {csv_path}")

    print(f"Importing {args.source} records from {csv_path} into the database...")
    try:
        df = read_source_records(
            csv_path, args.source, config.minor_unit_digits, engine.taxonomy
        )
    except (ValueError, UnknownCategory) as exc:
        raise SystemExit(f"Import failed: {exc}") from exc

    count = import_records(df, config.database, args.source)
    print(f"Imported {count} {args.source} record(s).")


def _handle_taxonomy(engine: StatementEngine) -> None:
    print(f"Taxonomy version: {engine.taxonomy.version} ({len(engine.taxonomy)} categories)")
    print()
    print(engine.taxonomy.to_dataframe().to_string(index=False))


def _check_category(engine: StatementEngine, category: str, statement_type: str) -> None:
    try:
        engine.taxonomy.lookup(category, statement_type)
    except UnknownCategory as exc:
        raise SystemExit(str(exc)) from exc


def _handle_entries(args, config: AppConfig, engine: StatementEngine, dr: DateRange) -> None:
    """Dispatch function for the 'entries' subcommands."""
    subcmd = getattr(args, "entries_command", None)
    digits = config.minor_unit_digits

    if subcmd == "list":
        _print_period(dr, None)
        df = list_financial_entries(config.database, dr.start, dr.end, args.statement_type)
        if df.empty:
            print("No entries found for the given criteria.")
            return
        df["amount"] = [format_amount(int(v), digits) for v in df["amount_minor"]]
        print()
        print(df.drop(columns=["amount_minor"]).to_string(index=False))
        print()
        print(
            f"Total entries: {len(df)} | Total amount: "
            f"{format_amount(int(df['amount_minor'].sum()), digits, config.currency)}"
        )

    elif subcmd == "add":
        _check_category(engine, args.category, args.statement_type)
        entry = insert_financial_entry(
            config.database,
            NewFinancialEntry(
                statement_type=args.statement_type,
                category=args.category,
                sub_category=args.sub_category,
                amount_minor=_parse_amount(args.amount, digits),
                entry_date=_parse_date(args.entry_date),
                description=args.description,
            ),
        )
        print(f"Created entry #{entry.id}.")

    elif subcmd == "update":
        current = get_financial_entry(config.database, args.entry_id)
        if current is None:
            raise SystemExit(f"No entry with id {args.entry_id}.")
        if args.category is not None or args.statement_type is not None:
            _check_category(
                engine,
                args.category or current.category,
                args.statement_type or current.statement_type,
            )
        update = FinancialEntryUpdate(
            statement_type=args.statement_type,
            category=args.category,
            sub_category=args.sub_category,
            amount_minor=None if args.amount is None else _parse_amount(args.amount, digits),
            entry_date=None if args.entry_date is None else _parse_date(args.entry_date),
            description=args.description,
        )
        entry = update_financial_entry(config.database, args.entry_id, update)
        print(f"Updated entry #{entry.id}.")

    elif subcmd == "delete":
        if delete_financial_entry(config.database, args.entry_id):
            print(f"Deleted entry #{args.entry_id}.")
        else:
            print(f"No entry with id {args.entry_id}.")

    else:
        print(
            "No entries subcommand specified. "
            "Available subcommands are: 'list', 'add', 'update', 'delete'."
        )


def _handle_investments(args, config: AppConfig, dr: DateRange) -> None:
    """Dispatch function for the 'investments' subcommands."""
    subcmd = getattr(args, "investments_command", None)
    digits = config.minor_unit_digits

    if subcmd == "list":
        _print_period(dr, args.business_id)
        df = list_investments(config.database, dr.start, dr.end, args.business_id)
        if df.empty:
            print("No investments found for the given criteria.")
            return
        df["amount"] = [format_amount(int(v), digits) for v in df["amount_minor"]]
        print()
        print(df.drop(columns=["amount_minor"]).to_string(index=False))

    elif subcmd == "add":
        new_id = insert_investment(
            config.database,
            NewInvestment(
                amount_minor=_parse_amount(args.amount, digits),
                investment_date=_parse_date(args.investment_date),
                business_id=args.investment_business_id or args.business_id,
                type=args.investment_type,
                category=args.category,
                description=args.description,
            ),
        )
        print(f"Created investment #{new_id}.")

    elif subcmd == "delete":
        if delete_investment(config.database, args.investment_id):
            print(f"Deleted investment #{args.investment_id}.")
        else:
            print(f"No investment with id {args.investment_id}.")

    else:
        print(
            "No investments subcommand specified. "
            "Available subcommands are: 'list', 'add', 'delete'."
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FinStatements CLI.

    Parses arguments, loads the configuration, configures logging,
    initializes the database, resolves the reporting period and dispatches
    to the requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"finstatements version {__version__}")
        return

    if args.command is None:
        parser.print_help()
        return

    # 1) Configuration and logging
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 2) Database
    init_database(config.database)
    if args.command in {"statement", "summary"} and not has_records(config.database):
        print("Warning: database is empty, use 'import' to load source records.")

    try:
        engine = StatementEngine.from_config(config)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(f"Invalid taxonomy file: {exc}")

    if args.command == "import":
        _handle_import(args, config, engine)
        return
    if args.command == "taxonomy":
        _handle_taxonomy(engine)
        return

    # 3) Reporting period
    try:
        dr = determine_range_from_args(args, config.fiscal_year)
    except InvalidDateRange as exc:
        parser.error(str(exc))
    except ValueError as exc:
        parser.error(f"Invalid period: {exc}")

    logger.debug("Command %s over %s", args.command, dr)

    if args.command == "statement":
        _handle_statement(args, config, engine, dr)
    elif args.command == "summary":
        _handle_summary(args, config, engine, dr)
    elif args.command == "entries":
        _handle_entries(args, config, engine, dr)
    elif args.command == "investments":
        _handle_investments(args, config, dr)


if __name__ == "__main__":
    main()

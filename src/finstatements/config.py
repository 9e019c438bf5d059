# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FinStatements.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating it,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional

from .db import DatabaseConfig
from .money import MAX_MINOR_UNIT_DIGITS

DEFAULT_CONFIG_FILE = "finstatements_config.toml"
DISPLAY_MODES = ("table", "csv", "both")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class FiscalYear:
    """Represents a fiscal year with a start and end date."""

    start_date: date
    end_date: date


@dataclass(frozen=True)
class EngineOptions:
    """
    Runtime options of the statement engine.

    Attributes
    ----------
    max_workers:
        Maximum number of source fetches running concurrently.
    source_timeout:
        Seconds to wait for all sources of one request. Sources still
        running after that are reported as unavailable.
    """

    max_workers: int = 5
    source_timeout: float = 30.0


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for FinStatements.

    This aggregates:
    - the fiscal year definition,
    - the presentation currency and its number of minor-unit digits,
    - an optional custom taxonomy file,
    - the database configuration (where source records are stored),
    - engine options (concurrency, timeouts),
    - display and logging options.
    """

    fiscal_year: FiscalYear
    currency: str
    minor_unit_digits: int
    taxonomy_file: Optional[Path]
    database: DatabaseConfig
    engine: EngineOptions
    display_mode: str
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a table of the config, or an empty mapping if absent/invalid."""
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _parse_fiscal_year(config_data: Mapping[str, Any]) -> FiscalYear:
    """
    Extract and validate the fiscal year from raw TOML configuration data.

    Raises:
        ValueError: if the fiscal year section or dates are missing/invalid.
    """
    fiscal_data = config_data.get("fiscal_year")
    if not isinstance(fiscal_data, Mapping):
        raise ValueError("Config file is missing [fiscal_year] table.")

    try:
        start_raw = fiscal_data["start_date"]
        end_raw = fiscal_data["end_date"]
    except KeyError as exc:
        raise ValueError(
            "Config file is missing [fiscal_year].start_date or end_date."
        ) from exc

    try:
        start = date.fromisoformat(str(start_raw))
        end = date.fromisoformat(str(end_raw))
    except ValueError as exc:
        raise ValueError(
            "Invalid fiscal year dates, expected YYYY-MM-DD format."
        ) from exc

    if end < start:
        raise ValueError("Fiscal year end_date cannot be before start_date.")

    return FiscalYear(start_date=start, end_date=end)


def _parse_engine_options(section: Mapping[str, Any]) -> EngineOptions:
    try:
        max_workers = int(section.get("max_workers", 5))
        source_timeout = float(section.get("source_timeout", 30.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid [engine] options: max_workers must be an integer and "
            "source_timeout a number of seconds."
        ) from exc

    if max_workers < 1:
        raise ValueError("[engine].max_workers must be at least 1.")
    if source_timeout <= 0:
        raise ValueError("[engine].source_timeout must be positive.")

    return EngineOptions(max_workers=max_workers, source_timeout=source_timeout)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the FinStatements application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [fiscal_year]
        start_date / end_date of the current fiscal year (required).

    [accounting]
        currency (default "JPY"), minor_unit_digits (default 0) and an
        optional taxonomy_file (CSV) replacing the built-in taxonomy.

    [database]
        engine (only "sqlite") and path of the SQLite file.

    [engine]
        max_workers and source_timeout for concurrent source fetches.

    [display]
        mode: "table", "csv" or "both".

    [logging]
        level: standard logging level name.

    All file paths are resolved relative to the directory of the TOML file.

    Raises:
        FileNotFoundError: if the configuration file is missing.
        ValueError: if a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Fiscal year
    fiscal_year = _parse_fiscal_year(raw)

    # 2) Accounting section
    accounting = _section(raw, "accounting")
    currency = str(accounting.get("currency") or "JPY")
    try:
        minor_unit_digits = int(accounting.get("minor_unit_digits", 0))
    except (TypeError, ValueError) as exc:
        raise ValueError("[accounting].minor_unit_digits must be an integer.") from exc
    if not 0 <= minor_unit_digits <= MAX_MINOR_UNIT_DIGITS:
        raise ValueError(
            f"[accounting].minor_unit_digits must be between 0 and "
            f"{MAX_MINOR_UNIT_DIGITS}."
        )

    taxonomy_raw = accounting.get("taxonomy_file") or None
    taxonomy_file = (base_dir / str(taxonomy_raw)).resolve() if taxonomy_raw else None

    # 3) Database section
    database = _section(raw, "database")
    db_engine = str(database.get("engine") or "sqlite")
    db_path_raw = database.get("path") or "data/db/finstatements.sqlite"
    database_config = DatabaseConfig(
        engine=db_engine, path=(base_dir / str(db_path_raw)).resolve()
    )

    # 4) Engine options
    engine = _parse_engine_options(_section(raw, "engine"))

    # 5) Display options
    display_mode = str(_section(raw, "display").get("mode", "table"))
    if display_mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid [display].mode {display_mode!r}. "
            f"Expected one of: {', '.join(DISPLAY_MODES)}."
        )

    # 6) Logging
    log_level = str(_section(raw, "logging").get("level", "WARNING")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid [logging].level {log_level!r}.")

    return AppConfig(
        fiscal_year=fiscal_year,
        currency=currency,
        minor_unit_digits=minor_unit_digits,
        taxonomy_file=taxonomy_file,
        database=database_config,
        engine=engine,
        display_mode=display_mode,
        log_level=log_level,
    )

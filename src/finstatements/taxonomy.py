# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category taxonomy for FinStatements.

The taxonomy is the single reference table that maps a category code to:

- the statement it belongs to (``pl``, ``bs`` or ``cf``),
- its group inside that statement (``revenue``, ``sg_and_a``,
  ``current_assets``, ``investing``, ...),
- a human-readable label,
- a direction (``inflow`` or ``outflow``) which drives netting inside
  groups that mix both (non-operating and extraordinary PL items, every
  cash-flow group).

Every "is this category part of group X" decision made by adapters,
statement builders or views goes through a ``Taxonomy`` instance. No other
module declares lists of category codes.

A built-in taxonomy (``TAXONOMY_VERSION``) is provided by
``default_taxonomy()``. A custom taxonomy can be loaded from CSV with
``Taxonomy.from_csv()``; it is validated with the same rules.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional, Union

import pandas as pd

from .errors import UnknownCategory

StatementType = Literal["pl", "bs", "cf"]
Direction = Literal["inflow", "outflow"]

TAXONOMY_VERSION = "2024.1"

STATEMENT_TYPES: tuple[str, ...] = ("pl", "bs", "cf")

# Allowed groups per statement type, in display order.
STATEMENT_GROUPS: dict[str, tuple[str, ...]] = {
    "pl": ("revenue", "cost_of_sales", "sg_and_a", "non_operating", "extraordinary"),
    "bs": (
        "current_assets",
        "fixed_assets",
        "current_liabilities",
        "long_term_liabilities",
        "equity",
    ),
    "cf": ("operating", "investing", "financing"),
}

DIRECTIONS: tuple[str, ...] = ("inflow", "outflow")

# Category codes the engine itself refers to. Adapters emit these and the
# balance sheet builder injects net profit into RETAINED_EARNINGS.
SALES_REVENUE = "sales_revenue"
AGENCY_REVENUE = "agency_revenue"
GENERAL_EXPENSE = "general_expense"
PERSONNEL_EXPENSE = "personnel_expense"
AGENCY_COMMISSION = "agency_commission"
RETAINED_EARNINGS = "retained_earnings"
CAPITAL_INVESTMENT = "capital_investment"


@dataclass(frozen=True)
class Category:
    """Immutable taxonomy row."""

    code: str
    statement_type: str
    group: str
    label: str
    direction: str = "inflow"


# (code, statement_type, group, label, direction)
_BUILTIN_ROWS: tuple[tuple[str, str, str, str, str], ...] = (
    # --- Profit & Loss ------------------------------------------------------
    (SALES_REVENUE, "pl", "revenue", "Sales revenue", "inflow"),
    (AGENCY_REVENUE, "pl", "revenue", "Agency sales revenue", "inflow"),
    ("service_revenue", "pl", "revenue", "Service revenue", "inflow"),
    ("other_revenue", "pl", "revenue", "Other revenue", "inflow"),
    ("cost_of_goods_sold", "pl", "cost_of_sales", "Cost of goods sold", "outflow"),
    ("purchases", "pl", "cost_of_sales", "Purchases", "outflow"),
    ("outsourcing_cost", "pl", "cost_of_sales", "Outsourcing cost", "outflow"),
    (PERSONNEL_EXPENSE, "pl", "sg_and_a", "Personnel expense", "outflow"),
    (AGENCY_COMMISSION, "pl", "sg_and_a", "Agency commission", "outflow"),
    (GENERAL_EXPENSE, "pl", "sg_and_a", "General expense", "outflow"),
    ("rent", "pl", "sg_and_a", "Rent", "outflow"),
    ("utilities", "pl", "sg_and_a", "Utilities", "outflow"),
    ("advertising", "pl", "sg_and_a", "Advertising", "outflow"),
    ("travel", "pl", "sg_and_a", "Travel and transportation", "outflow"),
    ("communication", "pl", "sg_and_a", "Communication", "outflow"),
    ("supplies", "pl", "sg_and_a", "Supplies", "outflow"),
    ("depreciation_expense", "pl", "sg_and_a", "Depreciation expense", "outflow"),
    ("other_sga", "pl", "sg_and_a", "Other SG&A", "outflow"),
    ("interest_income", "pl", "non_operating", "Interest income", "inflow"),
    ("dividend_income", "pl", "non_operating", "Dividend income", "inflow"),
    ("interest_expense", "pl", "non_operating", "Interest expense", "outflow"),
    (
        "other_non_operating",
        "pl",
        "non_operating",
        "Other non-operating expense",
        "outflow",
    ),
    ("extraordinary_gain", "pl", "extraordinary", "Extraordinary gain", "inflow"),
    ("extraordinary_loss", "pl", "extraordinary", "Extraordinary loss", "outflow"),
    # --- Balance Sheet ------------------------------------------------------
    ("cash", "bs", "current_assets", "Cash and deposits", "inflow"),
    ("accounts_receivable", "bs", "current_assets", "Accounts receivable", "inflow"),
    ("inventory", "bs", "current_assets", "Inventory", "inflow"),
    ("prepaid_expenses", "bs", "current_assets", "Prepaid expenses", "inflow"),
    ("other_current_assets", "bs", "current_assets", "Other current assets", "inflow"),
    ("tangible_fixed_assets", "bs", "fixed_assets", "Tangible fixed assets", "inflow"),
    ("intangible_assets", "bs", "fixed_assets", "Intangible fixed assets", "inflow"),
    ("investment_securities", "bs", "fixed_assets", "Investment securities", "inflow"),
    ("other_fixed_assets", "bs", "fixed_assets", "Other fixed assets", "inflow"),
    ("accounts_payable", "bs", "current_liabilities", "Accounts payable", "inflow"),
    ("short_term_loans", "bs", "current_liabilities", "Short-term loans", "inflow"),
    ("accrued_expenses", "bs", "current_liabilities", "Accrued expenses", "inflow"),
    (
        "other_current_liabilities",
        "bs",
        "current_liabilities",
        "Other current liabilities",
        "inflow",
    ),
    ("long_term_loans", "bs", "long_term_liabilities", "Long-term loans", "inflow"),
    ("bonds_payable", "bs", "long_term_liabilities", "Bonds payable", "inflow"),
    (
        "other_long_term_liabilities",
        "bs",
        "long_term_liabilities",
        "Other long-term liabilities",
        "inflow",
    ),
    ("capital_stock", "bs", "equity", "Capital stock", "inflow"),
    ("capital_surplus", "bs", "equity", "Capital surplus", "inflow"),
    (RETAINED_EARNINGS, "bs", "equity", "Retained earnings", "inflow"),
    ("other_equity", "bs", "equity", "Other equity", "inflow"),
    # --- Cash Flow ----------------------------------------------------------
    ("depreciation", "cf", "operating", "Depreciation", "inflow"),
    ("ar_decrease", "cf", "operating", "Decrease in receivables", "inflow"),
    ("inventory_decrease", "cf", "operating", "Decrease in inventory", "inflow"),
    ("ap_increase", "cf", "operating", "Increase in payables", "inflow"),
    ("ar_increase", "cf", "operating", "Increase in receivables", "outflow"),
    ("inventory_increase", "cf", "operating", "Increase in inventory", "outflow"),
    ("ap_decrease", "cf", "operating", "Decrease in payables", "outflow"),
    ("other_operating", "cf", "operating", "Other operating outflow", "outflow"),
    ("sale_fixed_assets", "cf", "investing", "Sale of fixed assets", "inflow"),
    ("sale_securities", "cf", "investing", "Sale of securities", "inflow"),
    ("loans_collected", "cf", "investing", "Collection of loans", "inflow"),
    ("purchase_fixed_assets", "cf", "investing", "Purchase of fixed assets", "outflow"),
    ("purchase_securities", "cf", "investing", "Purchase of securities", "outflow"),
    ("loans_made", "cf", "investing", "Loans made", "outflow"),
    ("other_investing", "cf", "investing", "Other investing outflow", "outflow"),
    (CAPITAL_INVESTMENT, "cf", "investing", "Capital investments", "outflow"),
    ("borrowings", "cf", "financing", "Proceeds from borrowings", "inflow"),
    ("bond_issuance", "cf", "financing", "Proceeds from bonds", "inflow"),
    ("capital_injection", "cf", "financing", "Capital injection", "inflow"),
    ("loan_repayment", "cf", "financing", "Repayment of borrowings", "outflow"),
    ("bond_redemption", "cf", "financing", "Redemption of bonds", "outflow"),
    ("dividends_paid", "cf", "financing", "Dividends paid", "outflow"),
    ("other_financing", "cf", "financing", "Other financing outflow", "outflow"),
)


def _validate_category(cat: Category) -> None:
    """Raise ValueError if a row is inconsistent."""
    if not cat.code:
        raise ValueError("Category code cannot be empty.")
    if cat.statement_type not in STATEMENT_GROUPS:
        raise ValueError(
            f"Invalid statement type {cat.statement_type!r} for category "
            f"{cat.code!r}. Expected one of: {', '.join(STATEMENT_TYPES)}."
        )
    if cat.group not in STATEMENT_GROUPS[cat.statement_type]:
        raise ValueError(
            f"Invalid group {cat.group!r} for category {cat.code!r} "
            f"(statement type {cat.statement_type!r})."
        )
    if cat.direction not in DIRECTIONS:
        raise ValueError(
            f"Invalid direction {cat.direction!r} for category {cat.code!r}. "
            "Expected 'inflow' or 'outflow'."
        )


class Taxonomy:
    """Closed, immutable set of categories.

    Lookups are O(1) by code. Group queries return codes in taxonomy
    order, which keeps every downstream output deterministic.
    """

    def __init__(self, categories: Iterable[Category], version: str = TAXONOMY_VERSION):
        by_code: dict[str, Category] = {}
        for cat in categories:
            _validate_category(cat)
            if cat.code in by_code:
                raise ValueError(f"Duplicate category code {cat.code!r} in taxonomy.")
            by_code[cat.code] = cat
        self.version = version
        self._by_code = by_code

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __iter__(self):
        return iter(self._by_code.values())

    def lookup(self, code: str, statement_type: Optional[str] = None) -> Category:
        """Return the category for ``code``.

        When ``statement_type`` is given, the category must also belong to
        that statement.

        Raises:
            UnknownCategory: if the code is absent, or declared under a
                different statement type.
        """
        cat = self._by_code.get(code)
        if cat is None:
            raise UnknownCategory(code, statement_type)
        if statement_type is not None and cat.statement_type != statement_type:
            raise UnknownCategory(code, statement_type)
        return cat

    def categories(
        self,
        statement_type: Optional[str] = None,
        group: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> list[Category]:
        """Return categories matching every given filter, in taxonomy order."""
        return [
            c
            for c in self._by_code.values()
            if (statement_type is None or c.statement_type == statement_type)
            and (group is None or c.group == group)
            and (direction is None or c.direction == direction)
        ]

    def codes_in_group(
        self, statement_type: str, group: str, direction: Optional[str] = None
    ) -> frozenset[str]:
        """Return the set of codes of a group, optionally restricted by direction."""
        return frozenset(
            c.code for c in self.categories(statement_type, group, direction)
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Return the taxonomy as a DataFrame (one row per category)."""
        return pd.DataFrame(
            [
                {
                    "code": c.code,
                    "statement_type": c.statement_type,
                    "group": c.group,
                    "label": c.label,
                    "direction": c.direction,
                }
                for c in self._by_code.values()
            ],
            columns=["code", "statement_type", "group", "label", "direction"],
        )

    @staticmethod
    def from_dataframe(df: pd.DataFrame, version: str = "custom") -> "Taxonomy":
        """Build a Taxonomy from a DataFrame.

        Required columns: code, statement_type, group, label, direction.
        Column names are matched case-insensitively and trimmed.
        """
        col_map = {str(c).strip().lower(): c for c in df.columns}
        required = ["code", "statement_type", "group", "label", "direction"]
        missing = [c for c in required if c not in col_map]
        if missing:
            raise ValueError(
                "Taxonomy file is missing required column(s): " + ", ".join(missing)
            )

        rows: list[Category] = []
        for _, r in df.iterrows():
            rows.append(
                Category(
                    code=str(r[col_map["code"]]).strip(),
                    statement_type=str(r[col_map["statement_type"]]).strip().lower(),
                    group=str(r[col_map["group"]]).strip().lower(),
                    label=str(r[col_map["label"]]).strip(),
                    direction=str(r[col_map["direction"]]).strip().lower(),
                )
            )
        return Taxonomy(rows, version=version)

    @staticmethod
    def from_csv(
        path: Union[str, Path], version: Optional[str] = None
    ) -> "Taxonomy":
        """Load a taxonomy from a CSV file.

        The version defaults to the file stem, so that results computed with
        a custom table can be told apart from the built-in one.
        """
        df = pd.read_csv(path, dtype=str).fillna("")
        if version is None:
            version = Path(path).stem
        return Taxonomy.from_dataframe(df, version=version)


@lru_cache(maxsize=1)
def default_taxonomy() -> Taxonomy:
    """Return the built-in taxonomy (shared, immutable)."""
    return Taxonomy(
        (Category(*row) for row in _BUILTIN_ROWS), version=TAXONOMY_VERSION
    )

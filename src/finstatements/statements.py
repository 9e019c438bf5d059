# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statement builders: category totals → PL / BS / CF snapshots.

The three builders are pure functions of a list of ``CategoryTotal`` and a
``Taxonomy``. Categories absent from the totals count as zero; totals of
other statement types are ignored.

Rollup formulas
---------------
Profit & Loss
    revenue           = Σ revenue group
    cost_of_sales     = Σ cost_of_sales group
    gross_profit      = revenue − cost_of_sales
    sga               = Σ sg_and_a group
    operating_profit  = gross_profit − sga
    non_operating_net = Σ non_operating inflows − Σ non_operating outflows
    ordinary_profit   = operating_profit + non_operating_net
    extraordinary_net = Σ extraordinary inflows − Σ extraordinary outflows
    net_profit        = ordinary_profit + extraordinary_net

Balance Sheet
    Straight sums of the five groups. Equity includes the period's net
    profit, added to retained earnings.

Cash Flow
    operating_cf = net_profit + Σ operating inflows − Σ operating outflows
    investing_cf = Σ investing inflows − Σ investing outflows
    financing_cf = Σ financing inflows − Σ financing outflows
    net_change_in_cash = operating_cf + investing_cf + financing_cf

Inflow/outflow membership is read from the taxonomy's ``direction``.
Derived fields are computed in the ``from_components`` constructors, so
the identities above hold for every snapshot by construction.

All values are integers in minor currency units.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import ClassVar, Optional, Union

from . import taxonomy as tx
from .aggregator import CategoryTotal
from .taxonomy import Taxonomy, default_taxonomy

# (field, label, level, kind). level 0 = result, 1 = component, 2 = detail.
LineSpec = tuple[str, str, int, str]


@dataclass(frozen=True)
class PLSnapshot:
    revenue: int = 0
    cost_of_sales: int = 0
    gross_profit: int = 0
    sga: int = 0
    operating_profit: int = 0
    non_operating_net: int = 0
    ordinary_profit: int = 0
    extraordinary_net: int = 0
    net_profit: int = 0

    statement_type: ClassVar[str] = "pl"
    LINES: ClassVar[tuple[LineSpec, ...]] = (
        ("revenue", "Revenue", 1, "line"),
        ("cost_of_sales", "Cost of sales", 1, "line"),
        ("gross_profit", "Gross profit", 0, "total"),
        ("sga", "Selling, general & administrative expenses", 1, "line"),
        ("operating_profit", "Operating profit", 0, "total"),
        ("non_operating_net", "Non-operating income (net)", 1, "line"),
        ("ordinary_profit", "Ordinary profit", 0, "total"),
        ("extraordinary_net", "Extraordinary items (net)", 1, "line"),
        ("net_profit", "Net profit", 0, "total"),
    )

    @classmethod
    def from_components(
        cls,
        revenue: int,
        cost_of_sales: int,
        sga: int,
        non_operating_net: int,
        extraordinary_net: int,
    ) -> "PLSnapshot":
        gross_profit = revenue - cost_of_sales
        operating_profit = gross_profit - sga
        ordinary_profit = operating_profit + non_operating_net
        return cls(
            revenue=revenue,
            cost_of_sales=cost_of_sales,
            gross_profit=gross_profit,
            sga=sga,
            operating_profit=operating_profit,
            non_operating_net=non_operating_net,
            ordinary_profit=ordinary_profit,
            extraordinary_net=extraordinary_net,
            net_profit=ordinary_profit + extraordinary_net,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class BSSnapshot:
    """
    Balance sheet snapshot.

    ``retained_earnings`` is the stored retained-earnings total plus the
    net profit of the PL computed over the same range; it is already part
    of ``equity``.
    """

    current_assets: int = 0
    fixed_assets: int = 0
    total_assets: int = 0
    current_liabilities: int = 0
    long_term_liabilities: int = 0
    total_liabilities: int = 0
    retained_earnings: int = 0
    equity: int = 0
    total_liabilities_and_equity: int = 0

    statement_type: ClassVar[str] = "bs"
    LINES: ClassVar[tuple[LineSpec, ...]] = (
        ("current_assets", "Current assets", 1, "line"),
        ("fixed_assets", "Fixed assets", 1, "line"),
        ("total_assets", "Total assets", 0, "total"),
        ("current_liabilities", "Current liabilities", 1, "line"),
        ("long_term_liabilities", "Long-term liabilities", 1, "line"),
        ("total_liabilities", "Total liabilities", 0, "total"),
        ("retained_earnings", "of which retained earnings", 2, "line"),
        ("equity", "Equity", 1, "line"),
        ("total_liabilities_and_equity", "Total liabilities and equity", 0, "total"),
    )

    @classmethod
    def from_components(
        cls,
        current_assets: int,
        fixed_assets: int,
        current_liabilities: int,
        long_term_liabilities: int,
        equity: int,
        retained_earnings: int = 0,
    ) -> "BSSnapshot":
        total_liabilities = current_liabilities + long_term_liabilities
        return cls(
            current_assets=current_assets,
            fixed_assets=fixed_assets,
            total_assets=current_assets + fixed_assets,
            current_liabilities=current_liabilities,
            long_term_liabilities=long_term_liabilities,
            total_liabilities=total_liabilities,
            retained_earnings=retained_earnings,
            equity=equity,
            total_liabilities_and_equity=total_liabilities + equity,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CFSnapshot:
    operating_cf: int = 0
    investing_cf: int = 0
    financing_cf: int = 0
    net_change_in_cash: int = 0

    statement_type: ClassVar[str] = "cf"
    LINES: ClassVar[tuple[LineSpec, ...]] = (
        ("operating_cf", "Cash flow from operating activities", 1, "line"),
        ("investing_cf", "Cash flow from investing activities", 1, "line"),
        ("financing_cf", "Cash flow from financing activities", 1, "line"),
        ("net_change_in_cash", "Net change in cash", 0, "total"),
    )

    @classmethod
    def from_components(
        cls, operating_cf: int, investing_cf: int, financing_cf: int
    ) -> "CFSnapshot":
        return cls(
            operating_cf=operating_cf,
            investing_cf=investing_cf,
            financing_cf=financing_cf,
            net_change_in_cash=operating_cf + investing_cf + financing_cf,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


Snapshot = Union[PLSnapshot, BSSnapshot, CFSnapshot]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def totals_by_category(
    totals: Iterable[CategoryTotal], statement_type: str
) -> dict[str, int]:
    """Sum the totals of one statement type per category (sub-categories merged)."""
    out: dict[str, int] = {}
    for t in totals:
        if t.statement_type == statement_type:
            out[t.category] = out.get(t.category, 0) + t.total
    return out


def _group_sum(
    amounts: dict[str, int],
    taxonomy: Taxonomy,
    statement_type: str,
    group: str,
    direction: Optional[str] = None,
) -> int:
    codes = taxonomy.codes_in_group(statement_type, group, direction)
    return sum(amount for code, amount in amounts.items() if code in codes)


def _group_net(
    amounts: dict[str, int], taxonomy: Taxonomy, statement_type: str, group: str
) -> int:
    """Inflows minus outflows of a group."""
    return _group_sum(amounts, taxonomy, statement_type, group, "inflow") - _group_sum(
        amounts, taxonomy, statement_type, group, "outflow"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_pl(
    totals: Iterable[CategoryTotal], taxonomy: Optional[Taxonomy] = None
) -> PLSnapshot:
    """Build the Profit & Loss snapshot from category totals."""
    taxonomy = taxonomy or default_taxonomy()
    amounts = totals_by_category(totals, "pl")

    return PLSnapshot.from_components(
        revenue=_group_sum(amounts, taxonomy, "pl", "revenue"),
        cost_of_sales=_group_sum(amounts, taxonomy, "pl", "cost_of_sales"),
        sga=_group_sum(amounts, taxonomy, "pl", "sg_and_a"),
        non_operating_net=_group_net(amounts, taxonomy, "pl", "non_operating"),
        extraordinary_net=_group_net(amounts, taxonomy, "pl", "extraordinary"),
    )


def build_bs(
    totals: Iterable[CategoryTotal],
    net_profit: int,
    taxonomy: Optional[Taxonomy] = None,
) -> BSSnapshot:
    """
    Build the Balance Sheet snapshot from category totals.

    Args:
        totals: Category totals of the request.
        net_profit: Net profit of the PL snapshot for the same range; it
            is added to retained earnings (and therefore to equity).
        taxonomy: Reference taxonomy (built-in one by default).
    """
    taxonomy = taxonomy or default_taxonomy()
    amounts = totals_by_category(totals, "bs")

    retained_earnings = amounts.get(tx.RETAINED_EARNINGS, 0) + net_profit
    equity = _group_sum(amounts, taxonomy, "bs", "equity") + net_profit

    return BSSnapshot.from_components(
        current_assets=_group_sum(amounts, taxonomy, "bs", "current_assets"),
        fixed_assets=_group_sum(amounts, taxonomy, "bs", "fixed_assets"),
        current_liabilities=_group_sum(amounts, taxonomy, "bs", "current_liabilities"),
        long_term_liabilities=_group_sum(
            amounts, taxonomy, "bs", "long_term_liabilities"
        ),
        equity=equity,
        retained_earnings=retained_earnings,
    )


def build_cf(
    totals: Iterable[CategoryTotal],
    net_profit: int,
    taxonomy: Optional[Taxonomy] = None,
) -> CFSnapshot:
    """
    Build the Cash Flow snapshot from category totals.

    Investment records (``capital_investment``) and manual investing
    entries such as ``purchase_fixed_assets`` are distinct categories of
    the investing group; both are subtracted.
    """
    taxonomy = taxonomy or default_taxonomy()
    amounts = totals_by_category(totals, "cf")

    return CFSnapshot.from_components(
        operating_cf=net_profit + _group_net(amounts, taxonomy, "cf", "operating"),
        investing_cf=_group_net(amounts, taxonomy, "cf", "investing"),
        financing_cf=_group_net(amounts, taxonomy, "cf", "financing"),
    )

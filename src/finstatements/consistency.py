# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cross-statement consistency checks.

The checks only report. The underlying ledger does not enforce double
entry, so an unbalanced balance sheet is a data observation and is
returned as a ``balance_mismatch`` warning with its delta. A broken cash
identity can only come from a bug; it is reported the same way, as
``cash_identity_mismatch``.
"""

import logging
from typing import Optional

from .errors import EngineWarning
from .statements import BSSnapshot, CFSnapshot

logger = logging.getLogger(__name__)


def check_balance(bs: BSSnapshot) -> list[EngineWarning]:
    """Report ``total_assets - total_liabilities_and_equity`` when non-zero."""
    delta = bs.total_assets - bs.total_liabilities_and_equity
    if delta == 0:
        return []
    return [
        EngineWarning(
            kind="balance_mismatch",
            message=(
                f"Total assets ({bs.total_assets}) differ from total liabilities "
                f"and equity ({bs.total_liabilities_and_equity}) by {delta}."
            ),
            delta=delta,
        )
    ]


def check_cash_identity(cf: CFSnapshot) -> list[EngineWarning]:
    """Report a cash-flow snapshot whose net change is not the sum of its parts."""
    expected = cf.operating_cf + cf.investing_cf + cf.financing_cf
    delta = cf.net_change_in_cash - expected
    if delta == 0:
        return []
    logger.error(
        "Cash identity broken: net change %d, components sum %d",
        cf.net_change_in_cash,
        expected,
    )
    return [
        EngineWarning(
            kind="cash_identity_mismatch",
            message=(
                f"Net change in cash ({cf.net_change_in_cash}) differs from the sum "
                f"of operating, investing and financing cash flows ({expected})."
            ),
            delta=delta,
        )
    ]


def check_consistency(
    bs: Optional[BSSnapshot] = None, cf: Optional[CFSnapshot] = None
) -> list[EngineWarning]:
    """Run every check applicable to the given snapshots, balance first."""
    warnings: list[EngineWarning] = []
    if bs is not None:
        warnings.extend(check_balance(bs))
    if cf is not None:
        warnings.extend(check_cash_identity(cf))
    return warnings

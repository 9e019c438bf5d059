# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Error taxonomy and warning records for FinStatements.

Two kinds of problems exist in the statement pipeline:

- Fatal caller errors (an inverted date range, a broken configuration),
  which are raised as exceptions before any work is done.
- Data deficiencies (a source that could not be reached, an entry using
  an unknown category, a balance sheet that does not balance), which are
  recorded as ``EngineWarning`` instances and attached to the result.
  The computation always continues in that case.
"""

from dataclasses import dataclass
from typing import Literal, Optional

WarningKind = Literal[
    "unknown_category",
    "invalid_record",
    "source_unavailable",
    "balance_mismatch",
    "cash_identity_mismatch",
]


class FinStatementsError(Exception):
    """Base class for all errors raised by the statement engine."""


class UnknownCategory(FinStatementsError, LookupError):
    """A category code is absent from the taxonomy (or from the statement)."""

    def __init__(self, code: str, statement_type: Optional[str] = None):
        self.code = code
        self.statement_type = statement_type
        if statement_type is None:
            msg = f"Unknown category code {code!r}."
        else:
            msg = f"Unknown category code {code!r} for statement type {statement_type!r}."
        super().__init__(msg)


class InvalidDateRange(FinStatementsError, ValueError):
    """The end of a date range lies before its start."""


class SourceUnavailable(FinStatementsError, RuntimeError):
    """A source adapter could not fetch its records."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        msg = f"Source {source!r} is unavailable"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


@dataclass(frozen=True)
class EngineWarning:
    """
    Non-fatal deficiency attached to a computed result.

    Attributes
    ----------
    kind:
        Machine-readable warning kind (see ``WarningKind``).
    message:
        Human-readable explanation.
    source:
        Name of the source adapter involved, if any.
    category:
        Category code involved, if any.
    delta:
        Signed difference in minor units for consistency warnings.
    """

    kind: WarningKind
    message: str
    source: Optional[str] = None
    category: Optional[str] = None
    delta: Optional[int] = None

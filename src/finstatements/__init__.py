# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinStatements
-------------

Financial statement engine for back-office applications. It produces
Profit & Loss, Balance Sheet and Cash Flow statements from the records of
independent subsystems:

- business unit sales and expenses,
- payroll (salary payments),
- agency sales and their commissions,
- free-form manual ledger entries,
- capital investments.

Main capabilities:
- one closed, versioned category taxonomy driving every grouping decision,
- per-source adapters normalizing records into integer minor-unit entries,
- concurrent, fail-soft collection (a failed source yields a partial,
  flagged result instead of an error),
- PL / BS / CF rollups whose identities hold by construction,
- consistency warnings (balance sheet delta, cash identity),
- SQLite storage, CSV import and a command-line interface.

Usage:
    finstatements --help
    python -m finstatements.cli --help
"""

__all__ = ["engine", "taxonomy", "statements", "views", "io"]

__version__ = "0.1.0"

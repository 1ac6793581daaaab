"""
Financial Reporting Module (``books_modules.reporting``).

Responsibility
--------------
Read-only module that turns the ledger into hierarchical reports: profit
and loss, balance sheet and trial balance, over rolling until-date
periods or fiscal years.

Architecture position
---------------------
**Modules layer** -- reads through kernel selectors; all statement logic
is implemented as pure functions.

Invariants enforced
-------------------
* No ledger entries are created by this module (read-only guarantee).
* Group values are roll-ups of their descendants; totals are sums of true
  leaves.
* Accounts with no activity in the report window are pruned.

Failure modes
-------------
* A malformed chart of accounts (missing parent, cycle) fails the report.
* Out-of-window entries are excluded silently.
"""

from books_modules.reporting.account_tree import (
    AccountForest,
    AccountNode,
    AccountTree,
    aggregate,
    build_forest,
    build_tree,
)
from books_modules.reporting.config import (
    DateRangeMode,
    Periodicity,
    ReportingConfig,
)
from books_modules.reporting.date_ranges import (
    DateRange,
    build_date_ranges,
    fiscal_year_ranges,
    until_date_ranges,
)
from books_modules.reporting.formatting import format_money
from books_modules.reporting.models import (
    CellColor,
    Report,
    ReportCell,
    ReportColumn,
    ReportMetadata,
    ReportRow,
    ReportType,
    RowKind,
)
from books_modules.reporting.service import ReportingService
from books_modules.reporting.statements import (
    balance_sheet,
    profit_and_loss,
    render_to_dict,
    trial_balance,
)

__all__ = [
    # Service
    "ReportingService",
    # Config
    "ReportingConfig",
    "Periodicity",
    "DateRangeMode",
    # Date ranges
    "DateRange",
    "build_date_ranges",
    "until_date_ranges",
    "fiscal_year_ranges",
    # Account tree
    "AccountForest",
    "AccountNode",
    "AccountTree",
    "build_forest",
    "build_tree",
    "aggregate",
    # Statements
    "profit_and_loss",
    "balance_sheet",
    "trial_balance",
    "render_to_dict",
    "format_money",
    # Models
    "ReportType",
    "RowKind",
    "CellColor",
    "ReportMetadata",
    "ReportColumn",
    "ReportCell",
    "ReportRow",
    "Report",
]

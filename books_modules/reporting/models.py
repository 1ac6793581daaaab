"""
Report Domain Models (``books_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for report output: metadata, columns,
rows and cells.  A row's first cell is the name cell; the rest line up
with the report's value columns.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Monetary values are ``Decimal``; ``text`` holds the formatted display.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from books_modules.reporting.date_ranges import DateRange


class ReportType(str, Enum):
    """Types of financial reports."""

    PROFIT_AND_LOSS = "profit_and_loss"
    BALANCE_SHEET = "balance_sheet"
    TRIAL_BALANCE = "trial_balance"


class RowKind(str, Enum):
    ACCOUNT = "account"
    TOTAL = "total"
    EMPTY = "empty"


class CellColor(str, Enum):
    GREEN = "green"
    RED = "red"


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every report."""

    report_type: ReportType
    entity_name: str
    currency: str
    generated_at: str  # ISO format timestamp from injected clock
    from_date: date  # exclusive
    to_date: date


@dataclass(frozen=True)
class ReportColumn:
    key: str
    label: str
    date_range: DateRange | None = None


@dataclass(frozen=True)
class ReportCell:
    """One rendered cell.  ``value`` is None for text and blank cells."""

    text: str = ""
    value: Decimal | None = None
    bold: bool = False
    italic: bool = False
    indent: int = 0
    color: CellColor | None = None


@dataclass(frozen=True)
class ReportRow:
    kind: RowKind
    cells: tuple[ReportCell, ...]
    account: str | None = None
    level: int = 0
    is_group: bool = False

    @property
    def label(self) -> str:
        return self.cells[0].text if self.cells else ""

    @property
    def values(self) -> tuple[Decimal | None, ...]:
        return tuple(cell.value for cell in self.cells[1:])


@dataclass(frozen=True)
class Report:
    """
    A complete report.

    ``columns`` starts with the name column.  ``is_balanced`` is set only
    by reports that can check it (trial balance).
    """

    metadata: ReportMetadata
    columns: tuple[ReportColumn, ...]
    rows: tuple[ReportRow, ...]
    is_balanced: bool | None = None

    def row(self, label: str) -> ReportRow | None:
        """First row whose name cell reads ``label``."""
        for row in self.rows:
            if row.label == label:
                return row
        return None

    @property
    def account_rows(self) -> tuple[ReportRow, ...]:
        return tuple(row for row in self.rows if row.kind == RowKind.ACCOUNT)

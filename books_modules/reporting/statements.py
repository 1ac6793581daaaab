"""
Pure financial statement transformation functions.

These functions turn the chart of accounts and ledger entry records into
report rows.  ZERO I/O. ZERO side effects.

- Profit and loss: income and expense trees per date range, their leaf
  totals, and the profit line.
- Balance sheet: cumulative balances (everything up to each range end)
  for asset, liability and equity trees.
- Trial balance: one window with opening, period and closing debit/credit
  columns and a balance check.

Functions in this module follow the books_kernel/domain/ purity convention:
- No database access
- No clock access
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Hashable, Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from uuid import UUID

from books_kernel.models.account import RootType
from books_kernel.selectors.ledger_selector import LedgerEntryRecord
from books_modules.reporting.account_tree import (
    AccountForest,
    AccountTree,
    ValueMap,
    aggregate,
    build_tree,
    group_by_account,
    group_by_date_range,
)
from books_modules.reporting.date_ranges import DateRange
from books_modules.reporting.formatting import format_money
from books_modules.reporting.models import (
    CellColor,
    Report,
    ReportCell,
    ReportColumn,
    ReportMetadata,
    ReportRow,
    RowKind,
)

_ZERO = Decimal("0")

NAME_COLUMN = ReportColumn(key="name", label="Account")

TOTAL_INCOME = "Total Income (Credit)"
TOTAL_EXPENSE = "Total Expense (Debit)"
TOTAL_PROFIT = "Total Profit"

BALANCE_SHEET_SECTIONS: tuple[tuple[RootType, str], ...] = (
    (RootType.ASSET, "Total Asset (Debit)"),
    (RootType.LIABILITY, "Total Liability (Credit)"),
    (RootType.EQUITY, "Total Equity (Credit)"),
)

# Trial balance column keys
OPENING_DEBIT = "opening_debit"
OPENING_CREDIT = "opening_credit"
DEBIT = "debit"
CREDIT = "credit"
CLOSING_DEBIT = "closing_debit"
CLOSING_CREDIT = "closing_credit"

TRIAL_BALANCE_COLUMNS: tuple[tuple[str, str], ...] = (
    (OPENING_DEBIT, "Opening (Dr)"),
    (OPENING_CREDIT, "Opening (Cr)"),
    (DEBIT, "Debit"),
    (CREDIT, "Credit"),
    (CLOSING_DEBIT, "Closing (Dr)"),
    (CLOSING_CREDIT, "Closing (Cr)"),
)
TOTAL_TRIAL_BALANCE = "Total"


# =========================================================================
# Row helpers
# =========================================================================


def range_columns(ranges: Sequence[DateRange]) -> tuple[ReportColumn, ...]:
    return (NAME_COLUMN,) + tuple(
        ReportColumn(key=r.to_date.isoformat(), label=r.label, date_range=r)
        for r in ranges
    )


def value_cell(value: Decimal, currency: str, precision: int, **style) -> ReportCell:
    return ReportCell(text=format_money(value, currency, precision), value=value, **style)


def account_rows(
    tree: AccountTree,
    currency: str,
    precision: int = 2,
    hide_group_balance: bool = False,
) -> list[ReportRow]:
    """
    Rows for every kept node of ``tree``.

    The name cell is bold at level 0, italic for groups and indented by
    level.  With ``hide_group_balance`` group rows carry blank value cells.
    """
    rows = []
    for tree_row in tree.rows():
        node = tree_row.node
        name_cell = ReportCell(
            text=node.name,
            bold=tree_row.level == 0,
            italic=node.is_group,
            indent=tree_row.level,
        )
        if node.is_group and hide_group_balance:
            values = tuple(ReportCell() for _ in tree.keys)
        else:
            values = tuple(
                value_cell(tree_row.values.get(key, _ZERO), currency, precision)
                for key in tree.keys
            )
        rows.append(
            ReportRow(
                kind=RowKind.ACCOUNT,
                cells=(name_cell, *values),
                account=node.name,
                level=tree_row.level,
                is_group=node.is_group,
            )
        )
    return rows


def total_row(
    label: str,
    totals: Mapping[Hashable, Decimal],
    keys: Sequence[Hashable],
    currency: str,
    precision: int = 2,
    *,
    bold_values: bool = False,
    colored: bool = False,
) -> ReportRow:
    cells = [ReportCell(text=label, bold=True)]
    for key in keys:
        value = totals.get(key, _ZERO)
        color = None
        if colored and value > 0:
            color = CellColor.GREEN
        elif colored and value < 0:
            color = CellColor.RED
        cells.append(value_cell(value, currency, precision, bold=bold_values, color=color))
    return ReportRow(kind=RowKind.TOTAL, cells=tuple(cells))


def empty_row(width: int) -> ReportRow:
    return ReportRow(kind=RowKind.EMPTY, cells=tuple(ReportCell() for _ in range(width)))


# =========================================================================
# 1. PROFIT AND LOSS
# =========================================================================


def profit_and_loss(
    forest: AccountForest,
    entries: Iterable[LedgerEntryRecord],
    ranges: Sequence[DateRange],
    metadata: ReportMetadata,
    *,
    precision: int = 2,
    hide_group_balance: bool = False,
) -> Report:
    """
    Income and expense per date range, and the profit they leave.

    Totals are summed over true leaves; profit is income minus expense.
    """
    entries = tuple(entries)
    currency = metadata.currency
    income = aggregate(forest, entries, ranges, root_types=(RootType.INCOME,))
    expense = aggregate(forest, entries, ranges, root_types=(RootType.EXPENSE,))

    income_totals = income.leaf_totals()
    expense_totals = expense.leaf_totals()
    profit = {key: income_totals[key] - expense_totals[key] for key in ranges}

    columns = range_columns(ranges)
    width = len(columns)
    rows = [
        *account_rows(income, currency, precision, hide_group_balance),
        total_row(TOTAL_INCOME, income_totals, ranges, currency, precision),
        empty_row(width),
        *account_rows(expense, currency, precision, hide_group_balance),
        total_row(TOTAL_EXPENSE, expense_totals, ranges, currency, precision),
        empty_row(width),
        empty_row(width),
        total_row(
            TOTAL_PROFIT, profit, ranges, currency, precision,
            bold_values=True, colored=True,
        ),
    ]
    return Report(metadata=metadata, columns=columns, rows=tuple(rows))


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


def accumulate(
    account_values: Mapping[str, ValueMap],
    opening: DateRange,
    ranges: Sequence[DateRange],
) -> dict[str, ValueMap]:
    """
    Convert per-period values into running balances.

    Each range's value becomes the opening value plus every period up to
    and including it, in date order.
    """
    ordered = sorted(ranges, key=lambda r: r.to_date)
    cumulative: dict[str, ValueMap] = {}
    for account, value_map in account_values.items():
        running = value_map.get(opening, _ZERO)
        balances = {}
        for date_range in ordered:
            running += value_map.get(date_range, _ZERO)
            balances[date_range] = running
        cumulative[account] = MappingProxyType(balances)
    return cumulative


def balance_sheet(
    forest: AccountForest,
    entries: Iterable[LedgerEntryRecord],
    ranges: Sequence[DateRange],
    metadata: ReportMetadata,
    *,
    precision: int = 2,
    hide_group_balance: bool = False,
) -> Report:
    """
    Asset, liability and equity balances as of each range end.

    ``entries`` should reach back to the start of the books; entries before
    the earliest range form its opening balance.
    """
    currency = metadata.currency
    earliest = min(r.from_date for r in ranges)
    opening = DateRange(date.min, earliest)

    period_values = group_by_date_range(
        forest, group_by_account(entries), [opening, *ranges]
    )
    values = accumulate(period_values, opening, ranges)

    columns = range_columns(ranges)
    width = len(columns)
    rows: list[ReportRow] = []
    for root_type, total_label in BALANCE_SHEET_SECTIONS:
        tree = build_tree(forest, values, ranges, root_types=(root_type,))
        rows.extend(account_rows(tree, currency, precision, hide_group_balance))
        rows.append(total_row(total_label, tree.leaf_totals(), ranges, currency, precision))
        rows.append(empty_row(width))

    return Report(metadata=metadata, columns=columns, rows=tuple(rows[:-1]))


# =========================================================================
# 3. TRIAL BALANCE
# =========================================================================


def _debit_credit_split(balance: Decimal) -> tuple[Decimal, Decimal]:
    if balance >= 0:
        return balance, _ZERO
    return _ZERO, -balance


def trial_balance_values(
    forest: AccountForest,
    entries: Iterable[LedgerEntryRecord],
    window: DateRange,
) -> dict[str, ValueMap]:
    """
    Each account's opening, period and closing columns.

    Opening covers entries on or before ``window.from_date``; the period
    covers ``window``.  Entries after the window are ignored.  Balances are
    split into a debit or a credit column by sign.
    """
    values: dict[str, ValueMap] = {}
    for account, account_entries in group_by_account(entries).items():
        forest.node(account)
        opening = debit = credit = _ZERO
        seen = False
        for entry in account_entries:
            if entry.date <= window.from_date:
                opening += entry.debit - entry.credit
                seen = True
            elif window.contains(entry.date):
                debit += entry.debit
                credit += entry.credit
                seen = True
        if not seen:
            continue

        opening_debit, opening_credit = _debit_credit_split(opening)
        closing_debit, closing_credit = _debit_credit_split(opening + debit - credit)
        values[account] = MappingProxyType({
            OPENING_DEBIT: opening_debit,
            OPENING_CREDIT: opening_credit,
            DEBIT: debit,
            CREDIT: credit,
            CLOSING_DEBIT: closing_debit,
            CLOSING_CREDIT: closing_credit,
        })
    return values


def trial_balance(
    forest: AccountForest,
    entries: Iterable[LedgerEntryRecord],
    window: DateRange,
    metadata: ReportMetadata,
    *,
    precision: int = 2,
    hide_group_balance: bool = False,
) -> Report:
    """
    Trial balance over one window, every root type included.

    ``is_balanced`` holds when each debit column total equals its credit
    column total.
    """
    currency = metadata.currency
    keys = tuple(key for key, _label in TRIAL_BALANCE_COLUMNS)
    tree = build_tree(forest, trial_balance_values(forest, entries, window), keys)
    totals = tree.leaf_totals()

    columns = (NAME_COLUMN,) + tuple(
        ReportColumn(key=key, label=label) for key, label in TRIAL_BALANCE_COLUMNS
    )
    rows = [
        *account_rows(tree, currency, precision, hide_group_balance),
        empty_row(len(columns)),
        total_row(TOTAL_TRIAL_BALANCE, totals, keys, currency, precision, bold_values=True),
    ]
    is_balanced = (
        totals[OPENING_DEBIT] == totals[OPENING_CREDIT]
        and totals[DEBIT] == totals[CREDIT]
        and totals[CLOSING_DEBIT] == totals[CLOSING_CREDIT]
    )
    return Report(
        metadata=metadata,
        columns=columns,
        rows=tuple(rows),
        is_balanced=is_balanced,
    )


# =========================================================================
# 4. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)

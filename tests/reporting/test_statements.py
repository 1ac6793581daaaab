"""
Pure function unit tests for statements.py.

NO database, NO I/O. Tests every pure transformation with synthetic data.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

from books_kernel.selectors.account_selector import AccountRecord
from books_kernel.selectors.ledger_selector import LedgerEntryRecord
from books_modules.reporting.account_tree import build_forest
from books_modules.reporting.date_ranges import DateRange
from books_modules.reporting.formatting import format_money
from books_modules.reporting.models import CellColor, ReportMetadata, ReportType, RowKind
from books_modules.reporting.statements import (
    TOTAL_PROFIT,
    balance_sheet,
    profit_and_loss,
    render_to_dict,
    trial_balance,
)

# =========================================================================
# Fixtures / helpers
# =========================================================================

JAN = DateRange(date(2023, 12, 31), date(2024, 1, 31))
FEB = DateRange(date(2024, 1, 31), date(2024, 2, 29))
MAR = DateRange(date(2024, 2, 29), date(2024, 3, 31))


def _forest():
    return build_forest([
        AccountRecord("Assets", "Asset", True),
        AccountRecord("Cash", "Asset", False, "Assets"),
        AccountRecord("Bank", "Asset", False, "Assets"),
        AccountRecord("Liabilities", "Liability", True),
        AccountRecord("Creditors", "Liability", False, "Liabilities"),
        AccountRecord("Equity", "Equity", True),
        AccountRecord("Capital", "Equity", False, "Equity"),
        AccountRecord("Income", "Income", True),
        AccountRecord("Sales", "Income", False, "Income"),
        AccountRecord("Expenses", "Expense", True),
        AccountRecord("Rent", "Expense", False, "Expenses"),
    ])


def _entry(account: str, on: date, debit: str = "0", credit: str = "0") -> LedgerEntryRecord:
    return LedgerEntryRecord(
        account=account,
        party=None,
        debit=Decimal(debit),
        credit=Decimal(credit),
        date=on,
        reference_type="JournalEntry",
        reference_name="JV-0001",
        currency="USD",
        reverted=False,
    )


def _metadata(report_type: ReportType, window: DateRange) -> ReportMetadata:
    return ReportMetadata(
        report_type=report_type,
        entity_name="Test Company",
        currency="USD",
        generated_at="2024-04-01T00:00:00+00:00",
        from_date=window.from_date,
        to_date=window.to_date,
    )


def _labels(report) -> list[str]:
    return [row.label for row in report.rows]


# =========================================================================
# Profit and loss
# =========================================================================


class TestProfitAndLoss:
    """Income and expense trees, their totals and the profit line."""

    ENTRIES = [
        _entry("Sales", date(2024, 1, 10), credit="100"),
        _entry("Rent", date(2024, 1, 15), debit="30"),
        _entry("Sales", date(2024, 2, 10), credit="40"),
        _entry("Rent", date(2024, 2, 15), debit="60"),
        _entry("Cash", date(2024, 2, 15), debit="50"),
    ]

    def _report(self, **kwargs):
        return profit_and_loss(
            _forest(),
            self.ENTRIES,
            [FEB, JAN],
            _metadata(ReportType.PROFIT_AND_LOSS, DateRange(JAN.from_date, FEB.to_date)),
            **kwargs,
        )

    def test_row_order(self):
        assert _labels(self._report()) == [
            "Income",
            "Sales",
            "Total Income (Credit)",
            "",
            "Expenses",
            "Rent",
            "Total Expense (Debit)",
            "",
            "",
            "Total Profit",
        ]

    def test_columns_most_recent_first(self):
        report = self._report()
        assert [c.key for c in report.columns] == ["name", "2024-02-29", "2024-01-31"]
        assert report.columns[1].label == "2024-02-01 - 2024-02-29"
        assert report.columns[1].date_range == FEB

    def test_totals_and_profit(self):
        report = self._report()
        assert report.row("Total Income (Credit)").values == (Decimal("40"), Decimal("100"))
        assert report.row("Total Expense (Debit)").values == (Decimal("60"), Decimal("30"))
        assert report.row(TOTAL_PROFIT).values == (Decimal("-20"), Decimal("70"))

    def test_profit_colored_by_sign(self):
        profit = self._report().row(TOTAL_PROFIT)
        assert profit.kind == RowKind.TOTAL
        assert [cell.color for cell in profit.cells[1:]] == [CellColor.RED, CellColor.GREEN]
        assert all(cell.bold for cell in profit.cells)

    def test_zero_profit_uncolored(self):
        report = profit_and_loss(
            _forest(),
            [_entry("Sales", date(2024, 1, 10), credit="30"), _entry("Rent", date(2024, 1, 15), debit="30")],
            [JAN],
            _metadata(ReportType.PROFIT_AND_LOSS, JAN),
        )
        assert report.row(TOTAL_PROFIT).cells[1].color is None

    def test_account_cells_styled_by_level(self):
        report = self._report()
        income, sales = report.row("Income"), report.row("Sales")
        assert income.cells[0].bold and income.cells[0].italic
        assert income.is_group and income.level == 0
        assert not sales.cells[0].bold and not sales.cells[0].italic
        assert sales.cells[0].indent == 1
        assert sales.cells[2].text == "$100.00"

    def test_hide_group_balance(self):
        report = self._report(hide_group_balance=True)
        assert report.row("Income").values == (None, None)
        assert report.row("Sales").values == (Decimal("40"), Decimal("100"))

    def test_balance_sheet_accounts_excluded(self):
        assert "Cash" not in _labels(self._report())


# =========================================================================
# Balance sheet
# =========================================================================


class TestBalanceSheet:
    """Balances are cumulative from the start of the books."""

    ENTRIES = [
        # Opening balance, before the first column
        _entry("Cash", date(2023, 12, 15), debit="100"),
        _entry("Capital", date(2023, 12, 15), credit="100"),
        _entry("Cash", date(2024, 2, 10), debit="50"),
        _entry("Creditors", date(2024, 2, 10), credit="50"),
        # After the last column
        _entry("Cash", date(2024, 4, 10), debit="999"),
        _entry("Capital", date(2024, 4, 10), credit="999"),
    ]

    def _report(self):
        return balance_sheet(
            _forest(),
            self.ENTRIES,
            [MAR, FEB, JAN],
            _metadata(ReportType.BALANCE_SHEET, DateRange(JAN.from_date, MAR.to_date)),
        )

    def test_cumulative_balances(self):
        report = self._report()
        assert report.row("Cash").values == (Decimal("150"), Decimal("150"), Decimal("100"))
        assert report.row("Creditors").values == (Decimal("50"), Decimal("50"), Decimal("0"))
        assert report.row("Capital").values == (Decimal("100"), Decimal("100"), Decimal("100"))

    def test_sections_and_totals(self):
        report = self._report()
        assert _labels(report) == [
            "Assets",
            "Cash",
            "Total Asset (Debit)",
            "",
            "Liabilities",
            "Creditors",
            "Total Liability (Credit)",
            "",
            "Equity",
            "Capital",
            "Total Equity (Credit)",
        ]
        assert report.row("Total Asset (Debit)").values == (
            Decimal("150"), Decimal("150"), Decimal("100"),
        )
        assert report.row("Total Liability (Credit)").values == (
            Decimal("50"), Decimal("50"), Decimal("0"),
        )

    def test_assets_equal_liabilities_plus_equity(self):
        report = self._report()
        assets = report.row("Total Asset (Debit)").values
        liabilities = report.row("Total Liability (Credit)").values
        equity = report.row("Total Equity (Credit)").values
        for a, li, e in zip(assets, liabilities, equity):
            assert a == li + e


# =========================================================================
# Trial balance
# =========================================================================


class TestTrialBalance:
    """Opening, period and closing columns over one window."""

    def _report(self, entries):
        return trial_balance(_forest(), entries, JAN, _metadata(ReportType.TRIAL_BALANCE, JAN))

    def test_columns(self):
        report = self._report([_entry("Cash", date(2024, 1, 10), debit="1")])
        assert [c.key for c in report.columns] == [
            "name",
            "opening_debit",
            "opening_credit",
            "debit",
            "credit",
            "closing_debit",
            "closing_credit",
        ]

    def test_opening_period_and_closing(self):
        report = self._report([
            _entry("Cash", date(2023, 12, 15), debit="100"),
            _entry("Capital", date(2023, 12, 15), credit="100"),
            _entry("Rent", date(2024, 1, 10), debit="40"),
            _entry("Cash", date(2024, 1, 10), credit="40"),
            _entry("Sales", date(2024, 2, 5), credit="999"),
        ])

        assert report.row("Cash").values == (
            Decimal("100"), Decimal("0"), Decimal("0"), Decimal("40"), Decimal("60"), Decimal("0"),
        )
        assert report.row("Capital").values == (
            Decimal("0"), Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0"), Decimal("100"),
        )
        assert report.row("Rent").values == (
            Decimal("0"), Decimal("0"), Decimal("40"), Decimal("0"), Decimal("40"), Decimal("0"),
        )
        assert report.row("Sales") is None
        assert report.row("Total").values == (
            Decimal("100"), Decimal("100"), Decimal("40"), Decimal("40"), Decimal("100"), Decimal("100"),
        )
        assert report.is_balanced is True

    def test_imbalanced_ledger_detected(self):
        report = self._report([_entry("Cash", date(2024, 1, 10), debit="10")])
        assert report.is_balanced is False


# =========================================================================
# Formatting and rendering
# =========================================================================


class TestFormatMoney:
    def test_symbol_grouping_and_sign(self):
        assert format_money(Decimal("-1234.5"), "USD") == "-$1,234.50"
        assert format_money(Decimal("0"), "USD") == "$0.00"

    def test_precision_rounds_half_up(self):
        assert format_money(Decimal("1.2345"), "KWD", 3) == "KWD 1.235"
        assert format_money(Decimal("1499.5"), "JPY", 0) == "¥1,500"

    def test_unknown_currency_uses_code(self):
        assert format_money(Decimal("5"), "XYZ") == "XYZ 5.00"


class TestRenderToDict:
    def test_report_is_json_serializable(self):
        report = profit_and_loss(
            _forest(),
            [_entry("Sales", date(2024, 1, 10), credit="100")],
            [JAN],
            _metadata(ReportType.PROFIT_AND_LOSS, JAN),
        )
        rendered = render_to_dict(report)

        assert rendered["metadata"]["report_type"] == "profit_and_loss"
        assert rendered["metadata"]["from_date"] == "2023-12-31"
        assert rendered["columns"][1]["date_range"] == {
            "from_date": "2023-12-31",
            "to_date": "2024-01-31",
        }
        assert rendered["rows"][1]["cells"][1]["value"] == "100"
        assert rendered["rows"][-1]["cells"][1]["color"] == "green"
        assert rendered["is_balanced"] is None
        json.dumps(rendered)

"""
Integration tests for ReportingService.

Documents are submitted through DocumentService; reports then read the
committed ledger through the kernel selectors.

Ledger used by most tests:
- SalesInvoice 100 to Acme Retail on 2024-02-10
- PurchaseInvoice 30 from Northwind Supplies on 2024-03-05
- Payment 40 from Acme Retail on 2024-03-15
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from books_kernel.models import InvoiceType
from books_modules.reporting import (
    DateRangeMode,
    ReportingConfig,
    ReportingService,
    ReportType,
)
from books_modules.reporting.statements import TOTAL_PROFIT

MARCH_END = ReportingConfig(to_date=date(2024, 3, 31))


@pytest.fixture
def ledger(document_service, customer, supplier, invoice_factory, payment_factory):
    sale = invoice_factory(customer.name, "100", on=date(2024, 2, 10))
    document_service.submit_invoice(sale)
    document_service.submit_invoice(
        invoice_factory(supplier.name, "30", invoice_type=InvoiceType.PURCHASE, on=date(2024, 3, 5))
    )
    document_service.submit_payment(payment_factory([(sale, "40")], "40", on=date(2024, 3, 15)))
    return sale


@pytest.fixture
def reporting_service(session, settings, deterministic_clock):
    return ReportingService(session, settings, clock=deterministic_clock, config=MARCH_END)


class TestProfitAndLoss:
    """Monthly profit and loss to the end of March."""

    def test_profit_per_month(self, ledger, reporting_service):
        report = reporting_service.profit_and_loss()

        assert [c.key for c in report.columns[1:]] == ["2024-03-31", "2024-02-29", "2024-01-31"]
        assert report.row("Sales").values == (Decimal("0"), Decimal("100"), Decimal("0"))
        assert report.row("Cost of Goods Sold").values == (Decimal("30"), Decimal("0"), Decimal("0"))
        assert report.row(TOTAL_PROFIT).values == (Decimal("-30"), Decimal("100"), Decimal("0"))

    def test_chart_hierarchy_in_rows(self, ledger, reporting_service):
        report = reporting_service.profit_and_loss()
        assert [(row.label, row.level) for row in report.account_rows] == [
            ("Income", 0),
            ("Direct Income", 1),
            ("Sales", 2),
            ("Expenses", 0),
            ("Direct Expenses", 1),
            ("Cost of Goods Sold", 2),
        ]

    def test_reverted_invoice_excluded(
        self, ledger, document_service, customer, invoice_factory, reporting_service
    ):
        refunded = invoice_factory(customer.name, "50", on=date(2024, 3, 10))
        document_service.submit_invoice(refunded)
        document_service.revert_invoice(refunded)

        report = reporting_service.profit_and_loss()
        assert report.row("Sales").values == (Decimal("0"), Decimal("100"), Decimal("0"))

    def test_config_overrides_default_for_one_call(self, ledger, reporting_service):
        quarter = ReportingConfig(to_date=date(2024, 3, 31), periodicity="Quarterly", count=1)
        report = reporting_service.profit_and_loss(quarter)
        assert report.row(TOTAL_PROFIT).values == (Decimal("70"),)

        assert len(reporting_service.profit_and_loss().columns) == 4

    def test_fiscal_year_columns(self, ledger, reporting_service):
        config = ReportingConfig(mode=DateRangeMode.FISCAL_YEAR, from_year=2024, to_year=2024)
        report = reporting_service.profit_and_loss(config)
        assert report.columns[1].label == "2024-01-01 - 2024-12-31"
        assert report.row(TOTAL_PROFIT).values == (Decimal("70"),)

    def test_empty_ledger(self, standard_accounts, reporting_service):
        report = reporting_service.profit_and_loss()
        assert report.account_rows == ()
        assert report.row(TOTAL_PROFIT).values == (Decimal("0"),) * 3


class TestBalanceSheet:
    """Month-end balances."""

    def test_balances_as_of_each_month_end(self, ledger, reporting_service):
        report = reporting_service.balance_sheet()

        assert report.row("Debtors").values == (Decimal("60"), Decimal("100"), Decimal("0"))
        assert report.row("Cash").values == (Decimal("40"), Decimal("0"), Decimal("0"))
        assert report.row("Creditors").values == (Decimal("30"), Decimal("0"), Decimal("0"))
        assert report.row("Total Asset (Debit)").values == (
            Decimal("100"), Decimal("100"), Decimal("0"),
        )

    def test_income_accounts_excluded(self, ledger, reporting_service):
        report = reporting_service.balance_sheet()
        assert report.row("Sales") is None
        assert report.metadata.report_type == ReportType.BALANCE_SHEET

    def test_activity_before_the_window_is_opening_balance(self, ledger, reporting_service):
        config = ReportingConfig(to_date=date(2024, 4, 30), count=1)
        report = reporting_service.balance_sheet(config)
        assert report.row("Debtors").values == (Decimal("60"),)


class TestTrialBalance:
    """Opening, period and closing columns from the committed ledger."""

    def test_defaults_to_fiscal_year_to_date(self, ledger, reporting_service):
        report = reporting_service.trial_balance()

        assert report.metadata.from_date == date(2023, 12, 31)
        assert report.metadata.to_date == date(2024, 1, 1)
        assert report.account_rows == ()
        assert report.is_balanced is True

    def test_quarter(self, ledger, reporting_service):
        report = reporting_service.trial_balance(date(2024, 1, 1), date(2024, 3, 31))

        assert report.row("Debtors").values == (
            Decimal("0"), Decimal("0"), Decimal("100"), Decimal("40"), Decimal("60"), Decimal("0"),
        )
        assert report.row("Total").values[2:4] == (Decimal("170"), Decimal("170"))
        assert report.is_balanced is True

    def test_opening_from_earlier_activity(self, ledger, reporting_service):
        report = reporting_service.trial_balance(date(2024, 3, 1), date(2024, 3, 31))

        assert report.row("Debtors").values == (
            Decimal("100"), Decimal("0"), Decimal("0"), Decimal("40"), Decimal("60"), Decimal("0"),
        )
        assert report.row("Sales").values == (
            Decimal("0"), Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0"), Decimal("100"),
        )
        assert report.is_balanced is True

    def test_from_after_to_rejected(self, standard_accounts, reporting_service):
        with pytest.raises(ValueError):
            reporting_service.trial_balance(date(2024, 4, 1), date(2024, 3, 31))


class TestMetadataAndLogging:
    def test_metadata_from_settings_and_clock(self, ledger, reporting_service, settings):
        report = reporting_service.profit_and_loss()
        metadata = report.metadata

        assert metadata.report_type == ReportType.PROFIT_AND_LOSS
        assert metadata.entity_name == settings.company_name
        assert metadata.currency == "USD"
        assert metadata.generated_at == "2024-01-01T12:00:00+00:00"
        assert metadata.from_date == date(2023, 12, 31)
        assert metadata.to_date == date(2024, 3, 31)

    def test_report_generated_logged(self, ledger, reporting_service, captured_logs):
        reporting_service.profit_and_loss()
        records = [r for r in captured_logs() if r["message"] == "report_generated"]

        assert len(records) == 1
        assert records[0]["report_type"] == "profit_and_loss"
        assert records[0]["from_date"] == "2023-12-31"
        assert records[0]["to_date"] == "2024-03-31"
        assert records[0]["column_count"] == 3

    def test_to_dict(self, ledger, reporting_service):
        rendered = reporting_service.to_dict(reporting_service.trial_balance())
        assert rendered["metadata"]["report_type"] == "trial_balance"
        assert rendered["is_balanced"] is True

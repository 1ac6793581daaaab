#!/usr/bin/env python3
"""
View profit and loss, balance sheet and trial balance reports.

With the default in-memory SQLite URL the bundled chart of accounts is
installed and a small demo quarter is posted first (capital, a sale, a
purchase, a part payment, a reverted invoice).  Point --db-url at an
existing database to report on its ledger instead.

Usage:
    python3 scripts/view_reports.py
    python3 scripts/view_reports.py --periodicity Quarterly --count 1
    python3 scripts/view_reports.py --fiscal-years 2024 2025
    python3 scripts/view_reports.py --db-url postgresql://books@localhost/books --to-date 2024-12-31
    python3 scripts/view_reports.py --json
"""

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEMO_DB_URL = "sqlite://"
DEMO_TO_DATE = date(2024, 3, 31)


# ===================================================================
# Pretty-print helpers
# ===================================================================

W = 96  # total line width
AMT_W = 16  # amount column width


def _hdr(title: str, subtitle: str = "") -> str:
    lines = [
        "",
        "=" * W,
        title.center(W),
        subtitle.center(W) if subtitle else "",
        "=" * W,
    ]
    return "\n".join(lines)


def _status(label: str, ok: bool) -> str:
    tag = "OK" if ok else "FAIL"
    return f"  [{tag}] {label}"


def print_report(title: str, report) -> None:
    """Print a report as a fixed-width table, one column per value column."""
    meta = report.metadata
    value_columns = report.columns[1:]
    name_w = max(W - AMT_W * len(value_columns) - 2, 24)
    print(_hdr(title, f"{meta.entity_name}  ({meta.currency})"))

    # Date-range labels are wider than an amount, so print the end date
    header = "".join(
        f"{(c.date_range.to_date.isoformat() if c.date_range else c.label):>{AMT_W}}"
        for c in value_columns
    )
    print(f"  {report.columns[0].label:<{name_w}}{header}")
    print(f"  {'-' * name_w}{'-' * AMT_W * len(value_columns)}")

    for row in report.rows:
        name = row.cells[0]
        label = f"{'  ' * name.indent}{name.text}"
        if name.bold and row.account is None:
            label = label.upper()
        amounts = "".join(f"{cell.text:>{AMT_W}}" for cell in row.cells[1:])
        print(f"  {label:<{name_w}}{amounts}")
    print()


# ===================================================================
# Demo data
# ===================================================================


def seed_demo(session, settings) -> None:
    from books_config import install_chart, load_chart_of_accounts
    from books_kernel.domain.clock import DeterministicClock
    from books_kernel.models import (
        Invoice,
        InvoiceItem,
        InvoiceTax,
        InvoiceType,
        JournalEntry,
        JournalEntryAccount,
        Party,
        PartyRole,
        Payment,
        PaymentReference,
    )
    from books_kernel.services.document_service import DocumentService

    install_chart(session, load_chart_of_accounts())
    session.add(Party(name="Acme Retail", role=PartyRole.CUSTOMER))
    session.add(Party(name="Northwind Supplies", role=PartyRole.SUPPLIER))
    session.commit()

    docs = DocumentService(session, settings, clock=DeterministicClock())

    capital = JournalEntry(date=date(2024, 1, 2), user_remark="Owner investment")
    capital.accounts.append(
        JournalEntryAccount(idx=0, account="Bank", debit=Decimal("5000"), credit=Decimal("0"))
    )
    capital.accounts.append(
        JournalEntryAccount(idx=1, account="Capital Stock", debit=Decimal("0"), credit=Decimal("5000"))
    )
    docs.submit_journal_entry(capital)

    def invoice(invoice_type, party, account, rate, on, tax_rate=None):
        doc = Invoice(invoice_type=invoice_type, party=party, date=on)
        doc.items.append(
            InvoiceItem(idx=0, item="Widget", account=account, quantity=Decimal("10"), rate=Decimal(rate))
        )
        if tax_rate is not None:
            doc.taxes.append(InvoiceTax(idx=0, account="Sales Tax", rate=Decimal(tax_rate)))
        docs.submit_invoice(doc)
        return doc

    purchase = invoice(
        InvoiceType.PURCHASE, "Northwind Supplies", "Cost of Goods Sold", "45", date(2024, 1, 20)
    )
    sale = invoice(InvoiceType.SALES, "Acme Retail", "Sales", "80", date(2024, 2, 10), tax_rate="10")
    mistaken = invoice(InvoiceType.SALES, "Acme Retail", "Sales", "12", date(2024, 3, 1))
    docs.revert_invoice(mistaken)

    receipt = Payment(amount=Decimal("500"), date=date(2024, 3, 15))
    receipt.references.append(
        PaymentReference(
            idx=0,
            reference_type=InvoiceType(sale.invoice_type).value,
            reference_name=sale.name,
            amount=Decimal("500"),
        )
    )
    docs.submit_payment(receipt)

    supplier_payment = Payment(
        amount=Decimal("450"), account="Bank", payment_account="Creditors", date=date(2024, 3, 20)
    )
    supplier_payment.references.append(
        PaymentReference(
            idx=0,
            reference_type=InvoiceType(purchase.invoice_type).value,
            reference_name=purchase.name,
            amount=Decimal("450"),
        )
    )
    docs.submit_payment(supplier_payment)


# ===================================================================
# Main
# ===================================================================


def main() -> int:
    parser = argparse.ArgumentParser(description="Print P&L, balance sheet and trial balance")
    parser.add_argument("--db-url", default=DEMO_DB_URL, help="Database URL (default: in-memory demo)")
    parser.add_argument("--settings", help="Accounting settings YAML (default: bundled)")
    parser.add_argument("--to-date", type=date.fromisoformat, help="Last report date (YYYY-MM-DD)")
    parser.add_argument(
        "--periodicity",
        default="Monthly",
        choices=["Monthly", "Quarterly", "Half-Yearly", "Yearly"],
    )
    parser.add_argument("--count", type=int, default=3, help="Number of periods")
    parser.add_argument(
        "--fiscal-years", nargs=2, type=int, metavar=("FROM", "TO"),
        help="Report whole fiscal years instead of periods to a date",
    )
    parser.add_argument("--single-column", action="store_true")
    parser.add_argument("--hide-group-balance", action="store_true")
    parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    args = parser.parse_args()

    logging.disable(logging.CRITICAL)

    from books_config import load_settings
    from books_kernel.db.engine import create_tables, get_session, init_engine_from_url
    from books_kernel.domain.clock import SystemClock
    from books_kernel.models import Account
    from books_modules.reporting import DateRangeMode, ReportingConfig, ReportingService

    settings = load_settings(args.settings)
    demo = args.db_url == DEMO_DB_URL

    # -----------------------------------------------------------------
    # Connect
    # -----------------------------------------------------------------
    try:
        engine = init_engine_from_url(args.db_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1

    if demo:
        create_tables(engine)
        seed_session = get_session()
        try:
            seed_demo(seed_session, settings)
        finally:
            seed_session.close()

    session = get_session()
    try:
        if session.query(Account).count() == 0:
            print("  No accounts found.", file=sys.stderr)
            return 1

        # -----------------------------------------------------------------
        # Generate reports
        # -----------------------------------------------------------------
        to_date = args.to_date or (DEMO_TO_DATE if demo else None)
        if args.fiscal_years:
            config = ReportingConfig(
                mode=DateRangeMode.FISCAL_YEAR,
                from_year=args.fiscal_years[0],
                to_year=args.fiscal_years[1],
                single_column=args.single_column,
                hide_group_balance=args.hide_group_balance,
                display_precision=settings.display_precision,
            )
        else:
            config = ReportingConfig(
                periodicity=args.periodicity,
                count=args.count,
                to_date=to_date,
                single_column=args.single_column,
                hide_group_balance=args.hide_group_balance,
                display_precision=settings.display_precision,
            )

        svc = ReportingService(session, settings, clock=SystemClock(), config=config)
        pnl = svc.profit_and_loss()
        bs = svc.balance_sheet()
        tb = svc.trial_balance(to_date=bs.metadata.to_date)

        if args.json:
            print(json.dumps(
                {
                    "profit_and_loss": svc.to_dict(pnl),
                    "balance_sheet": svc.to_dict(bs),
                    "trial_balance": svc.to_dict(tb),
                },
                indent=2,
            ))
            return 0

        # -----------------------------------------------------------------
        # Print
        # -----------------------------------------------------------------
        print_report("PROFIT AND LOSS", pnl)
        print_report("BALANCE SHEET", bs)
        print_report("TRIAL BALANCE", tb)
        print(_status("Trial Balance balanced", tb.is_balanced))
        print()
        return 0

    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())

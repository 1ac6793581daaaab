"""
Pytest fixtures for the books kernel test suite.

Provides:
- A fresh in-memory SQLite database per test (real commits, nothing shared)
- The bundled chart of accounts and accounting settings
- Factories for parties, invoices, payments and journal entries
- Captured structured logs

Pure-function tests (Money, date ranges, account trees) need none of the
database fixtures.
"""

import json
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from books_config import install_chart, load_chart_of_accounts, load_settings
from books_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from books_kernel.domain.clock import DeterministicClock
from books_kernel.domain.settings import AccountingSettings
from books_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
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


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture books_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, document_service):
            document_service.submit_invoice(invoice)
            logs = captured_logs()
            assert any(r["message"] == "invoice_submitted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("books_kernel")
    previous_level = root.level
    root.addHandler(handler)
    # test_logging resets the hierarchy to WARNING between its tests
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """A fresh in-memory SQLite database with every table created."""
    eng = init_engine_from_url("sqlite://")
    create_tables(eng)
    yield eng
    drop_tables(eng)
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """A session on the per-test database; commits are real."""
    sess = get_session()
    yield sess
    sess.close()


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing (2024-01-01 12:00 UTC)."""
    return DeterministicClock()


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def settings() -> AccountingSettings:
    """Bundled settings without a write-off account."""
    return replace(load_settings(), write_off_account=None)


@pytest.fixture
def settings_with_writeoff(settings) -> AccountingSettings:
    return replace(settings, write_off_account="Write Off")


@pytest.fixture
def chart():
    return load_chart_of_accounts()


@pytest.fixture
def standard_accounts(session, chart):
    """Install the bundled chart of accounts and commit it."""
    accounts = install_chart(session, chart)
    session.commit()
    return {account.name: account for account in accounts}


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def document_service(session, settings, deterministic_clock, standard_accounts):
    return DocumentService(session, settings, clock=deterministic_clock)


@pytest.fixture
def writeoff_document_service(
    session, settings_with_writeoff, deterministic_clock, standard_accounts
):
    return DocumentService(session, settings_with_writeoff, clock=deterministic_clock)


# =============================================================================
# Document factories
# =============================================================================


@pytest.fixture
def create_party(session: Session):
    """Factory fixture to create committed parties."""

    def _create_party(
        name: str,
        role: PartyRole = PartyRole.CUSTOMER,
        default_account: str | None = None,
    ) -> Party:
        party = Party(name=name, role=role, default_account=default_account)
        session.add(party)
        session.commit()
        return party

    return _create_party


@pytest.fixture
def customer(create_party):
    return create_party("Acme Retail", PartyRole.CUSTOMER)


@pytest.fixture
def supplier(create_party):
    return create_party("Northwind Supplies", PartyRole.SUPPLIER)


def make_invoice(
    party: str,
    amount: Decimal | str,
    *,
    invoice_type: InvoiceType = InvoiceType.SALES,
    account: str | None = None,
    on: date | None = None,
    tax_rate: Decimal | str | None = None,
) -> Invoice:
    """A draft invoice with one item line (and optionally one tax line)."""
    item_account = "Sales" if invoice_type == InvoiceType.SALES else "Cost of Goods Sold"
    invoice = Invoice(
        invoice_type=invoice_type,
        party=party,
        account=account,
        date=on,
    )
    invoice.items.append(
        InvoiceItem(idx=0, item="Widget", account=item_account, quantity=Decimal("1"), rate=Decimal(amount))
    )
    if tax_rate is not None:
        invoice.taxes.append(InvoiceTax(idx=0, account="Sales Tax", rate=Decimal(tax_rate)))
    return invoice


def make_payment(
    allocations: list[tuple[Invoice, Decimal | str]],
    amount: Decimal | str,
    *,
    writeoff: Decimal | str = "0",
    on: date | None = None,
) -> Payment:
    """A draft payment allocating ``amount`` to the given invoices."""
    payment = Payment(amount=Decimal(amount), writeoff=Decimal(writeoff), date=on)
    for idx, (invoice, allocated) in enumerate(allocations):
        payment.references.append(
            PaymentReference(
                idx=idx,
                reference_type=InvoiceType(invoice.invoice_type).value,
                reference_name=invoice.name,
                amount=Decimal(allocated),
            )
        )
    return payment


def make_journal_entry(
    lines: list[tuple[str, Decimal | str, Decimal | str]],
    *,
    on: date | None = None,
) -> JournalEntry:
    """A draft journal entry from (account, debit, credit) rows."""
    entry = JournalEntry(date=on)
    for idx, (account, debit, credit) in enumerate(lines):
        entry.accounts.append(
            JournalEntryAccount(
                idx=idx, account=account, debit=Decimal(debit), credit=Decimal(credit)
            )
        )
    return entry


@pytest.fixture
def submit_sales_invoice(document_service, customer):
    """Factory fixture: submit a one-line sales invoice to the customer."""

    def _submit(amount: Decimal | str, on: date | None = None) -> Invoice:
        invoice = make_invoice(customer.name, amount, on=on)
        document_service.submit_invoice(invoice)
        return invoice

    return _submit


@pytest.fixture
def invoice_factory():
    return make_invoice


@pytest.fixture
def payment_factory():
    return make_payment


@pytest.fixture
def journal_entry_factory():
    return make_journal_entry

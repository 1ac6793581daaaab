"""
Tests for OutstandingService: invoice and party outstanding reconciliation.

Scenarios run through DocumentService so that postings and balance
updates commit (or roll back) together, as they do in production.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from books_kernel.domain.values import Money
from books_kernel.exceptions import (
    DocumentNotFoundError,
    DocumentStateError,
    OverpaymentError,
)
from books_kernel.models import (
    InvoiceStatus,
    InvoiceType,
    LedgerEntry,
    PartyRole,
    Payment,
    PaymentReference,
)
from books_kernel.selectors import LedgerSelector
from books_kernel.services.outstanding_service import OutstandingService


class TestPartialAndOverpayment:
    """Invoice of 100, payment of 40, then an attempted payment of 70."""

    def test_partial_payment_reduces_outstanding(
        self, document_service, customer, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        assert invoice.outstanding_amount == Decimal("100")
        assert customer.outstanding_amount == Decimal("100")

        result = document_service.submit_payment(payment_factory([(invoice, "40")], "40"))

        assert invoice.outstanding_amount == Decimal("60")
        assert customer.outstanding_amount == Decimal("60")
        assert invoice.status == InvoiceStatus.UNPAID
        assert [(c.previous, c.current) for c in result.outstanding_changes] == [
            (Money.of("100", "USD"), Money.of("60", "USD"))
        ]

    def test_overpayment_rejected_and_nothing_changes(
        self, document_service, session, customer, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        document_service.submit_payment(payment_factory([(invoice, "40")], "40"))

        with pytest.raises(OverpaymentError) as exc_info:
            document_service.submit_payment(payment_factory([(invoice, "70")], "70"))

        assert exc_info.value.reference_name == invoice.name
        assert exc_info.value.outstanding == "60"
        assert invoice.outstanding_amount == Decimal("60")
        assert customer.outstanding_amount == Decimal("60")
        # Only the first payment reached the ledger
        payments = session.execute(select(Payment)).scalars().all()
        assert [p.name for p in payments] == ["PAY-0001"]
        assert LedgerSelector(session).entries_for_reference("Payment", "PAY-0002") == []

    def test_zero_allocation_rejected(
        self, document_service, submit_sales_invoice, payment_factory
    ):
        first = submit_sales_invoice("100")
        second = submit_sales_invoice("50")
        with pytest.raises(OverpaymentError):
            document_service.submit_payment(payment_factory([(first, "0"), (second, "10")], "10"))
        assert second.outstanding_amount == Decimal("50")

    def test_exact_payment_settles_invoice(
        self, document_service, customer, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        document_service.submit_payment(payment_factory([(invoice, "100")], "100"))

        assert invoice.outstanding_amount == Decimal("0")
        assert invoice.status == InvoiceStatus.PAID
        assert customer.outstanding_amount == Decimal("0")


class TestPaymentReversal:
    """Reverting a payment restores invoice and party outstanding."""

    def test_revert_restores_outstanding(
        self, document_service, session, customer, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        payment = payment_factory([(invoice, "40")], "40")
        document_service.submit_payment(payment)

        result = document_service.revert_payment(payment)

        assert invoice.outstanding_amount == Decimal("100")
        assert customer.outstanding_amount == Decimal("100")
        assert payment.cancelled
        assert [(c.previous, c.current) for c in result.outstanding_changes] == [
            (Money.of("60", "USD"), Money.of("100", "USD"))
        ]
        selector = LedgerSelector(session)
        assert selector.account_balance("Cash") == Decimal("0")
        assert selector.account_balance("Debtors") == Decimal("100")

    def test_reverted_payment_entries_are_all_marked(
        self, document_service, session, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        payment = payment_factory([(invoice, "40")], "40")
        document_service.submit_payment(payment)
        document_service.revert_payment(payment)

        entries = session.execute(
            select(LedgerEntry).where(LedgerEntry.reference_name == payment.name)
        ).scalars().all()
        assert len(entries) == 4
        assert all(e.reverted for e in entries)

    def test_revert_twice_rejected(
        self, document_service, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        payment = payment_factory([(invoice, "40")], "40")
        document_service.submit_payment(payment)
        document_service.revert_payment(payment)

        with pytest.raises(DocumentStateError):
            document_service.revert_payment(payment)


class TestPaymentAgainstInvalidInvoice:
    """Payments only reconcile against submitted, live invoices."""

    def test_cancelled_invoice_rejected(
        self, document_service, submit_sales_invoice, payment_factory
    ):
        invoice = submit_sales_invoice("100")
        document_service.revert_invoice(invoice)

        with pytest.raises(DocumentStateError):
            document_service.submit_payment(payment_factory([(invoice, "40")], "40"))

    def test_unknown_invoice_rejected(self, document_service, customer):
        payment = Payment(amount=Decimal("10"))
        payment.references.append(
            PaymentReference(
                reference_type=InvoiceType.SALES.value,
                reference_name="SINV-9999",
                amount=Decimal("10"),
            )
        )
        with pytest.raises(DocumentNotFoundError):
            document_service.submit_payment(payment)


class TestRecomputeParty:
    """Party outstanding is recomputed from its invoices, never patched."""

    def test_customer_counts_sales_invoices_only(
        self, session, settings, document_service, create_party, invoice_factory
    ):
        both = create_party("Harbor Traders", PartyRole.BOTH)
        document_service.submit_invoice(invoice_factory(both.name, "100"))
        document_service.submit_invoice(
            invoice_factory(both.name, "30", invoice_type=InvoiceType.PURCHASE)
        )
        assert both.outstanding_amount == Decimal("130")

        customer = create_party("Cash Customer", PartyRole.CUSTOMER)
        document_service.submit_invoice(invoice_factory(customer.name, "25"))
        document_service.submit_invoice(
            invoice_factory(customer.name, "99", invoice_type=InvoiceType.PURCHASE)
        )
        assert customer.outstanding_amount == Decimal("25")

    def test_cancelled_invoices_excluded(
        self, document_service, customer, submit_sales_invoice
    ):
        first = submit_sales_invoice("100")
        submit_sales_invoice("50")
        assert customer.outstanding_amount == Decimal("150")

        document_service.revert_invoice(first)
        assert customer.outstanding_amount == Decimal("50")

    def test_recompute_is_idempotent(
        self, session, settings, customer, submit_sales_invoice
    ):
        submit_sales_invoice("100")
        service = OutstandingService(session, settings)
        assert service.recompute_party(customer.name) == Money.of("100", "USD")
        assert service.recompute_party(customer.name) == Money.of("100", "USD")

    def test_unknown_party_raises(self, session, settings, standard_accounts):
        with pytest.raises(DocumentNotFoundError):
            OutstandingService(session, settings).recompute_party("Nobody")

    def test_recompute_logged(self, customer, submit_sales_invoice, captured_logs):
        submit_sales_invoice("100", on=date(2024, 2, 1))
        records = [
            r for r in captured_logs() if r["message"] == "party_outstanding_recomputed"
        ]
        assert records[-1]["party"] == customer.name
        assert records[-1]["current"] == "100"

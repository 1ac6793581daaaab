"""
DocumentService -- submit and revert lifecycle of bookkeeping documents.

Responsibility:
    The document lifecycle hooks that drive the ledger:
    - submit/revert SalesInvoice and PurchaseInvoice,
    - submit/revert Payment (with outstanding-balance reconciliation),
    - submit/revert JournalEntry.

Architecture position:
    Kernel > Services -- orchestration.  Composes NamingService,
    PaymentService, OutstandingService and the posting rule registry.
    Unlike the flush-only services it composes, this service OWNS the
    transaction boundary: each public method runs in one
    ``transaction_scope`` that commits on full success and rolls back on any
    failure, so no ledger entry or outstanding update is ever partially
    written.

Invariants enforced:
    - Every submitted document's postings balance (LedgerPosting).
    - Reversal is the exact inverse of submission.
    - Invoice outstanding and party outstanding are updated in the same
      transaction as the postings that justify them.
    - A document is submitted at most once and reverted at most once.
    - An invoice with submitted payments against it cannot be reverted.

Failure modes:
    - DocumentStateError on submit of a submitted document, or revert of a
      draft or cancelled one.
    - InvoiceHasPaymentsError on revert of a (partly) paid invoice.
    - Every error of the composed services propagates unchanged after the
      rollback.

Audit relevance:
    ``<document>_submitted`` / ``<document>_reverted`` are logged with the
    number of ledger entries written, inside a LogContext carrying the
    reference type, reference name and party.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.db.engine import transaction_scope
from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.domain.settings import AccountingSettings
from books_kernel.domain.values import Money
from books_kernel.exceptions import DocumentStateError, InvoiceHasPaymentsError
from books_kernel.logging_config import LogContext, get_logger
from books_kernel.models.invoice import Invoice, InvoiceType
from books_kernel.models.journal_entry import JournalEntry
from books_kernel.models.ledger import LedgerEntry, ReferenceType
from books_kernel.models.party import Party
from books_kernel.models.payment import Payment, PaymentReference
from books_kernel.posting_rules.registry import PostingRuleRegistry, build_default_registry
from books_kernel.services.naming_service import NamingService
from books_kernel.services.outstanding_service import OutstandingChange, OutstandingService
from books_kernel.services.payment_service import PaymentService

logger = get_logger("services.document")


@dataclass(frozen=True)
class DocumentResult:
    """Outcome of one submit or revert."""

    reference_type: str
    reference_name: str
    entry_count: int
    outstanding_changes: tuple[OutstandingChange, ...] = ()


def compute_invoice_totals(invoice: Invoice, currency: str = "USD") -> Invoice:
    """
    Recompute item amounts, tax amounts, net total and grand total.

    ``item.amount = quantity * rate``; ``tax.amount = net_total * rate / 100``
    rounded to the minor units of the invoice currency (``currency`` when the
    invoice has none); ``grand_total = net_total + sum(tax.amount)``.  A
    missing quantity counts as 1.
    """
    code = invoice.currency or currency
    net_total = Money.zero(code)
    for item in invoice.items:
        quantity = item.quantity if item.quantity is not None else Decimal("1")
        amount = Money.of(item.rate, code) * quantity
        item.amount = amount.amount
        net_total = net_total + amount

    tax_total = Money.zero(code)
    for tax in invoice.taxes:
        amount = (net_total * (tax.rate / Decimal("100"))).round()
        tax.amount = amount.amount
        tax_total = tax_total + amount

    invoice.net_total = net_total.amount
    invoice.grand_total = (net_total + tax_total).amount
    return invoice


class DocumentService:
    """
    Submit/revert orchestration for invoices, payments and journal entries.

    Contract:
        Pass ORM documents (new or already persisted); they are added to the
        session as needed.  Each call is one atomic unit of work.

    Guarantees:
        - Commit only on full success; rollback and re-raise on any failure.
        - The settings snapshot passed at construction is used unchanged for
          every call.
    """

    def __init__(
        self,
        session: Session,
        settings: AccountingSettings,
        clock: Clock | None = None,
        registry: PostingRuleRegistry | None = None,
    ):
        self.session = session
        self.settings = settings
        self._clock = clock or SystemClock()
        self._registry = registry or build_default_registry()
        self._naming = NamingService(session)
        self._payments = PaymentService(session, settings)
        self._outstanding = OutstandingService(session, settings)

    # -----------------------------------------------------------------
    # Invoices
    # -----------------------------------------------------------------

    def submit_invoice(self, invoice: Invoice) -> DocumentResult:
        reference_type = InvoiceType(invoice.invoice_type).value
        with transaction_scope(self.session):
            self._prepare(invoice, reference_type)
            with self.session.no_autoflush:
                if invoice.currency is None:
                    invoice.currency = self.settings.currency
                if invoice.account is None:
                    invoice.account = self._default_party_account(invoice)
            self.session.add(invoice)
            with LogContext.bind(
                reference_type=reference_type,
                reference_name=invoice.name,
                party=invoice.party,
            ):
                compute_invoice_totals(invoice)

                entries = self._post(invoice, reference_type)
                invoice.submitted = True
                invoice.outstanding_amount = invoice.grand_total
                self.session.flush()
                self._outstanding.recompute_party(invoice.party)

                logger.info(
                    "invoice_submitted",
                    extra={
                        "grand_total": str(invoice.grand_total),
                        "entry_count": len(entries),
                    },
                )
        return DocumentResult(reference_type, invoice.name, len(entries))

    def revert_invoice(self, invoice: Invoice) -> DocumentResult:
        reference_type = InvoiceType(invoice.invoice_type).value
        with transaction_scope(self.session):
            self._require_submitted(invoice, reference_type)
            with LogContext.bind(
                reference_type=reference_type,
                reference_name=invoice.name,
                party=invoice.party,
            ):
                payments = self._payments_against(reference_type, invoice.name)
                if payments:
                    raise InvoiceHasPaymentsError(invoice.name, payments)

                entries = self._post(invoice, reference_type, reverse=True)
                invoice.cancelled = True
                self.session.flush()
                self._outstanding.recompute_party(invoice.party)

                logger.info("invoice_reverted", extra={"entry_count": len(entries)})
        return DocumentResult(reference_type, invoice.name, len(entries))

    # -----------------------------------------------------------------
    # Payments
    # -----------------------------------------------------------------

    def submit_payment(self, payment: Payment) -> DocumentResult:
        reference_type = ReferenceType.PAYMENT.value
        with transaction_scope(self.session):
            self._prepare(payment, reference_type)
            with self.session.no_autoflush:
                self._payments.fill_defaults(payment)
            self.session.add(payment)
            with LogContext.bind(
                reference_type=reference_type,
                reference_name=payment.name,
                party=payment.party,
            ):
                self._payments.validate(payment)
                changes = self._outstanding.apply_payment(payment)
                entries = self._post(payment, reference_type)
                payment.submitted = True
                self.session.flush()

                logger.info(
                    "payment_submitted",
                    extra={
                        "amount": str(payment.amount),
                        "writeoff": str(payment.writeoff or 0),
                        "entry_count": len(entries),
                        "invoices": [c.reference_name for c in changes],
                    },
                )
        return DocumentResult(reference_type, payment.name, len(entries), tuple(changes))

    def revert_payment(self, payment: Payment) -> DocumentResult:
        reference_type = ReferenceType.PAYMENT.value
        with transaction_scope(self.session):
            self._require_submitted(payment, reference_type)
            with LogContext.bind(
                reference_type=reference_type,
                reference_name=payment.name,
                party=payment.party,
            ):
                changes = self._outstanding.reverse_payment(payment)
                entries = self._post(payment, reference_type, reverse=True)
                payment.cancelled = True
                self.session.flush()

                logger.info("payment_reverted", extra={"entry_count": len(entries)})
        return DocumentResult(reference_type, payment.name, len(entries), tuple(changes))

    # -----------------------------------------------------------------
    # Journal entries
    # -----------------------------------------------------------------

    def submit_journal_entry(self, entry: JournalEntry) -> DocumentResult:
        reference_type = ReferenceType.JOURNAL_ENTRY.value
        with transaction_scope(self.session):
            self._prepare(entry, reference_type)
            self.session.add(entry)
            with LogContext.bind(reference_type=reference_type, reference_name=entry.name):
                entries = self._post(entry, reference_type)
                entry.submitted = True
                self.session.flush()
                logger.info("journal_entry_submitted", extra={"entry_count": len(entries)})
        return DocumentResult(reference_type, entry.name, len(entries))

    def revert_journal_entry(self, entry: JournalEntry) -> DocumentResult:
        reference_type = ReferenceType.JOURNAL_ENTRY.value
        with transaction_scope(self.session):
            self._require_submitted(entry, reference_type)
            with LogContext.bind(reference_type=reference_type, reference_name=entry.name):
                entries = self._post(entry, reference_type, reverse=True)
                entry.cancelled = True
                self.session.flush()
                logger.info("journal_entry_reverted", extra={"entry_count": len(entries)})
        return DocumentResult(reference_type, entry.name, len(entries))

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _prepare(self, document: Any, reference_type: str) -> None:
        """
        Check the document is a draft, then name and date it.

        Runs without autoflush: a draft already in the session must not be
        flushed while its NOT NULL columns are still unset.
        """
        if document.submitted or document.cancelled:
            raise DocumentStateError(
                reference_type, document.name or "(unnamed)", "already submitted"
            )
        with self.session.no_autoflush:
            if not document.name:
                document.name = self._naming.next_name(reference_type)
            if document.date is None:
                document.date = self._clock.today()

    @staticmethod
    def _require_submitted(document: Any, reference_type: str) -> None:
        if not document.submitted:
            raise DocumentStateError(reference_type, document.name, "not submitted")
        if document.cancelled:
            raise DocumentStateError(reference_type, document.name, "already reverted")

    def _post(self, document: Any, reference_type: str, reverse: bool = False) -> list[LedgerEntry]:
        rule = self._registry.get_rule(reference_type)
        entries: list[LedgerEntry] = []
        for posting in rule.build_postings(document, self.session, self.settings):
            entries.extend(posting.post_reverse() if reverse else posting.post())
        return entries

    def _default_party_account(self, invoice: Invoice) -> str:
        party = self.session.execute(
            select(Party).where(Party.name == invoice.party)
        ).scalar_one_or_none()
        if party is not None and party.default_account:
            return party.default_account
        if invoice.is_sales:
            return self.settings.receivable_account
        return self.settings.payable_account

    def _payments_against(self, reference_type: str, reference_name: str) -> list[str]:
        return list(
            self.session.execute(
                select(Payment.name)
                .join(PaymentReference, PaymentReference.payment_id == Payment.id)
                .where(
                    PaymentReference.reference_type == reference_type,
                    PaymentReference.reference_name == reference_name,
                    Payment.submitted.is_(True),
                    Payment.cancelled.is_(False),
                )
                .order_by(Payment.name)
            ).scalars()
        )

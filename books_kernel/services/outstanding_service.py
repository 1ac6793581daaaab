"""
OutstandingService -- invoice and party outstanding-balance reconciliation.

Responsibility:
    Keeps every invoice's ``outstanding_amount`` and every party's aggregate
    ``outstanding_amount`` consistent with the payments submitted against
    them and reverted from them.

Architecture position:
    Kernel > Services -- imperative shell.  Called by DocumentService inside
    the same transaction scope as the payment's ledger postings, so the
    postings and the balance updates commit or roll back together.

Invariants enforced:
    - An invoice's outstanding never goes negative: each allocation must be
      > 0 and <= the invoice's current outstanding (which defaults to the
      grand total when never set).
    - Party outstanding is recomputed from scratch (sum over the party's
      submitted, non-cancelled invoices of the types its role covers),
      never patched incrementally.
    - Recompute is serialized per party: the party row is locked with
      ``SELECT ... FOR UPDATE`` before the invoices are summed.  Invoices
      are locked the same way before their read-modify-write.

Failure modes:
    - OverpaymentError: allocation <= 0 or > current outstanding.
    - DocumentNotFoundError: referenced invoice or party does not exist.
    - DocumentStateError: payment against an unsubmitted or cancelled
      invoice.
    - ValueError: a party has invoices outside the company currency.

Audit relevance:
    ``invoice_outstanding_updated`` and ``party_outstanding_recomputed`` log
    the before/after amounts of every change.
"""

from __future__ import annotations

from dataclasses import dataclass
from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.domain.values import Money
from books_kernel.exceptions import (
    DocumentNotFoundError,
    DocumentStateError,
    OverpaymentError,
)
from books_kernel.logging_config import get_logger
from books_kernel.models.invoice import Invoice, InvoiceType
from books_kernel.models.ledger import INVOICE_REFERENCE_TYPES
from books_kernel.models.party import Party, PartyRole
from books_kernel.models.payment import Payment, PaymentReference
from books_kernel.services.base import BaseService

logger = get_logger("services.outstanding")

_ROLE_INVOICE_TYPES: dict[str, tuple[str, ...]] = {
    PartyRole.CUSTOMER.value: (InvoiceType.SALES.value,),
    PartyRole.SUPPLIER.value: (InvoiceType.PURCHASE.value,),
    PartyRole.BOTH.value: (InvoiceType.SALES.value, InvoiceType.PURCHASE.value),
}


@dataclass(frozen=True)
class OutstandingChange:
    """Before/after outstanding amount of one invoice."""

    reference_type: str
    reference_name: str
    previous: Money
    current: Money


class OutstandingService(BaseService[Invoice]):
    """
    Outstanding-balance reconciler.

    Contract:
        ``apply_payment`` on submission, ``reverse_payment`` on revert,
        ``recompute_party`` whenever an invoice's outstanding changes
        (including invoice submit/revert).

    Guarantees:
        - Flush only; the caller's transaction scope commits.
        - Parties are locked in name order to avoid lock-order deadlocks
          between concurrent reconciliations.
    """

    def __init__(self, session: Session, settings: AccountingSettings):
        super().__init__(session)
        self.settings = settings

    # -----------------------------------------------------------------
    # Payments
    # -----------------------------------------------------------------

    def apply_payment(self, payment: Payment) -> list[OutstandingChange]:
        """
        Reduce each referenced invoice's outstanding by its allocation, then
        recompute the affected parties.
        """
        changes = []
        parties: set[str] = set()
        for ref in self._invoice_references(payment):
            invoice = self._lock_invoice(ref.reference_type, ref.reference_name)
            if not invoice.submitted or invoice.cancelled:
                raise DocumentStateError(
                    ref.reference_type,
                    ref.reference_name,
                    "payments can only be made against submitted invoices",
                )

            outstanding = Money.of(invoice.effective_outstanding, invoice.currency)
            allocated = Money.of(ref.amount, invoice.currency)
            if not allocated.is_positive or allocated > outstanding:
                raise OverpaymentError(
                    ref.reference_name, str(allocated.amount), str(outstanding.amount)
                )

            invoice.outstanding_amount = (outstanding - allocated).amount
            changes.append(self._record(invoice, outstanding))
            parties.add(invoice.party)

        self.session.flush()
        for party in sorted(parties):
            self.recompute_party(party)
        return changes

    def reverse_payment(self, payment: Payment) -> list[OutstandingChange]:
        """
        Add each allocation back to its invoice's outstanding, then
        recompute the affected parties.
        """
        changes = []
        parties: set[str] = set()
        for ref in self._invoice_references(payment):
            invoice = self._lock_invoice(ref.reference_type, ref.reference_name)
            outstanding = Money.of(invoice.effective_outstanding, invoice.currency)
            invoice.outstanding_amount = (outstanding + Money.of(ref.amount, invoice.currency)).amount
            changes.append(self._record(invoice, outstanding))
            parties.add(invoice.party)

        self.session.flush()
        for party in sorted(parties):
            self.recompute_party(party)
        return changes

    # -----------------------------------------------------------------
    # Parties
    # -----------------------------------------------------------------

    def recompute_party(self, party_name: str) -> Money:
        """
        Recompute a party's aggregate outstanding amount from scratch.

        Returns:
            The new aggregate outstanding amount.
        """
        party = self.session.execute(
            select(Party)
            .where(Party.name == party_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if party is None:
            raise DocumentNotFoundError("Party", party_name)

        invoice_types = _ROLE_INVOICE_TYPES[PartyRole(party.role).value]
        invoices = self.session.execute(
            select(Invoice).where(
                Invoice.party == party_name,
                Invoice.invoice_type.in_(invoice_types),
                Invoice.submitted.is_(True),
                Invoice.cancelled.is_(False),
            )
        ).scalars()
        total = Money.total(
            (Money.of(invoice.effective_outstanding, invoice.currency) for invoice in invoices),
            self.settings.currency,
        )

        previous = party.outstanding_amount
        party.outstanding_amount = total.amount
        self.session.flush()

        logger.info(
            "party_outstanding_recomputed",
            extra={
                "party": party_name,
                "role": str(PartyRole(party.role).value),
                "previous": str(previous),
                "current": str(total.amount),
            },
        )
        return total

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    @staticmethod
    def _invoice_references(payment: Payment) -> list[PaymentReference]:
        return [
            ref for ref in payment.references
            if ref.reference_type in INVOICE_REFERENCE_TYPES
        ]

    def _lock_invoice(self, reference_type: str, reference_name: str) -> Invoice:
        invoice = self.session.execute(
            select(Invoice)
            .where(
                Invoice.name == reference_name,
                Invoice.invoice_type == reference_type,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if invoice is None:
            raise DocumentNotFoundError(reference_type, reference_name)
        return invoice

    def _record(self, invoice: Invoice, previous: Money) -> OutstandingChange:
        change = OutstandingChange(
            reference_type=str(InvoiceType(invoice.invoice_type).value),
            reference_name=invoice.name,
            previous=previous,
            current=Money.of(invoice.outstanding_amount, previous.currency),
        )
        logger.info(
            "invoice_outstanding_updated",
            extra={
                "invoice": invoice.name,
                "previous": str(previous.amount),
                "current": str(invoice.outstanding_amount),
            },
        )
        return change

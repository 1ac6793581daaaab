"""
Invoice posting rule.

Sales invoice:    Dr receivable (grand total) / Cr each item's income
                  account / Cr each tax account.
Purchase invoice: the mirror image -- Cr payable / Dr items / Dr taxes.

Zero-amount item and tax rows produce no lines.
"""

from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.models.invoice import Invoice, InvoiceType
from books_kernel.posting_rules.base import BasePostingRule
from books_kernel.services.ledger_posting import LedgerPosting


class InvoicePostingRule(BasePostingRule):
    """Postings for a submitted SalesInvoice or PurchaseInvoice."""

    @property
    def reference_types(self) -> tuple[str, ...]:
        return (InvoiceType.SALES.value, InvoiceType.PURCHASE.value)

    def build_postings(
        self, document: Invoice, session: Session, settings: AccountingSettings
    ) -> list[LedgerPosting]:
        invoice = document
        posting = self.new_posting(
            session,
            settings,
            reference_type=str(InvoiceType(invoice.invoice_type).value),
            document=invoice,
            party=invoice.party,
        )

        # Party side on the receivable/payable account, the rest on the other
        party_side, other_side = (
            (posting.debit, posting.credit)
            if invoice.is_sales
            else (posting.credit, posting.debit)
        )

        party_side(invoice.account, invoice.grand_total)
        for item in invoice.items:
            if item.amount:
                other_side(item.account, item.amount)
        for tax in invoice.taxes:
            if tax.amount:
                other_side(tax.account, tax.amount)

        return [posting]

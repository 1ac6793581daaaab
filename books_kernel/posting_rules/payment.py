"""
Payment posting rule.

A payment emits up to two independent postings:

1. The money movement: Dr ``payment_account`` / Cr ``account`` for the
   payment amount.
2. The write-off, only when ``writeoff`` is non-zero:
   - Receive: Dr write-off account / Cr ``account``
   - Pay:     Dr ``payment_account`` / Cr write-off account

so that the party account is relieved by ``amount + writeoff``, which is
what the invoices were allocated.
"""

from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.exceptions import MissingConfigurationError
from books_kernel.models.ledger import ReferenceType
from books_kernel.models.payment import Payment, PaymentType
from books_kernel.posting_rules.base import BasePostingRule
from books_kernel.services.ledger_posting import LedgerPosting


class PaymentPostingRule(BasePostingRule):
    """Postings for a submitted Payment."""

    @property
    def reference_types(self) -> tuple[str, ...]:
        return (ReferenceType.PAYMENT.value,)

    def build_postings(
        self, document: Payment, session: Session, settings: AccountingSettings
    ) -> list[LedgerPosting]:
        payment = document
        postings = []

        movement = self.new_posting(
            session,
            settings,
            reference_type=ReferenceType.PAYMENT.value,
            document=payment,
            party=payment.party,
        )
        movement.debit(payment.payment_account, payment.amount)
        movement.credit(payment.account, payment.amount)
        postings.append(movement)

        if payment.writeoff:
            postings.append(self._writeoff_posting(payment, session, settings))

        return postings

    def _writeoff_posting(
        self, payment: Payment, session: Session, settings: AccountingSettings
    ) -> LedgerPosting:
        if not settings.write_off_account:
            raise MissingConfigurationError(
                "write_off_account",
                f"payment {payment.name} has a write-off of {payment.writeoff}",
            )

        writeoff = self.new_posting(
            session,
            settings,
            reference_type=ReferenceType.PAYMENT.value,
            document=payment,
            party=payment.party,
        )
        if payment.payment_type == PaymentType.PAY:
            writeoff.debit(payment.payment_account, payment.writeoff)
            writeoff.credit(settings.write_off_account, payment.writeoff)
        else:
            writeoff.debit(settings.write_off_account, payment.writeoff)
            writeoff.credit(payment.account, payment.writeoff)
        return writeoff

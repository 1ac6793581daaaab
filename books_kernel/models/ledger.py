"""
Module: books_kernel.models.ledger
Responsibility: ORM persistence for posted ledger entries -- the append-only
    store every report reads.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Entries are created only by LedgerPosting.post() / post_reverse().
    - The only column ever updated after insert is ``reverted``, set once
      when a reversing posting is committed for the same reference.
    - Entries are never deleted.

Failure modes:
    - None at the ORM level; validation happens in LedgerPosting before any
      row is added to the session.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from books_kernel.db.base import TrackedBase


class ReferenceType(str, Enum):
    """Document types that post to the ledger."""

    SALES_INVOICE = "SalesInvoice"
    PURCHASE_INVOICE = "PurchaseInvoice"
    PAYMENT = "Payment"
    JOURNAL_ENTRY = "JournalEntry"


INVOICE_REFERENCE_TYPES: frozenset[str] = frozenset(
    {ReferenceType.SALES_INVOICE.value, ReferenceType.PURCHASE_INVOICE.value}
)


class LedgerEntry(TrackedBase):
    """
    One posted debit/credit line.

    Contract:
        Exactly one of debit/credit is normally non-zero; both are
        non-negative.  ``reverted`` marks entries cancelled by a reversing
        posting for the same (reference_type, reference_name).

    Non-goals:
        - Does NOT enforce balance across entries; LedgerPosting does that
          before insert.
    """

    __tablename__ = "ledger_entries"

    __table_args__ = (
        Index("idx_ledger_reference", "reference_type", "reference_name"),
        Index("idx_ledger_account_date", "account", "date"),
        Index("idx_ledger_party", "party"),
    )

    account: Mapped[str] = mapped_column(String(140), nullable=False)

    party: Mapped[str | None] = mapped_column(String(140), nullable=True)

    debit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    credit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    date: Mapped[dt.date] = mapped_column(nullable=False)

    reference_type: Mapped[str] = mapped_column(String(50), nullable=False)

    reference_name: Mapped[str] = mapped_column(String(140), nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    reverted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.reference_type}:{self.reference_name} "
            f"{self.account} Dr {self.debit} Cr {self.credit}>"
        )

    @property
    def balance(self) -> Decimal:
        """Debit-normal balance of this line (debit - credit)."""
        return self.debit - self.credit

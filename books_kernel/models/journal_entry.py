"""
Module: books_kernel.models.journal_entry
Responsibility: ORM persistence for manual journal entries and their account
    rows.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by JournalEntryPostingRule at post time):
    - sum(accounts.debit) == sum(accounts.credit).
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from books_kernel.db.base import TrackedBase


class JournalEntryType(str, Enum):
    JOURNAL_ENTRY = "Journal Entry"
    BANK_ENTRY = "Bank Entry"
    CASH_ENTRY = "Cash Entry"
    CREDIT_CARD_ENTRY = "Credit Card Entry"
    DEBIT_NOTE = "Debit Note"
    CREDIT_NOTE = "Credit Note"
    CONTRA_ENTRY = "Contra Entry"
    WRITE_OFF_ENTRY = "Write Off Entry"
    OPENING_ENTRY = "Opening Entry"
    DEPRECIATION_ENTRY = "Depreciation Entry"


class JournalEntry(TrackedBase):
    """A manual, balanced set of debit/credit rows."""

    __tablename__ = "journal_entries"

    __table_args__ = (UniqueConstraint("name", name="uq_journal_entry_name"),)

    name: Mapped[str] = mapped_column(String(140), nullable=False)

    entry_type: Mapped[JournalEntryType] = mapped_column(
        String(40), nullable=False, default=JournalEntryType.JOURNAL_ENTRY
    )

    date: Mapped[dt.date] = mapped_column(nullable=False)

    user_remark: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    submitted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    cancelled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    accounts: Mapped[list["JournalEntryAccount"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryAccount.idx",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.name} {self.entry_type}>"


class JournalEntryAccount(TrackedBase):
    __tablename__ = "journal_entry_accounts"

    journal_entry_id: Mapped[UUID] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False
    )

    idx: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    account: Mapped[str] = mapped_column(String(140), nullable=False)

    party: Mapped[str | None] = mapped_column(String(140), nullable=True)

    debit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    credit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    journal_entry: Mapped[JournalEntry] = relationship(back_populates="accounts")

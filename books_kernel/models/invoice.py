"""
Module: books_kernel.models.invoice
Responsibility: ORM persistence for sales and purchase invoices with their
    item and tax rows.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - After submission, the only field rewritten is ``outstanding_amount``
      (by OutstandingService) and ``cancelled`` (by DocumentService on
      revert).
    - ``outstanding_amount`` None means "never reconciled"; readers treat
      it as equal to ``grand_total``.

Failure modes:
    - IntegrityError on duplicate invoice name.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from books_kernel.db.base import TrackedBase


class InvoiceType(str, Enum):
    SALES = "SalesInvoice"
    PURCHASE = "PurchaseInvoice"


class InvoiceStatus(str, Enum):
    """Derived lifecycle status of an invoice."""

    DRAFT = "Draft"
    UNPAID = "Unpaid"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class Invoice(TrackedBase):
    """
    Sales or purchase invoice.

    Contract:
        ``account`` is the receivable (sales) or payable (purchase) account
        debited/credited for the grand total; items carry the income or
        expense accounts, taxes the tax accounts.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("name", name="uq_invoice_name"),
        Index("idx_invoice_party", "party", "invoice_type"),
    )

    name: Mapped[str] = mapped_column(String(140), nullable=False)

    invoice_type: Mapped[InvoiceType] = mapped_column(String(20), nullable=False)

    party: Mapped[str] = mapped_column(String(140), nullable=False)

    date: Mapped[dt.date] = mapped_column(nullable=False)

    account: Mapped[str] = mapped_column(String(140), nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    net_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    grand_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    outstanding_amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    submitted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    cancelled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    items: Mapped[list["InvoiceItem"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.idx",
    )

    taxes: Mapped[list["InvoiceTax"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceTax.idx",
    )

    def __repr__(self) -> str:
        return f"<{self.invoice_type} {self.name} {self.party} {self.grand_total}>"

    @property
    def is_sales(self) -> bool:
        return self.invoice_type == InvoiceType.SALES

    @property
    def effective_outstanding(self) -> Decimal:
        """Outstanding amount, defaulting to the grand total if never set."""
        if self.outstanding_amount is None:
            return self.grand_total
        return self.outstanding_amount

    @property
    def status(self) -> InvoiceStatus:
        if self.cancelled:
            return InvoiceStatus.CANCELLED
        if not self.submitted:
            return InvoiceStatus.DRAFT
        if self.effective_outstanding == 0:
            return InvoiceStatus.PAID
        return InvoiceStatus.UNPAID


class InvoiceItem(TrackedBase):
    """One billed line: ``amount = quantity * rate`` booked to ``account``."""

    __tablename__ = "invoice_items"

    invoice_id: Mapped[UUID] = mapped_column(ForeignKey("invoices.id"), nullable=False)

    idx: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    item: Mapped[str] = mapped_column(String(140), nullable=False)

    account: Mapped[str] = mapped_column(String(140), nullable=False)

    quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("1"))

    rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    invoice: Mapped[Invoice] = relationship(back_populates="items")


class InvoiceTax(TrackedBase):
    """A tax row: ``rate`` percent of the net total booked to ``account``."""

    __tablename__ = "invoice_taxes"

    invoice_id: Mapped[UUID] = mapped_column(ForeignKey("invoices.id"), nullable=False)

    idx: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    account: Mapped[str] = mapped_column(String(140), nullable=False)

    rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    invoice: Mapped[Invoice] = relationship(back_populates="taxes")

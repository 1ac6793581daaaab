"""
Module: books_kernel.models.payment
Responsibility: ORM persistence for payments and their invoice references
    (per-invoice allocations).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by PaymentService / DocumentService, not the ORM):
    - account != payment_account.
    - amount + writeoff >= sum(references.amount).
    - A non-zero writeoff requires a configured write-off account.
    - With exactly one reference, amount and the reference's allocation are
      kept equal by PaymentService.apply_change().

Failure modes:
    - IntegrityError on duplicate payment name.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from books_kernel.db.base import TrackedBase


class PaymentType(str, Enum):
    RECEIVE = "Receive"
    PAY = "Pay"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CHEQUE = "Cheque"
    TRANSFER = "Transfer"


class Payment(TrackedBase):
    """
    Money received from a customer or paid to a supplier.

    Contract:
        ``account`` is the account money leaves (credited), ``payment_account``
        the account money arrives in (debited).  For a receipt that is
        Debtors -> Bank; for a payment Bank -> Creditors.
    """

    __tablename__ = "payments"

    __table_args__ = (
        UniqueConstraint("name", name="uq_payment_name"),
        Index("idx_payment_party", "party"),
    )

    name: Mapped[str] = mapped_column(String(140), nullable=False)

    party: Mapped[str | None] = mapped_column(String(140), nullable=True)

    payment_type: Mapped[PaymentType | None] = mapped_column(String(20), nullable=True)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        String(20), nullable=False, default=PaymentMethod.CASH
    )

    account: Mapped[str | None] = mapped_column(String(140), nullable=True)

    payment_account: Mapped[str | None] = mapped_column(String(140), nullable=True)

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    writeoff: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)

    date: Mapped[dt.date] = mapped_column(nullable=False)

    reference_id: Mapped[str | None] = mapped_column(String(140), nullable=True)

    clearance_date: Mapped[dt.date | None] = mapped_column(nullable=True)

    submitted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    cancelled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    references: Mapped[list["PaymentReference"]] = relationship(
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentReference.idx",
    )

    def __repr__(self) -> str:
        return f"<Payment {self.name} {self.payment_type} {self.amount}>"

    @property
    def allocated_total(self) -> Decimal:
        return sum((ref.amount for ref in self.references), Decimal("0"))


class PaymentReference(TrackedBase):
    """The part of a payment allocated to one invoice."""

    __tablename__ = "payment_references"

    __table_args__ = (
        Index("idx_payment_reference_target", "reference_type", "reference_name"),
    )

    payment_id: Mapped[UUID] = mapped_column(ForeignKey("payments.id"), nullable=False)

    idx: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    reference_type: Mapped[str] = mapped_column(String(50), nullable=False)

    reference_name: Mapped[str] = mapped_column(String(140), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    payment: Mapped[Payment] = relationship(back_populates="references")

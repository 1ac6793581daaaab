"""
Module: books_kernel.models.party
Responsibility: ORM persistence for customers and suppliers, including their
    derived aggregate outstanding amount.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - outstanding_amount is derived: it is only ever written by
      OutstandingService.recompute_party(), which sums the outstanding
      amounts of the party's submitted, non-cancelled invoices.

Failure modes:
    - IntegrityError on duplicate party name.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from books_kernel.db.base import TrackedBase


class PartyRole(str, Enum):
    """Which side of the books a party trades on."""

    CUSTOMER = "Customer"
    SUPPLIER = "Supplier"
    BOTH = "Both"


class Party(TrackedBase):
    """
    External entity the organization sells to or buys from.

    Contract:
        ``role`` selects which invoice types count toward
        ``outstanding_amount`` (Customer: sales, Supplier: purchases,
        Both: both).

    Non-goals:
        - Credit limits and payment terms are not modelled.
    """

    __tablename__ = "parties"

    __table_args__ = (UniqueConstraint("name", name="uq_party_name"),)

    name: Mapped[str] = mapped_column(String(140), nullable=False)

    role: Mapped[PartyRole] = mapped_column(String(20), nullable=False)

    default_account: Mapped[str | None] = mapped_column(String(140), nullable=True)

    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)

    outstanding_amount: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )

    def __repr__(self) -> str:
        return f"<Party {self.name} ({self.role})>"

    @property
    def is_customer(self) -> bool:
        return self.role in (PartyRole.CUSTOMER, PartyRole.BOTH)

    @property
    def is_supplier(self) -> bool:
        return self.role in (PartyRole.SUPPLIER, PartyRole.BOTH)

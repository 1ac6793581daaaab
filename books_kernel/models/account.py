"""
Module: books_kernel.models.account
Responsibility: ORM persistence for the chart of accounts -- the target of
    every ledger entry and the hierarchy every report rolls values up.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Account.name is globally unique (uq_account_name); ledger entries and
      parent links reference accounts by name.
    - Only non-group accounts are posted against (enforced by LedgerPosting,
      not this model).
    - The parent-link graph is an acyclic forest (verified when a report
      builds its account tree, not on write).

Failure modes:
    - IntegrityError on duplicate account name.
"""

from enum import Enum

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from books_kernel.db.base import TrackedBase


class RootType(str, Enum):
    """Top-level classification of an account."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    INCOME = "Income"
    EXPENSE = "Expense"


# Increases to these are recorded as credits
CREDIT_NORMAL_ROOT_TYPES: frozenset[str] = frozenset(
    {RootType.LIABILITY.value, RootType.EQUITY.value, RootType.INCOME.value}
)


class AccountType(str, Enum):
    """Optional finer classification used to pick default accounts."""

    RECEIVABLE = "Receivable"
    PAYABLE = "Payable"
    BANK = "Bank"
    CASH = "Cash"
    INCOME_ACCOUNT = "Income Account"
    EXPENSE_ACCOUNT = "Expense Account"
    COST_OF_GOODS_SOLD = "Cost of Goods Sold"
    TAX = "Tax"
    EQUITY = "Equity"
    FIXED_ASSET = "Fixed Asset"
    STOCK = "Stock"
    ROUND_OFF = "Round Off"


def is_credit_normal(root_type: str) -> bool:
    """True iff balances of this root type are reported as credit - debit."""
    return root_type in CREDIT_NORMAL_ROOT_TYPES


class Account(TrackedBase):
    """
    Chart of accounts entry -- a single node in the ledger hierarchy.

    Contract:
        Group accounts exist only to roll up their descendants; they are
        never posted against.  ``parent_account`` is the parent's name, or
        None for a root.

    Guarantees:
        - name is unique and non-null.
        - root_type is one of Asset, Liability, Equity, Income, Expense.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("name", name="uq_account_name"),
        Index("idx_account_root_type", "root_type"),
        Index("idx_account_parent", "parent_account"),
    )

    name: Mapped[str] = mapped_column(String(140), nullable=False)

    root_type: Mapped[RootType] = mapped_column(String(20), nullable=False)

    is_group: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    parent_account: Mapped[str | None] = mapped_column(String(140), nullable=True)

    account_type: Mapped[AccountType | None] = mapped_column(String(40), nullable=True)

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.root_type})>"

    @property
    def is_credit_normal(self) -> bool:
        return is_credit_normal(self.root_type)

    @property
    def is_root(self) -> bool:
        return self.parent_account is None

"""
Module: books_kernel.selectors.account_selector
Responsibility: Read-only access to the chart of accounts as immutable
    records, the input of every report's account tree.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.db.types import enum_value
from books_kernel.models.account import Account, is_credit_normal
from books_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountRecord:
    """Immutable snapshot of one account."""

    name: str
    root_type: str
    is_group: bool
    parent_account: str | None = None
    account_type: str | None = None

    @property
    def is_credit_normal(self) -> bool:
        return is_credit_normal(self.root_type)


class AccountSelector(BaseSelector[Account]):
    """Selector for chart-of-accounts queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def all_accounts(self, root_types: list[str] | None = None) -> list[AccountRecord]:
        """Every account, optionally restricted to some root types, by name."""
        query = select(Account).order_by(Account.name)
        if root_types is not None:
            query = query.where(Account.root_type.in_([enum_value(r) for r in root_types]))
        return [self._to_record(a) for a in self.session.execute(query).scalars()]

    def get(self, name: str) -> AccountRecord | None:
        account = self.session.execute(
            select(Account).where(Account.name == name)
        ).scalar_one_or_none()
        return self._to_record(account) if account is not None else None

    @staticmethod
    def _to_record(account: Account) -> AccountRecord:
        return AccountRecord(
            name=account.name,
            root_type=enum_value(account.root_type),
            is_group=account.is_group,
            parent_account=account.parent_account,
            account_type=(
                enum_value(account.account_type)
                if account.account_type is not None
                else None
            ),
        )

"""
Module: books_kernel.selectors.ledger_selector
Responsibility: Read-only queries over the ledger entry store: entries in a
    date window, entries of one reference document, and per-account
    debit/credit totals.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - No stored balances.  Every total is computed from ledger entries at
      query time.
    - By default only un-reverted entries are returned: a reverted posting
      and its reversal are both excluded from reports.
    - Sums are computed in Python over Decimal values; amounts are stored
      as exact decimal strings on SQLite, where SQL SUM would go through
      binary float.

Failure modes:
    - Returns empty results or zero totals when no entries match.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.db.types import enum_value
from books_kernel.models.ledger import LedgerEntry
from books_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LedgerEntryRecord:
    """Immutable snapshot of one ledger entry."""

    account: str
    party: str | None
    debit: Decimal
    credit: Decimal
    date: date
    reference_type: str
    reference_name: str
    currency: str
    reverted: bool

    @property
    def balance(self) -> Decimal:
        return self.debit - self.credit


@dataclass(frozen=True)
class AccountTotals:
    """Debit and credit totals of one account."""

    account: str
    debit_total: Decimal
    credit_total: Decimal
    entry_count: int

    @property
    def balance(self) -> Decimal:
        return self.debit_total - self.credit_total


class LedgerSelector(BaseSelector[LedgerEntry]):
    """
    Selector for ledger queries.

    Contract:
        Date windows are half-open ``(from_date, to_date]``, matching report
        date ranges.  ``from_date=None`` means "from the beginning".
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def entries(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        *,
        accounts: list[str] | None = None,
        include_reverted: bool = False,
    ) -> list[LedgerEntryRecord]:
        """Ledger entries in ``(from_date, to_date]``, ordered by date."""
        query = select(LedgerEntry)
        if from_date is not None:
            query = query.where(LedgerEntry.date > from_date)
        if to_date is not None:
            query = query.where(LedgerEntry.date <= to_date)
        if accounts is not None:
            query = query.where(LedgerEntry.account.in_(accounts))
        if not include_reverted:
            query = query.where(LedgerEntry.reverted.is_(False))
        query = query.order_by(LedgerEntry.date, LedgerEntry.created_at)

        return [self._to_record(e) for e in self.session.execute(query).scalars()]

    def entries_for_reference(
        self, reference_type: str, reference_name: str
    ) -> list[LedgerEntryRecord]:
        """Every entry (reverted or not) written for one document."""
        query = (
            select(LedgerEntry)
            .where(
                LedgerEntry.reference_type == enum_value(reference_type),
                LedgerEntry.reference_name == reference_name,
            )
            .order_by(LedgerEntry.created_at)
        )
        return [self._to_record(e) for e in self.session.execute(query).scalars()]

    def account_totals(
        self,
        to_date: date | None = None,
        *,
        include_reverted: bool = False,
    ) -> dict[str, AccountTotals]:
        """Debit/credit totals per account up to and including ``to_date``."""
        debits: dict[str, Decimal] = {}
        credits: dict[str, Decimal] = {}
        counts: dict[str, int] = {}
        for entry in self.entries(None, to_date, include_reverted=include_reverted):
            debits[entry.account] = debits.get(entry.account, Decimal("0")) + entry.debit
            credits[entry.account] = credits.get(entry.account, Decimal("0")) + entry.credit
            counts[entry.account] = counts.get(entry.account, 0) + 1

        return {
            account: AccountTotals(account, debits[account], credits[account], counts[account])
            for account in sorted(counts)
        }

    def account_balance(
        self, account: str, to_date: date | None = None, *, include_reverted: bool = False
    ) -> Decimal:
        """Debit-normal balance of one account."""
        return sum(
            (
                e.balance
                for e in self.entries(
                    None, to_date, accounts=[account], include_reverted=include_reverted
                )
            ),
            Decimal("0"),
        )

    def total_debits_credits(self, *, include_reverted: bool = False) -> tuple[Decimal, Decimal]:
        """Ledger-wide debit and credit totals; equal in a consistent ledger."""
        entries = self.entries(include_reverted=include_reverted)
        return (
            sum((e.debit for e in entries), Decimal("0")),
            sum((e.credit for e in entries), Decimal("0")),
        )

    @staticmethod
    def _to_record(entry: LedgerEntry) -> LedgerEntryRecord:
        return LedgerEntryRecord(
            account=entry.account,
            party=entry.party,
            debit=entry.debit,
            credit=entry.credit,
            date=entry.date,
            reference_type=entry.reference_type,
            reference_name=entry.reference_name,
            currency=entry.currency,
            reverted=entry.reverted,
        )

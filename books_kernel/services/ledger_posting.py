"""
LedgerPosting -- balanced, single-use builder of ledger entries.

Responsibility:
    Collects the debit/credit lines of one accounting effect of a business
    transaction and commits them to the ledger (``post``) or commits their
    exact inverse (``post_reverse``).  This is the only code path that
    creates LedgerEntry rows.

Architecture position:
    Kernel > Services -- imperative shell.  Built by posting rules
    (``books_kernel/posting_rules/``) and committed by DocumentService inside
    its transaction scope.

Invariants enforced:
    - Balance: sum(debit) == sum(credit) across all lines, checked exactly
      (Decimal, no tolerance) before any row is written.
    - Non-negative line amounts.
    - Lines target existing, non-group accounts.
    - Single use: a posting is consumed by its first post()/post_reverse().
    - Reversal marks every not-yet-reverted entry of the same reference
      ``reverted=True`` and writes swapped entries, so the net effect of a
      posting and its reversal on every account is zero.

Failure modes:
    - NegativeAmountError from debit()/credit().
    - ImbalancedPostingError, AccountNotFoundError, InvalidAccountError,
      PostingConsumedError from post()/post_reverse().  All are raised
      before anything is added to the session.

Audit relevance:
    Every committed posting logs ``posting_committed`` or
    ``posting_reversed`` with its reference and totals.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.db.types import enum_value
from books_kernel.domain.values import Money, to_decimal
from books_kernel.exceptions import (
    AccountNotFoundError,
    ImbalancedPostingError,
    InvalidAccountError,
    NegativeAmountError,
    PostingConsumedError,
)
from books_kernel.logging_config import get_logger
from books_kernel.models.account import Account
from books_kernel.models.ledger import LedgerEntry

logger = get_logger("services.ledger_posting")

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class PostingLine:
    """One not-yet-committed line of a posting."""

    account: str
    party: str | None
    debit: Decimal
    credit: Decimal


class LedgerPosting:
    """
    Builder for one balanced set of ledger lines.

    Contract:
        Construct per accounting effect, add lines with ``debit()`` and
        ``credit()`` (chainable), then call exactly one of ``post()`` or
        ``post_reverse()``.

    Guarantees:
        - Nothing is written unless every line validates and the posting
          balances.
        - Rows are added and flushed together; durability and rollback are
          the caller's transaction scope.

    Non-goals:
        - Does NOT commit.  DocumentService owns the transaction.
        - Does NOT merge lines per account; each call adds one line.
    """

    def __init__(
        self,
        session: Session,
        *,
        reference_type: str,
        reference_name: str,
        date: dt.date,
        currency: str,
        party: str | None = None,
    ):
        self.session = session
        self.reference_type = enum_value(reference_type)
        self.reference_name = reference_name
        self.date = date
        self.currency = currency
        self.party = party
        self._lines: list[PostingLine] = []
        self._consumed = False

    def __repr__(self) -> str:
        return (
            f"<LedgerPosting {self.reference_type}:{self.reference_name} "
            f"lines={len(self._lines)}>"
        )

    @property
    def reference(self) -> str:
        return f"{self.reference_type} {self.reference_name}"

    @property
    def lines(self) -> tuple[PostingLine, ...]:
        return tuple(self._lines)

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self._lines), _ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self._lines), _ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit

    # -----------------------------------------------------------------
    # Building
    # -----------------------------------------------------------------

    def debit(
        self, account: str, amount: Money | Decimal | str | int, party: str | None = None
    ) -> LedgerPosting:
        """Append a debit line.  ``party`` defaults to the posting's party."""
        value = self._amount(account, amount)
        self._lines.append(PostingLine(account, party or self.party, value, _ZERO))
        return self

    def credit(
        self, account: str, amount: Money | Decimal | str | int, party: str | None = None
    ) -> LedgerPosting:
        """Append a credit line.  ``party`` defaults to the posting's party."""
        value = self._amount(account, amount)
        self._lines.append(PostingLine(account, party or self.party, _ZERO, value))
        return self

    def _amount(self, account: str, amount: Money | Decimal | str | int) -> Decimal:
        if isinstance(amount, Money):
            if amount.currency.code != self.currency:
                raise ValueError(
                    f"Posting {self.reference} is in {self.currency}, "
                    f"got {amount.currency.code}"
                )
            value = amount.amount
        else:
            value = to_decimal(amount)
        if value < 0:
            raise NegativeAmountError(account, str(value))
        return value

    # -----------------------------------------------------------------
    # Committing
    # -----------------------------------------------------------------

    def post(self) -> list[LedgerEntry]:
        """
        Write one LedgerEntry per line with ``reverted=False``.

        Returns:
            The newly written entries, in line order.
        """
        self._validate()
        entries = [
            self._entry(line.account, line.party, line.debit, line.credit, reverted=False)
            for line in self._lines
        ]
        self.session.add_all(entries)
        self.session.flush()

        logger.info(
            "posting_committed",
            extra={
                "reference_type": self.reference_type,
                "reference_name": self.reference_name,
                "line_count": len(entries),
                "total_debit": str(self.total_debit),
                "total_credit": str(self.total_credit),
            },
        )
        return entries

    def post_reverse(self) -> list[LedgerEntry]:
        """
        Write the exact inverse of this posting and mark the reference's
        earlier entries as reverted.

        The inverse rows carry ``reverted=True`` as well, so ledger reports
        (which read un-reverted rows) exclude both sides, while the raw sum
        of all rows per account nets to zero.

        Returns:
            The newly written reversing entries, in line order.
        """
        self._validate()

        previous = self.session.execute(
            select(LedgerEntry)
            .where(
                LedgerEntry.reference_type == self.reference_type,
                LedgerEntry.reference_name == self.reference_name,
                LedgerEntry.reverted.is_(False),
            )
            .with_for_update()
        ).scalars().all()
        for entry in previous:
            entry.reverted = True

        entries = [
            self._entry(line.account, line.party, line.credit, line.debit, reverted=True)
            for line in self._lines
        ]
        self.session.add_all(entries)
        self.session.flush()

        logger.info(
            "posting_reversed",
            extra={
                "reference_type": self.reference_type,
                "reference_name": self.reference_name,
                "line_count": len(entries),
                "entries_reverted": len(previous),
            },
        )
        return entries

    def _entry(
        self,
        account: str,
        party: str | None,
        debit: Decimal,
        credit: Decimal,
        *,
        reverted: bool,
    ) -> LedgerEntry:
        return LedgerEntry(
            account=account,
            party=party,
            debit=debit,
            credit=credit,
            date=self.date,
            reference_type=self.reference_type,
            reference_name=self.reference_name,
            currency=self.currency,
            reverted=reverted,
        )

    def _validate(self) -> None:
        if self._consumed:
            raise PostingConsumedError(self.reference)
        self._consumed = True

        debits, credits = self.total_debit, self.total_credit
        if debits != credits:
            logger.warning(
                "posting_imbalanced",
                extra={
                    "reference_type": self.reference_type,
                    "reference_name": self.reference_name,
                    "total_debit": str(debits),
                    "total_credit": str(credits),
                },
            )
            raise ImbalancedPostingError(str(debits), str(credits), self.reference)

        names = {line.account for line in self._lines}
        if not names:
            return
        accounts = {
            account.name: account
            for account in self.session.execute(
                select(Account).where(Account.name.in_(names))
            ).scalars()
        }
        for line in self._lines:
            account = accounts.get(line.account)
            if account is None:
                raise AccountNotFoundError(line.account)
            if account.is_group:
                raise InvalidAccountError(line.account, "group accounts cannot be posted to")

"""
Base posting rule protocol.

A posting rule is the "postable transaction" capability of one document
type: it turns a submitted document into one or more balanced
LedgerPosting instances.  DocumentService and the reconciler depend only on
this protocol, never on the concrete document classes.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.services.ledger_posting import LedgerPosting


@runtime_checkable
class PostableTransaction(Protocol):
    """
    Protocol for posting rules.

    Each rule is:
    - Deterministic: the same document always yields the same lines
    - Stateless: building postings has no side effects; nothing is written
      until DocumentService calls post() or post_reverse()
    """

    @property
    def reference_types(self) -> tuple[str, ...]:
        """Document types this rule handles."""
        ...

    def build_postings(
        self, document: Any, session: Session, settings: AccountingSettings
    ) -> list[LedgerPosting]:
        """
        Build the postings for a document.

        Each returned posting balances on its own; several postings are
        returned when one business event has independent accounting effects
        (a payment and its write-off).
        """
        ...


class BasePostingRule(ABC):
    """Abstract base class for posting rules."""

    @property
    @abstractmethod
    def reference_types(self) -> tuple[str, ...]:
        pass

    @abstractmethod
    def build_postings(
        self, document: Any, session: Session, settings: AccountingSettings
    ) -> list[LedgerPosting]:
        pass

    def new_posting(
        self,
        session: Session,
        settings: AccountingSettings,
        *,
        reference_type: str,
        document: Any,
        party: str | None = None,
    ) -> LedgerPosting:
        """A posting referencing ``document`` in the books currency."""
        return LedgerPosting(
            session,
            reference_type=reference_type,
            reference_name=document.name,
            date=document.date,
            currency=settings.currency,
            party=party,
        )

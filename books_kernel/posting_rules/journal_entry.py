"""Journal entry posting rule: one ledger line per journal row side."""

from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.models.journal_entry import JournalEntry
from books_kernel.models.ledger import ReferenceType
from books_kernel.posting_rules.base import BasePostingRule
from books_kernel.services.ledger_posting import LedgerPosting


class JournalEntryPostingRule(BasePostingRule):
    """Postings for a submitted JournalEntry."""

    @property
    def reference_types(self) -> tuple[str, ...]:
        return (ReferenceType.JOURNAL_ENTRY.value,)

    def build_postings(
        self, document: JournalEntry, session: Session, settings: AccountingSettings
    ) -> list[LedgerPosting]:
        posting = self.new_posting(
            session,
            settings,
            reference_type=ReferenceType.JOURNAL_ENTRY.value,
            document=document,
        )
        for row in document.accounts:
            if row.debit:
                posting.debit(row.account, row.debit, party=row.party)
            if row.credit:
                posting.credit(row.account, row.credit, party=row.party)
        return [posting]

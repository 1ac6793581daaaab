"""Posting rules turning submitted documents into balanced ledger postings."""

from books_kernel.posting_rules.base import BasePostingRule, PostableTransaction
from books_kernel.posting_rules.invoice import InvoicePostingRule
from books_kernel.posting_rules.journal_entry import JournalEntryPostingRule
from books_kernel.posting_rules.payment import PaymentPostingRule
from books_kernel.posting_rules.registry import PostingRuleRegistry, build_default_registry

__all__ = [
    "BasePostingRule",
    "PostableTransaction",
    "InvoicePostingRule",
    "JournalEntryPostingRule",
    "PaymentPostingRule",
    "PostingRuleRegistry",
    "build_default_registry",
]

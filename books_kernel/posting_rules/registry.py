"""
Posting rule registry.

Maps a document's reference type to the rule that posts it, replacing
per-type conditionals in callers.
"""

from books_kernel.db.types import enum_value
from books_kernel.exceptions import PostingRuleNotFoundError
from books_kernel.posting_rules.base import PostableTransaction


class PostingRuleRegistry:
    """Registry for posting rules, keyed by reference type."""

    def __init__(self):
        self._rules: dict[str, PostableTransaction] = {}

    def register(self, rule: PostableTransaction) -> None:
        """Register a rule for every reference type it declares."""
        for reference_type in rule.reference_types:
            self._rules[reference_type] = rule

    def get_rule(self, reference_type: str) -> PostableTransaction:
        """
        Look up the rule for a reference type.

        Raises:
            PostingRuleNotFoundError: If no rule is registered.
        """
        rule = self._rules.get(enum_value(reference_type))
        if rule is None:
            raise PostingRuleNotFoundError(enum_value(reference_type))
        return rule

    def list_reference_types(self) -> list[str]:
        return sorted(self._rules)


def build_default_registry() -> PostingRuleRegistry:
    """Registry with the payment, invoice and journal entry rules."""
    from books_kernel.posting_rules.invoice import InvoicePostingRule
    from books_kernel.posting_rules.journal_entry import JournalEntryPostingRule
    from books_kernel.posting_rules.payment import PaymentPostingRule

    registry = PostingRuleRegistry()
    registry.register(PaymentPostingRule())
    registry.register(InvoicePostingRule())
    registry.register(JournalEntryPostingRule())
    return registry

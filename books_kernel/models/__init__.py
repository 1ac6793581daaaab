"""Domain models for the books kernel."""

from books_kernel.models.account import (
    CREDIT_NORMAL_ROOT_TYPES,
    Account,
    AccountType,
    RootType,
    is_credit_normal,
)
from books_kernel.models.invoice import (
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    InvoiceTax,
    InvoiceType,
)
from books_kernel.models.journal_entry import (
    JournalEntry,
    JournalEntryAccount,
    JournalEntryType,
)
from books_kernel.models.ledger import (
    INVOICE_REFERENCE_TYPES,
    LedgerEntry,
    ReferenceType,
)
from books_kernel.models.party import Party, PartyRole
from books_kernel.models.payment import (
    Payment,
    PaymentMethod,
    PaymentReference,
    PaymentType,
)

__all__ = [
    "Account",
    "AccountType",
    "RootType",
    "CREDIT_NORMAL_ROOT_TYPES",
    "is_credit_normal",
    "Invoice",
    "InvoiceItem",
    "InvoiceTax",
    "InvoiceType",
    "InvoiceStatus",
    "JournalEntry",
    "JournalEntryAccount",
    "JournalEntryType",
    "LedgerEntry",
    "ReferenceType",
    "INVOICE_REFERENCE_TYPES",
    "Party",
    "PartyRole",
    "Payment",
    "PaymentMethod",
    "PaymentReference",
    "PaymentType",
]

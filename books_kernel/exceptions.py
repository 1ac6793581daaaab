"""
Typed Exception Hierarchy for the Books Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Bookkeeping errors are business-input errors: an unbalanced posting, an
overpaid invoice, a write-off with no write-off account. Callers (document
lifecycle hooks, report renderers, the CLI) must be able to tell them apart
without parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        documents.submit_payment(payment)
    except OverpaymentError as e:
        api_response(code=e.code, invoice=e.reference_name,
                      outstanding=e.outstanding)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from BooksKernelError:

    BooksKernelError (base)
    |
    +-- PostingError
    |   +-- ImbalancedPostingError
    |   +-- NegativeAmountError
    |   +-- AccountConflictError
    |   +-- PostingConsumedError
    |   +-- PostingRuleNotFoundError
    |
    +-- ReconciliationError
    |   +-- OverpaymentError
    |   +-- InsufficientPaymentError
    |   +-- InvalidPaymentAmountError
    |   +-- InvoiceHasPaymentsError
    |
    +-- ConfigurationError
    |   +-- MissingConfigurationError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- InvalidAccountError
    |   +-- AccountHierarchyError
    |       +-- MissingParentAccountError
    |       +-- AccountCycleError
    |
    +-- DocumentError
    |   +-- DocumentNotFoundError
    |   +-- DocumentStateError
    |
    +-- CurrencyError
        +-- InvalidCurrencyError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Posting         | IMBALANCED_POSTING          | Debits != Credits at post time
                | NEGATIVE_AMOUNT             | Negative debit/credit line amount
                | ACCOUNT_CONFLICT            | Source and destination account equal
                | POSTING_CONSUMED            | Posting already posted or reversed
                | POSTING_RULE_NOT_FOUND      | No posting rule for document type
----------------|-----------------------------|-----------------------------------------
Reconciliation  | OVERPAYMENT                 | Allocation <= 0 or > outstanding
                | INSUFFICIENT_PAYMENT        | amount + writeoff < allocated total
                | INVALID_PAYMENT_AMOUNT      | Negative payment amount
                | INVOICE_HAS_PAYMENTS        | Reverting a (partly) paid invoice
----------------|-----------------------------|-----------------------------------------
Configuration   | MISSING_CONFIGURATION       | Required setting is not configured
----------------|-----------------------------|-----------------------------------------
Account         | ACCOUNT_NOT_FOUND           | Account name doesn't exist
                | INVALID_ACCOUNT             | Account can't be posted to
                | MISSING_PARENT_ACCOUNT      | Parent link points nowhere
                | ACCOUNT_CYCLE               | Parent links form a cycle
----------------|-----------------------------|-----------------------------------------
Document        | DOCUMENT_NOT_FOUND          | Referenced document doesn't exist
                | DOCUMENT_STATE              | Submit/revert in the wrong state
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Not a known ISO 4217 code

None of these are retried. They describe invalid business input or corrupt
reference data, not transient failure; the enclosing transaction is rolled
back and the error is re-raised to the caller.

===============================================================================
"""


class BooksKernelError(Exception):
    """
    Base exception for all books kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BOOKS_KERNEL_ERROR"


# Posting-related exceptions


class PostingError(BooksKernelError):
    """Base exception for posting-related errors."""

    code: str = "POSTING_ERROR"


class ImbalancedPostingError(PostingError):
    """Posting debits do not equal credits."""

    code: str = "IMBALANCED_POSTING"

    def __init__(self, debits: str, credits: str, reference: str):
        self.debits = debits
        self.credits = credits
        self.reference = reference
        super().__init__(
            f"Imbalanced posting for {reference}: debits={debits}, credits={credits}"
        )


class NegativeAmountError(PostingError):
    """A posting line amount is negative."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, account: str, amount: str):
        self.account = account
        self.amount = amount
        super().__init__(f"Negative amount {amount} on account {account}")


class AccountConflictError(PostingError):
    """Source and destination account of a transfer are the same."""

    code: str = "ACCOUNT_CONFLICT"

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"From account and to account are both {account}")


class PostingConsumedError(PostingError):
    """A posting was used after it was already posted or reversed."""

    code: str = "POSTING_CONSUMED"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Posting for {reference} has already been committed")


class PostingRuleNotFoundError(PostingError):
    """No posting rule is registered for a document type."""

    code: str = "POSTING_RULE_NOT_FOUND"

    def __init__(self, reference_type: str):
        self.reference_type = reference_type
        super().__init__(f"No posting rule registered for {reference_type}")


# Reconciliation-related exceptions


class ReconciliationError(BooksKernelError):
    """Base exception for outstanding-balance reconciliation errors."""

    code: str = "RECONCILIATION_ERROR"


class OverpaymentError(ReconciliationError):
    """Allocated amount is not positive or exceeds the invoice outstanding."""

    code: str = "OVERPAYMENT"

    def __init__(self, reference_name: str, allocated: str, outstanding: str):
        self.reference_name = reference_name
        self.allocated = allocated
        self.outstanding = outstanding
        super().__init__(
            f"Payment of {allocated} against {reference_name} is invalid: "
            f"outstanding amount is {outstanding}"
        )


class InsufficientPaymentError(ReconciliationError):
    """Payment amount plus write-off is less than the allocated total."""

    code: str = "INSUFFICIENT_PAYMENT"

    def __init__(self, amount: str, writeoff: str, allocated: str):
        self.amount = amount
        self.writeoff = writeoff
        self.allocated = allocated
        super().__init__(
            f"Payment amount {amount} plus write-off {writeoff} is less than "
            f"the allocated total {allocated}"
        )


class InvalidPaymentAmountError(ReconciliationError):
    """Payment amount is negative, zero against invoices, or over-allocated."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, payment: str, amount: str, reason: str = "cannot be negative"):
        self.payment = payment
        self.amount = amount
        self.reason = reason
        super().__init__(f"Payment {payment} amount {amount} {reason}")


class InvoiceHasPaymentsError(ReconciliationError):
    """An invoice cannot be reverted while payments are applied to it."""

    code: str = "INVOICE_HAS_PAYMENTS"

    def __init__(self, invoice: str, payments: list[str]):
        self.invoice = invoice
        self.payments = payments
        super().__init__(
            f"Invoice {invoice} has submitted payments: {', '.join(payments)}"
        )


# Configuration-related exceptions


class ConfigurationError(BooksKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class MissingConfigurationError(ConfigurationError):
    """A required accounting setting is not configured."""

    code: str = "MISSING_CONFIGURATION"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Setting '{setting}' is not configured: {reason}")


# Account-related exceptions


class AccountError(BooksKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"Account not found: {account}")


class InvalidAccountError(AccountError):
    """Account is invalid for posting."""

    code: str = "INVALID_ACCOUNT"

    def __init__(self, account: str, reason: str):
        self.account = account
        self.reason = reason
        super().__init__(f"Invalid account {account}: {reason}")


class AccountHierarchyError(AccountError):
    """The parent-link graph of the chart of accounts is malformed."""

    code: str = "ACCOUNT_HIERARCHY_ERROR"


class MissingParentAccountError(AccountHierarchyError):
    """An account names a parent account that does not exist."""

    code: str = "MISSING_PARENT_ACCOUNT"

    def __init__(self, account: str, parent_account: str):
        self.account = account
        self.parent_account = parent_account
        super().__init__(
            f"Account {account} references missing parent account {parent_account}"
        )


class AccountCycleError(AccountHierarchyError):
    """Parent links form a cycle."""

    code: str = "ACCOUNT_CYCLE"

    def __init__(self, accounts: list[str]):
        self.accounts = accounts
        super().__init__(f"Account hierarchy cycle: {' -> '.join(accounts)}")


# Document-related exceptions


class DocumentError(BooksKernelError):
    """Base exception for document lifecycle errors."""

    code: str = "DOCUMENT_ERROR"


class DocumentNotFoundError(DocumentError):
    """A referenced document does not exist."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, reference_type: str, reference_name: str):
        self.reference_type = reference_type
        self.reference_name = reference_name
        super().__init__(f"{reference_type} {reference_name} not found")


class DocumentStateError(DocumentError):
    """A lifecycle transition is not allowed in the document's current state."""

    code: str = "DOCUMENT_STATE"

    def __init__(self, reference_type: str, reference_name: str, reason: str):
        self.reference_type = reference_type
        self.reference_name = reference_name
        self.reason = reason
        super().__init__(f"{reference_type} {reference_name}: {reason}")


# Currency-related exceptions


class CurrencyError(BooksKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")

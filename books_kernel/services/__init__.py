"""Services for the books kernel (write side)."""

from books_kernel.services.ledger_posting import LedgerPosting, PostingLine
from books_kernel.services.naming_service import NamingService, NumberSeries
from books_kernel.services.outstanding_service import OutstandingChange, OutstandingService
from books_kernel.services.payment_service import PaymentField, PaymentService

__all__ = [
    "LedgerPosting",
    "NamingService",
    "NumberSeries",
    "OutstandingChange",
    "OutstandingService",
    "PaymentField",
    "PaymentService",
    "PostingLine",
]

"""
PaymentService -- payment defaults, allocation sync, and validation.

Responsibility:
    Everything that has to be true of a payment before it may be submitted:
    - derive party and payment type from a single invoice reference,
    - default the from/to accounts (party account, Cash account),
    - keep ``amount`` and a single reference's allocation in sync,
    - validate accounts, amounts, write-off configuration and allocation
      coverage.

Architecture position:
    Kernel > Services.  Called by DocumentService.submit_payment() before
    any posting is built, and by editing callers through ``apply_change``.

Invariants enforced:
    - account != payment_account.
    - amount >= 0.
    - writeoff != 0 requires ``settings.write_off_account``.
    - amount + writeoff >= sum of allocations.
    - With references, 0 < amount <= sum of allocations.
    - Single-reference sync: the field named in the edit event is
      authoritative.  An ``amount`` edit rewrites the sole reference's
      allocation; a ``references`` edit rewrites ``amount`` to the sum of
      the allocations.  With several references an ``amount`` edit leaves
      the allocations alone.

Failure modes:
    - DocumentStateError when either account is missing after defaults.
    - AccountConflictError, InvalidPaymentAmountError,
      MissingConfigurationError, InsufficientPaymentError.
    - DocumentNotFoundError when a single reference names no invoice.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.domain.values import Money
from books_kernel.exceptions import (
    AccountConflictError,
    DocumentNotFoundError,
    DocumentStateError,
    InsufficientPaymentError,
    InvalidPaymentAmountError,
    MissingConfigurationError,
)
from books_kernel.logging_config import get_logger
from books_kernel.models.invoice import Invoice, InvoiceType
from books_kernel.models.ledger import INVOICE_REFERENCE_TYPES
from books_kernel.models.party import Party
from books_kernel.models.payment import Payment, PaymentMethod, PaymentType
from books_kernel.services.base import BaseService

logger = get_logger("services.payment")


class PaymentField(str, Enum):
    """Fields whose edit triggers amount/allocation sync."""

    AMOUNT = "amount"
    REFERENCES = "references"


class PaymentService(BaseService[Payment]):
    """
    Payment preparation and validation.

    Guarantees:
        - Never writes ledger entries or outstanding amounts.
        - Flush only.
    """

    def __init__(self, session: Session, settings: AccountingSettings):
        super().__init__(session)
        self.settings = settings

    # -----------------------------------------------------------------
    # Defaults
    # -----------------------------------------------------------------

    def fill_defaults(self, payment: Payment) -> Payment:
        """
        Fill party, payment type, currency and accounts where unset.

        With exactly one invoice reference: a sales invoice makes the payment
        a Receive from the customer, a purchase invoice a Pay to the
        supplier.  The party-side account comes from the party's default
        account, else the receivable/payable account in settings; a Cash
        payment's cash side is the Cash account.
        """
        if len(payment.references) == 1:
            ref = payment.references[0]
            if ref.reference_type in INVOICE_REFERENCE_TYPES:
                invoice = self._get_invoice(ref.reference_type, ref.reference_name)
                if payment.party is None:
                    payment.party = invoice.party
                if payment.payment_type is None:
                    payment.payment_type = (
                        PaymentType.RECEIVE
                        if invoice.invoice_type == InvoiceType.SALES
                        else PaymentType.PAY
                    )

        if payment.currency is None:
            payment.currency = self.settings.currency

        party_account = self._party_account(payment)
        if payment.payment_type == PaymentType.RECEIVE:
            if payment.account is None:
                payment.account = party_account
            if payment.payment_account is None and payment.payment_method == PaymentMethod.CASH:
                payment.payment_account = self.settings.cash_account
        elif payment.payment_type == PaymentType.PAY:
            if payment.payment_account is None:
                payment.payment_account = party_account
            if payment.account is None and payment.payment_method == PaymentMethod.CASH:
                payment.account = self.settings.cash_account

        return payment

    def _party_account(self, payment: Payment) -> str:
        if payment.party is not None:
            party = self.session.execute(
                select(Party).where(Party.name == payment.party)
            ).scalar_one_or_none()
            if party is not None and party.default_account:
                return party.default_account
        if payment.payment_type == PaymentType.PAY:
            return self.settings.payable_account
        return self.settings.receivable_account

    # -----------------------------------------------------------------
    # Sync
    # -----------------------------------------------------------------

    def apply_change(self, payment: Payment, changed: PaymentField | str) -> Payment:
        """
        Propagate an edit between ``amount`` and the allocations.

        Args:
            payment: The draft payment after the edit.
            changed: Which field the edit event changed.
        """
        changed = PaymentField(changed)
        if changed == PaymentField.AMOUNT:
            if len(payment.references) == 1:
                payment.references[0].amount = payment.amount
        else:
            payment.amount = payment.allocated_total

        logger.debug(
            "payment_allocation_synced",
            extra={
                "payment": payment.name,
                "changed": changed.value,
                "amount": str(payment.amount),
                "reference_count": len(payment.references),
            },
        )
        return payment

    # -----------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------

    def validate(self, payment: Payment) -> None:
        """Raise on the first violated submission rule."""
        if not payment.account or not payment.payment_account:
            raise DocumentStateError(
                "Payment", payment.name, "from account and to account are required"
            )
        if payment.account == payment.payment_account:
            raise AccountConflictError(payment.account)

        currency = payment.currency or self.settings.currency
        amount = Money.of(payment.amount, currency)
        if amount.is_negative:
            raise InvalidPaymentAmountError(payment.name, str(amount.amount))

        allocated = Money.total(
            (Money.of(ref.amount, currency) for ref in payment.references), currency
        )
        if payment.references:
            if amount > allocated:
                raise InvalidPaymentAmountError(
                    payment.name, str(amount.amount), f"cannot exceed {allocated.amount}"
                )
            if amount.is_zero:
                raise InvalidPaymentAmountError(payment.name, str(amount.amount), "cannot be zero")

        writeoff = Money.of(payment.writeoff or Decimal("0"), currency)
        if not writeoff.is_zero and not self.settings.write_off_account:
            raise MissingConfigurationError(
                "write_off_account",
                f"payment {payment.name} has a write-off of {writeoff.amount}",
            )

        if amount + writeoff < allocated:
            raise InsufficientPaymentError(
                str(amount.amount), str(writeoff.amount), str(allocated.amount)
            )

    def _get_invoice(self, reference_type: str, reference_name: str) -> Invoice:
        invoice = self.session.execute(
            select(Invoice).where(
                Invoice.name == reference_name,
                Invoice.invoice_type == reference_type,
            )
        ).scalar_one_or_none()
        if invoice is None:
            raise DocumentNotFoundError(reference_type, reference_name)
        return invoice

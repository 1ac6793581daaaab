"""
NamingService -- document names from locked number-series rows.

Responsibility:
    Assigns unique, monotonically numbered names (``SINV-0001``,
    ``PAY-0002`` ...) to documents submitted without one.

Architecture position:
    Kernel > Services.  Called by DocumentService before a document's
    postings are built, so ledger entries reference the final name.

Invariants enforced:
    - Series counters are incremented under ``SELECT ... FOR UPDATE`` so
      concurrent submissions never share a number.
    - The increment is only durable when the caller's transaction commits;
      a rolled-back submission does not consume its number.

Failure modes:
    - IntegrityError if two transactions create the same series row at the
      same moment; the loser's transaction rolls back and is not retried.
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from books_kernel.db.base import Base
from books_kernel.db.types import enum_value
from books_kernel.logging_config import get_logger
from books_kernel.models.ledger import ReferenceType

logger = get_logger("services.naming")


class NumberSeries(Base):
    """
    Number series counter table.

    One row per series prefix; ``current`` is the last number handed out.
    """

    __tablename__ = "number_series"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    reference_type: Mapped[str] = mapped_column(String(50), nullable=False)

    start: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)

    padding: Mapped[int] = mapped_column(BigInteger, nullable=False, default=4)

    current: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


DEFAULT_SERIES: dict[str, str] = {
    ReferenceType.SALES_INVOICE.value: "SINV-",
    ReferenceType.PURCHASE_INVOICE.value: "PINV-",
    ReferenceType.PAYMENT.value: "PAY-",
    ReferenceType.JOURNAL_ENTRY.value: "JV-",
}


class NamingService:
    """
    Number-series naming for documents.

    Guarantees:
        - Names within a series are unique and strictly increasing.
        - Flush only; the caller commits.
    """

    def __init__(self, session: Session):
        self._session = session

    def next_name(self, reference_type: str, series: str | None = None) -> str:
        """
        Allocate the next name for a document type.

        Args:
            reference_type: Document type, e.g. ``"SalesInvoice"``.
            series: Series prefix; defaults to the type's standard prefix.
        """
        reference_type = enum_value(reference_type)
        prefix = series or DEFAULT_SERIES.get(reference_type, f"{reference_type}-")

        counter = self._session.execute(
            select(NumberSeries)
            .where(NumberSeries.name == prefix)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if counter is None:
            counter = NumberSeries(
                name=prefix,
                reference_type=reference_type,
                start=1,
                padding=4,
                current=0,
            )
            self._session.add(counter)

        counter.current = max(counter.current + 1, counter.start)
        # Written by the caller's flush, or autoflush on the next lookup

        name = f"{prefix}{counter.current:0{counter.padding}d}"
        logger.debug(
            "document_name_allocated",
            extra={"series": prefix, "value": counter.current, "document_name": name},
        )
        return name

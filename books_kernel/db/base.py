"""
Module: books_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the exact-decimal amount column type, and
    the TrackedBase mixin for row timestamps.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  ALL model files import from here.  This module MUST NOT import
    from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Exact amounts: Decimal maps to AmountType, which is Numeric(38, 9) on
      PostgreSQL and a decimal string everywhere else.  No amount ever
      round-trips through a binary float.

Failure modes:
    - IntegrityError on a duplicate UUID (protected by the PK constraint).
    - decimal.InvalidOperation if a stored amount string is not a number.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class AmountType(TypeDecorator):
    """
    Exact monetary amount column.

    Contract:
        Python side is always ``Decimal``.  PostgreSQL stores Numeric(38, 9)
        natively; other dialects (SQLite in tests and demos) store the
        canonical decimal string, because their numeric affinity is a
        binary float.

    Guarantees:
        - A Decimal written is the Decimal read back, digit for digit.
    """

    impl = String(48)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(38, 9))
        return dialect.type_descriptor(String(48))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to AmountType -- exact on every backend.
        - datetime maps to DateTime(timezone=True); date maps to Date.
        - int maps to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: AmountType(),
        datetime: DateTime(timezone=True),
        date: Date(),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


@event.listens_for(Base, "init", propagate=True)
def _apply_scalar_defaults(target, args, kwargs):
    """
    Apply scalar column defaults at construction, not only at INSERT.

    Services read flags and amounts (``submitted``, ``writeoff``,
    ``payment_method``) of documents that have not been flushed yet.
    """
    for column in target.__table__.columns:
        default = column.default
        if column.key in kwargs or default is None or not default.is_scalar:
            continue
        setattr(target, column.key, default.arg)


class TrackedBase(Base):
    """
    Abstract base with row timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


UUID = PyUUID

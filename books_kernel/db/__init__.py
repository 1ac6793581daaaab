"""Database layer - engine, base classes, types."""

from books_kernel.db.base import UUID, AmountType, Base, TrackedBase, UUIDString
from books_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
    transaction_scope,
)
from books_kernel.db.types import Amount, Currency, Name, round_money

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "transaction_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "AmountType",
    "Amount",
    "Currency",
    "Name",
    "round_money",
]

"""
Pure domain layer.

Value objects and configuration snapshots with NO dependencies on the ORM,
the database or I/O (SystemClock excepted).  All domain objects are
immutable and deterministic.
"""

from books_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from books_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from books_kernel.domain.settings import AccountingSettings, MonthDay
from books_kernel.domain.values import Currency, Money, to_decimal

__all__ = [
    "AccountingSettings",
    "Clock",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "DeterministicClock",
    "Money",
    "MonthDay",
    "SystemClock",
    "to_decimal",
]

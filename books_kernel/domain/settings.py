"""
Settings -- Immutable accounting configuration snapshot.

Responsibility:
    Carries the organization settings the posting, reconciliation and report
    code need (books currency, fiscal-year boundaries, write-off account,
    default accounts, display precision) as one frozen value passed
    explicitly into every entry point.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Loaded by books_config from YAML
    (or built directly in tests) once per operation; never read from
    ambient global state.

Invariants enforced:
    - The snapshot cannot change during an operation (frozen dataclass).
    - Fiscal-year start and end are valid month-day pairs.

Failure modes:
    - ValueError on an invalid month-day or display precision.
    - InvalidCurrencyError on an unknown books currency.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date

from books_kernel.domain.values import Currency


@dataclass(frozen=True, slots=True)
class MonthDay:
    """
    A calendar month-day with no year, e.g. the fiscal-year start ``04-01``.

    ``in_year`` substitutes a year; 02-29 falls back to 02-28 in years
    that are not leap years.
    """

    month: int
    day: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        # 2000 is a leap year, so 02-29 is accepted here
        if not 1 <= self.day <= calendar.monthrange(2000, self.month)[1]:
            raise ValueError(f"Invalid day {self.day} for month {self.month}")

    @classmethod
    def parse(cls, value: str | date | MonthDay) -> MonthDay:
        """Parse ``"MM-DD"`` or ``"YYYY-MM-DD"``, or take month/day from a date."""
        if isinstance(value, MonthDay):
            return value
        if isinstance(value, date):
            return cls(value.month, value.day)
        parts = str(value).strip().split("-")
        if len(parts) == 3:
            parts = parts[1:]
        if len(parts) != 2:
            raise ValueError(f"Expected MM-DD, got {value!r}")
        return cls(int(parts[0]), int(parts[1]))

    def in_year(self, year: int) -> date:
        last_day = calendar.monthrange(year, self.month)[1]
        return date(year, self.month, min(self.day, last_day))

    def __str__(self) -> str:
        return f"{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True, slots=True)
class AccountingSettings:
    """
    Explicit configuration snapshot for one bookkeeping operation.

    Contract:
        Constructed once (from YAML via books_config, or directly) and passed
        to DocumentService, PaymentService, OutstandingService and
        ReportingService.  Nothing in the kernel reads settings any other way.

    Guarantees:
        - Immutable for the lifetime of the operation.
        - ``currency`` is a valid registered currency code.
    """

    currency: str = "USD"
    fiscal_year_start: MonthDay = field(default_factory=lambda: MonthDay(1, 1))
    fiscal_year_end: MonthDay = field(default_factory=lambda: MonthDay(12, 31))
    write_off_account: str | None = None
    round_off_account: str | None = None
    cash_account: str = "Cash"
    receivable_account: str = "Debtors"
    payable_account: str = "Creditors"
    display_precision: int = 2
    company_name: str = "Company"

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", Currency(self.currency).code)
        object.__setattr__(self, "fiscal_year_start", MonthDay.parse(self.fiscal_year_start))
        object.__setattr__(self, "fiscal_year_end", MonthDay.parse(self.fiscal_year_end))
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")

    def fiscal_year_bounds(self, year: int) -> tuple[date, date]:
        """
        First and last day of the fiscal year that starts in ``year``.

        A fiscal year whose end month-day falls before its start month-day
        (e.g. 04-01 .. 03-31) ends in the following calendar year.
        """
        start = self.fiscal_year_start.in_year(year)
        end = self.fiscal_year_end.in_year(year)
        if end < start:
            end = self.fiscal_year_end.in_year(year + 1)
        return start, end

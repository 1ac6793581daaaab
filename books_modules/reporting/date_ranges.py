"""
Report date ranges.

A report's columns are half-open ``(from_date, to_date]`` windows that do
not overlap, returned most-recent-first.  Two modes:

- Until-date: ``count`` back-to-back periods of 1/3/6/12 months ending at
  ``to_date``.  Every boundary is computed from ``to_date`` itself
  (``to_date - i * months``, clamped to month end by relativedelta), so a
  short month never shifts the boundaries of earlier periods.
- Fiscal-year: one column per fiscal year that lies entirely inside
  ``[fiscal start of from_year, fiscal end of to_year]``.

Pure functions: the caller supplies "today".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from books_kernel.domain.settings import AccountingSettings
from books_modules.reporting.config import (
    PERIODICITY_MONTHS,
    DateRangeMode,
    Periodicity,
    ReportingConfig,
)


@dataclass(frozen=True, order=True)
class DateRange:
    """Half-open date window: ``from_date`` exclusive, ``to_date`` inclusive."""

    from_date: date
    to_date: date

    def __post_init__(self):
        if self.to_date < self.from_date:
            raise ValueError(f"Date range ends before it starts: {self.from_date} > {self.to_date}")

    def contains(self, value: date) -> bool:
        return self.from_date < value <= self.to_date

    @property
    def first_day(self) -> date:
        return self.from_date + timedelta(days=1)

    @property
    def label(self) -> str:
        return f"{self.first_day.isoformat()} - {self.to_date.isoformat()}"

    def __str__(self) -> str:
        return self.label


def most_recent_first(ranges: list[DateRange]) -> list[DateRange]:
    return sorted(ranges, key=lambda r: r.to_date, reverse=True)


def until_date_ranges(
    to_date: date,
    periodicity: Periodicity | str,
    count: int,
    single_column: bool = False,
) -> list[DateRange]:
    """
    ``count`` consecutive periods ending at ``to_date``.

    The whole window starts at ``to_date - months * count``.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    months = PERIODICITY_MONTHS[Periodicity(periodicity)]
    window_start = to_date - relativedelta(months=months * count)
    if single_column:
        return [DateRange(window_start, to_date)]

    ranges = [
        DateRange(
            to_date - relativedelta(months=months * (i + 1)),
            to_date - relativedelta(months=months * i),
        )
        for i in range(count)
    ]
    return most_recent_first(ranges)


def fiscal_year_ranges(
    from_year: int,
    to_year: int,
    settings: AccountingSettings,
    single_column: bool = False,
) -> list[DateRange]:
    """
    One range per fiscal year between ``from_year`` and ``to_year``.

    Raises:
        ValueError: No complete fiscal year fits the window.
    """
    if to_year < from_year:
        raise ValueError("to_year cannot be before from_year")

    window_start = settings.fiscal_year_start.in_year(from_year)
    window_end = settings.fiscal_year_end.in_year(to_year)

    ranges = []
    for year in range(from_year, to_year + 1):
        start, end = settings.fiscal_year_bounds(year)
        if start >= window_start and end <= window_end:
            ranges.append(DateRange(start - timedelta(days=1), end))

    if not ranges:
        raise ValueError(
            f"No complete fiscal year between {window_start.isoformat()} "
            f"and {window_end.isoformat()}"
        )

    if single_column:
        first = min(ranges, key=lambda r: r.from_date)
        last = max(ranges, key=lambda r: r.to_date)
        return [DateRange(first.from_date, last.to_date)]
    return most_recent_first(ranges)


def build_date_ranges(
    config: ReportingConfig,
    settings: AccountingSettings,
    today: date,
) -> list[DateRange]:
    """Date ranges for a report run, defaulting unset bounds from ``today``."""
    if config.mode == DateRangeMode.FISCAL_YEAR:
        from_year = config.from_year if config.from_year is not None else today.year
        to_year = config.to_year if config.to_year is not None else from_year + 1
        return fiscal_year_ranges(from_year, to_year, settings, config.single_column)

    return until_date_ranges(
        config.to_date or today,
        config.periodicity,
        config.count,
        config.single_column,
    )


def window_of(ranges: list[DateRange]) -> DateRange:
    """The smallest range covering every range in ``ranges``."""
    if not ranges:
        raise ValueError("no date ranges")
    return DateRange(
        min(r.from_date for r in ranges),
        max(r.to_date for r in ranges),
    )


def fiscal_year_containing(day: date, settings: AccountingSettings) -> DateRange:
    """The fiscal year ``day`` falls in, as a date range."""
    start, end = settings.fiscal_year_bounds(day.year)
    if day < start:
        start, end = settings.fiscal_year_bounds(day.year - 1)
    return DateRange(start - timedelta(days=1), end)

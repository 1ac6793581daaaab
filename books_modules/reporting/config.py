"""
Reporting Configuration Schema.

Selects how a report's date columns are built (rolling "until date"
periods or fiscal years) and how its rows are presented.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Self

from books_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


class Periodicity(str, Enum):
    """Column width in until-date mode."""

    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-Yearly"
    YEARLY = "Yearly"


PERIODICITY_MONTHS: dict[Periodicity, int] = {
    Periodicity.MONTHLY: 1,
    Periodicity.QUARTERLY: 3,
    Periodicity.HALF_YEARLY: 6,
    Periodicity.YEARLY: 12,
}


class DateRangeMode(str, Enum):
    """How report columns are derived."""

    UNTIL_DATE = "until_date"
    FISCAL_YEAR = "fiscal_year"


MIN_REPORT_YEAR = 2000


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    ``to_date``, ``from_year`` and ``to_year`` left as None are filled from
    the clock when a report runs: today, this year and next year.
    """

    mode: DateRangeMode = DateRangeMode.UNTIL_DATE

    # Until-date mode
    periodicity: Periodicity = Periodicity.MONTHLY
    count: int = 3
    to_date: date | None = None

    # Fiscal-year mode
    from_year: int | None = None
    to_year: int | None = None

    # Collapse the whole window into one column
    single_column: bool = False

    # Blank out the values of group rows
    hide_group_balance: bool = False

    display_precision: int = 2

    def __post_init__(self):
        self.mode = DateRangeMode(self.mode)
        self.periodicity = Periodicity(self.periodicity)
        if isinstance(self.to_date, str):
            self.to_date = date.fromisoformat(self.to_date)

        if self.count < 1:
            raise ValueError("count must be at least 1")
        for year in (self.from_year, self.to_year):
            if year is not None and year < MIN_REPORT_YEAR:
                raise ValueError(f"report years must be {MIN_REPORT_YEAR} or later")
        if (
            self.from_year is not None
            and self.to_year is not None
            and self.to_year < self.from_year
        ):
            raise ValueError("to_year cannot be before from_year")
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")

    @property
    def months(self) -> int:
        return PERIODICITY_MONTHS[self.periodicity]

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

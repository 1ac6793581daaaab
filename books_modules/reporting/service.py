"""
Reporting Module Service (``books_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation -- profit and loss, balance sheet and
trial balance -- by bridging the kernel selectors (``AccountSelector``,
``LedgerSelector``) to the pure functions in ``date_ranges.py``,
``account_tree.py`` and ``statements.py``.  This is a **read-only**
service: no ledger entries are written.

Architecture position
---------------------
**Modules layer** -- thin glue.  Constructor: ``session`` + ``settings`` +
``clock`` + ``config``.  Give it its own session so a report reads
committed data only and never observes a half-written posting.

Invariants enforced
-------------------
* Read-only -- no mutations to the ledger or documents.
* Only un-reverted ledger entries are reported.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* Invalid report parameters -> ``ValueError`` before any query runs.
* MissingParentAccountError / AccountCycleError on a malformed chart.
* AccountNotFoundError when an entry references an unknown account.

Audit relevance
---------------
``report_generated`` is logged for every report with its type, window and
row count.
"""

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session

from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.domain.settings import AccountingSettings
from books_kernel.logging_config import get_logger
from books_kernel.selectors.account_selector import AccountSelector
from books_kernel.selectors.ledger_selector import LedgerSelector
from books_modules.reporting.account_tree import AccountForest, build_forest
from books_modules.reporting.config import ReportingConfig
from books_modules.reporting.date_ranges import (
    DateRange,
    build_date_ranges,
    fiscal_year_containing,
    window_of,
)
from books_modules.reporting.models import Report, ReportMetadata, ReportType
from books_modules.reporting.statements import (
    balance_sheet,
    profit_and_loss,
    render_to_dict,
    trial_balance,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Report generation service.

    Contract
    --------
    * Every public method returns a ``Report``.
    * ``config`` passed to a method overrides the service default for
      that call only.

    Guarantees
    ----------
    * Report logic lives in the pure functions; this class only loads data
      and stamps metadata.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT write to the ledger.
    * Does NOT close the books (no retained-earnings line).
    """

    def __init__(
        self,
        session: Session,
        settings: AccountingSettings,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._settings = settings
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._accounts = AccountSelector(session)
        self._ledger = LedgerSelector(session)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _load_forest(self) -> AccountForest:
        accounts = self._accounts.all_accounts()
        logger.debug(
            "accounts_loaded_for_reporting",
            extra={"account_count": len(accounts)},
        )
        return build_forest(accounts)

    def _build_metadata(self, report_type: ReportType, window: DateRange) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            report_type=report_type,
            entity_name=self._settings.company_name,
            currency=self._settings.currency,
            generated_at=self._clock.now().isoformat(),
            from_date=window.from_date,
            to_date=window.to_date,
        )

    def _ranges(self, config: ReportingConfig) -> list[DateRange]:
        return build_date_ranges(config, self._settings, self._clock.today())

    def _log_report(self, report: Report) -> Report:
        logger.info(
            "report_generated",
            extra={
                "report_type": report.metadata.report_type.value,
                "from_date": report.metadata.from_date.isoformat(),
                "to_date": report.metadata.to_date.isoformat(),
                "column_count": len(report.columns) - 1,
                "row_count": len(report.rows),
            },
        )
        return report

    # =========================================================================
    # Public API
    # =========================================================================

    def profit_and_loss(self, config: ReportingConfig | None = None) -> Report:
        """
        Generate a profit and loss report.

        Args:
            config: Date range and presentation options.

        Returns:
            Report with income rows, expense rows and a profit line.
        """
        config = config or self._config
        ranges = self._ranges(config)
        window = window_of(ranges)
        forest = self._load_forest()
        entries = self._ledger.entries(window.from_date, window.to_date)

        report = profit_and_loss(
            forest,
            entries,
            ranges,
            self._build_metadata(ReportType.PROFIT_AND_LOSS, window),
            precision=config.display_precision,
            hide_group_balance=config.hide_group_balance,
        )
        return self._log_report(report)

    def balance_sheet(self, config: ReportingConfig | None = None) -> Report:
        """
        Generate a balance sheet; each column is the balance at its end date.
        """
        config = config or self._config
        ranges = self._ranges(config)
        window = window_of(ranges)
        forest = self._load_forest()
        entries = self._ledger.entries(None, window.to_date)

        report = balance_sheet(
            forest,
            entries,
            ranges,
            self._build_metadata(ReportType.BALANCE_SHEET, window),
            precision=config.display_precision,
            hide_group_balance=config.hide_group_balance,
        )
        return self._log_report(report)

    def trial_balance(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        config: ReportingConfig | None = None,
    ) -> Report:
        """
        Generate a trial balance.

        Args:
            from_date: First day of the period (inclusive).  Defaults to the
                start of the fiscal year containing ``to_date``.
            to_date: Last day of the period.  Defaults to today.
            config: Presentation options; its date range fields are unused.
        """
        config = config or self._config
        to_date = to_date or self._clock.today()
        if from_date is None:
            window = DateRange(fiscal_year_containing(to_date, self._settings).from_date, to_date)
        else:
            if from_date > to_date:
                raise ValueError("from_date cannot be after to_date")
            window = DateRange(from_date - timedelta(days=1), to_date)

        forest = self._load_forest()
        entries = self._ledger.entries(None, window.to_date)

        report = trial_balance(
            forest,
            entries,
            window,
            self._build_metadata(ReportType.TRIAL_BALANCE, window),
            precision=config.display_precision,
            hide_group_balance=config.hide_group_balance,
        )
        return self._log_report(report)

    def to_dict(self, report: Report) -> dict:
        """
        Convert a report to a plain dict for JSON serialization.

        Delegates to the pure render_to_dict function.
        """
        return render_to_dict(report)

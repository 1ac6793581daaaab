"""
Tests for books_config: settings and chart-of-accounts loading.

Covers:
- The bundled settings.yaml and chart_of_accounts.yaml
- Required and unknown settings keys
- Fiscal-year month-day parsing
- Chart flattening (root type inheritance, group detection)
- Installing a chart into a session
"""

from datetime import date

import pytest
import yaml
from sqlalchemy import select

from books_config import (
    flatten_chart,
    install_chart,
    load_chart_of_accounts,
    load_settings,
    load_yaml_file,
    settings_from_dict,
)
from books_kernel.domain.settings import AccountingSettings, MonthDay
from books_kernel.exceptions import InvalidCurrencyError
from books_kernel.models import Account


class TestLoadSettings:
    """The bundled settings file parses into a frozen snapshot."""

    def test_bundled_settings(self):
        settings = load_settings()
        assert settings.currency == "USD"
        assert settings.company_name == "Demo Trading Co"
        assert settings.fiscal_year_start == MonthDay(1, 1)
        assert settings.fiscal_year_end == MonthDay(12, 31)
        assert settings.write_off_account == "Write Off"
        assert settings.cash_account == "Cash"

    def test_settings_are_frozen(self):
        settings = load_settings()
        with pytest.raises(AttributeError):
            settings.currency = "EUR"

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "currency: EUR\n"
            "fiscal_year_start: '04-01'\n"
            "fiscal_year_end: '03-31'\n"
        )
        settings = load_settings(path)
        assert settings.currency == "EUR"
        assert settings.fiscal_year_bounds(2024) == (date(2024, 4, 1), date(2025, 3, 31))

    def test_settings_loaded_is_logged(self, captured_logs):
        load_settings()
        logs = captured_logs()
        assert any(r["message"] == "settings_loaded" for r in logs)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_empty_yaml_is_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("currency: [USD\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml_file(path)


class TestSettingsFromDict:
    """Validation of parsed settings mappings."""

    def test_currency_required(self):
        with pytest.raises(KeyError, match="currency"):
            settings_from_dict({"company_name": "X"})

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown settings"):
            settings_from_dict({"currency": "USD", "writeoff_acount": "Write Off"})

    def test_invalid_currency_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            settings_from_dict({"currency": "ZZZ"})

    def test_full_date_keeps_month_and_day(self):
        settings = settings_from_dict(
            {"currency": "USD", "fiscal_year_start": date(2020, 7, 1), "fiscal_year_end": "2021-06-30"}
        )
        assert settings.fiscal_year_start == MonthDay(7, 1)
        assert settings.fiscal_year_end == MonthDay(6, 30)

    def test_invalid_month_day_rejected(self):
        with pytest.raises(ValueError):
            settings_from_dict({"currency": "USD", "fiscal_year_start": "13-01"})

    def test_negative_precision_rejected(self):
        with pytest.raises(ValueError):
            settings_from_dict({"currency": "USD", "display_precision": -1})


class TestMonthDay:
    """Month-day parsing and year substitution."""

    def test_parse_and_str(self):
        assert str(MonthDay.parse("4-1")) == "04-01"

    def test_leap_day_falls_back_in_common_year(self):
        assert MonthDay(2, 29).in_year(2023) == date(2023, 2, 28)
        assert MonthDay(2, 29).in_year(2024) == date(2024, 2, 29)

    def test_calendar_fiscal_year_bounds(self):
        settings = AccountingSettings()
        assert settings.fiscal_year_bounds(2024) == (date(2024, 1, 1), date(2024, 12, 31))


class TestFlattenChart:
    """Nested YAML charts flatten into parent-first account records."""

    def test_bundled_chart(self, chart):
        names = [record.name for record in chart]
        assert names[0] == "Assets"
        assert names.index("Current Assets") < names.index("Cash")
        by_name = {record.name: record for record in chart}
        assert by_name["Cash"].root_type == "Asset"
        assert by_name["Cash"].parent_account == "Current Assets"
        assert by_name["Sales"].root_type == "Income"
        assert by_name["Write Off"].root_type == "Expense"

    def test_groups_detected(self, chart):
        by_name = {record.name: record for record in chart}
        assert by_name["Current Assets"].is_group
        assert not by_name["Cash"].is_group
        # Declared group with no children yet
        assert by_name["Loans (Liabilities)"].is_group

    def test_root_type_inherited(self):
        records = flatten_chart(
            {"Income": {"root_type": "Income", "children": {"Sales": None}}}
        )
        assert [(r.name, r.root_type, r.parent_account) for r in records] == [
            ("Income", "Income", None),
            ("Sales", "Income", "Income"),
        ]

    def test_root_without_root_type_rejected(self):
        with pytest.raises(ValueError, match="root_type"):
            flatten_chart({"Misc": {"children": {"Other": None}}})

    def test_invalid_root_type_rejected(self):
        with pytest.raises(ValueError):
            flatten_chart({"Misc": {"root_type": "Revenue"}})

    def test_chart_without_accounts_key(self, tmp_path):
        path = tmp_path / "chart.yaml"
        path.write_text("Assets:\n  root_type: Asset\n")
        with pytest.raises(KeyError, match="accounts"):
            load_chart_of_accounts(path)


class TestInstallChart:
    """Installing account records into the database."""

    def test_install_creates_accounts(self, session, chart):
        created = install_chart(session, chart)
        session.commit()
        assert len(created) == len(chart)
        cash = session.execute(select(Account).where(Account.name == "Cash")).scalar_one()
        assert cash.parent_account == "Current Assets"
        assert cash.is_group is False

    def test_install_is_idempotent(self, session, chart):
        install_chart(session, chart)
        session.commit()
        again = install_chart(session, chart)
        assert again == []
        count = len(session.execute(select(Account.name)).scalars().all())
        assert count == len(chart)

    def test_install_logs_counts(self, session, chart, captured_logs):
        install_chart(session, chart[:3])
        install_chart(session, chart)

        records = [r for r in captured_logs() if r["message"] == "chart_of_accounts_installed"]
        assert [(r["created_count"], r["skipped_count"]) for r in records] == [
            (3, 0),
            (len(chart) - 3, 3),
        ]

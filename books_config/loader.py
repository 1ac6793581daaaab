"""
Configuration Loader (``books_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into kernel inputs: the frozen
``AccountingSettings`` snapshot, and the chart of accounts as a flat list
of account records that can be installed into a database session.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel's domain
and model types; nothing in the kernel depends on it.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Unknown settings keys are rejected rather than ignored.
* A chart account inherits its parent's root type; a root must declare
  one.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Invalid month-day or currency  -> ``ValueError`` / ``InvalidCurrencyError``.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy import select
from sqlalchemy.orm import Session

from books_kernel.domain.settings import AccountingSettings
from books_kernel.logging_config import get_logger
from books_kernel.models.account import Account, AccountType, RootType
from books_kernel.selectors.account_selector import AccountRecord

logger = get_logger("config.loader")

_SETS_DIR = Path(__file__).parent / "sets"
DEFAULT_SETTINGS_PATH = _SETS_DIR / "settings.yaml"
DEFAULT_CHART_PATH = _SETS_DIR / "chart_of_accounts.yaml"

_REQUIRED_SETTINGS = ("currency",)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


# =========================================================================
# Settings
# =========================================================================


def settings_from_dict(data: dict[str, Any]) -> AccountingSettings:
    """
    Build an ``AccountingSettings`` snapshot from a parsed mapping.

    Fiscal-year boundaries may be ``"MM-DD"`` strings or full dates (YAML
    parses unquoted ``2024-04-01`` as a date); only month and day are kept.
    """
    for key in _REQUIRED_SETTINGS:
        if key not in data:
            raise KeyError(f"Missing required setting: {key}")

    known = {f.name for f in dataclasses.fields(AccountingSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")

    return AccountingSettings(**data)


def load_settings(path: Path | str | None = None) -> AccountingSettings:
    """Load accounting settings from YAML (the bundled file by default)."""
    path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    settings = settings_from_dict(load_yaml_file(path))
    logger.info(
        "settings_loaded",
        extra={
            "path": str(path),
            "currency": settings.currency,
            "fiscal_year_start": str(settings.fiscal_year_start),
            "fiscal_year_end": str(settings.fiscal_year_end),
        },
    )
    return settings


# =========================================================================
# Chart of accounts
# =========================================================================


def flatten_chart(
    tree: dict[str, Any],
    parent: str | None = None,
    root_type: str | None = None,
) -> list[AccountRecord]:
    """
    Flatten a nested chart into account records, parents first.

    Each key is an account name; its value may set ``root_type``,
    ``account_type``, ``is_group`` and ``children``.  ``is_group``
    defaults to whether the account has children.
    """
    records: list[AccountRecord] = []
    for name, node in tree.items():
        node = node or {}
        own_root_type = node.get("root_type", root_type)
        if own_root_type is None:
            raise ValueError(f"Root account {name} must declare a root_type")
        own_root_type = RootType(own_root_type).value

        account_type = node.get("account_type")
        if account_type is not None:
            account_type = AccountType(account_type).value

        children = node.get("children") or {}
        records.append(
            AccountRecord(
                name=str(name),
                root_type=own_root_type,
                is_group=bool(node.get("is_group", bool(children))),
                parent_account=parent,
                account_type=account_type,
            )
        )
        records.extend(flatten_chart(children, str(name), own_root_type))
    return records


def load_chart_of_accounts(path: Path | str | None = None) -> list[AccountRecord]:
    """Load a nested chart of accounts from YAML (the bundled one by default)."""
    path = Path(path) if path is not None else DEFAULT_CHART_PATH
    data = load_yaml_file(path)
    if "accounts" not in data:
        raise KeyError(f"Chart of accounts {path} has no 'accounts' key")
    records = flatten_chart(data["accounts"])
    logger.info(
        "chart_of_accounts_loaded",
        extra={"path": str(path), "account_count": len(records)},
    )
    return records


def install_chart(session: Session, records: list[AccountRecord]) -> list[Account]:
    """
    Create ``Account`` rows for records whose name is not yet taken.

    Flushes; the caller commits.

    Returns:
        The newly created accounts.
    """
    existing = set(session.execute(select(Account.name)).scalars())
    created = []
    for record in records:
        if record.name in existing:
            continue
        account = Account(
            name=record.name,
            root_type=record.root_type,
            is_group=record.is_group,
            parent_account=record.parent_account,
            account_type=record.account_type,
        )
        session.add(account)
        created.append(account)
        existing.add(record.name)
    session.flush()

    logger.info(
        "chart_of_accounts_installed",
        extra={"created_count": len(created), "skipped_count": len(records) - len(created)},
    )
    return created

"""
books_config -- YAML configuration for the books kernel.

Responsibility:
    Loads the accounting settings snapshot and the chart of accounts from
    YAML files.  The kernel never reads files itself: callers load an
    ``AccountingSettings`` here once and pass it into every service.

Architecture position:
    Configuration.  Sits above ``books_kernel``; the kernel MUST NEVER
    import from ``books_config``.

Failure modes:
    - ``FileNotFoundError`` -- the YAML file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.
"""

from books_config.loader import (
    DEFAULT_CHART_PATH,
    DEFAULT_SETTINGS_PATH,
    flatten_chart,
    install_chart,
    load_chart_of_accounts,
    load_settings,
    load_yaml_file,
    settings_from_dict,
)

__all__ = [
    "DEFAULT_CHART_PATH",
    "DEFAULT_SETTINGS_PATH",
    "flatten_chart",
    "install_chart",
    "load_chart_of_accounts",
    "load_settings",
    "load_yaml_file",
    "settings_from_dict",
]

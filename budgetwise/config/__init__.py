"""Configuration package."""

from budgetwise.config.settings import (
    AppSettings,
    ConfigError,
    ExportFormat,
    LedgerConfig,
    get_settings,
    load_config,
    save_config,
)

__all__ = [
    "AppSettings",
    "ConfigError",
    "ExportFormat",
    "LedgerConfig",
    "get_settings",
    "load_config",
    "save_config",
]

"""
Configuration Management for BudgetWise

Two layers:
- AppSettings: process-level settings from environment variables and .env
  (pydantic-settings). Tells us where the config file lives and how to log.
- LedgerConfig: the user's persisted configuration file (data directory,
  backup policy, default export format).

DESIGN DECISION: Storage locations are explicit values passed to the
storage layer, never module-level constants. A missing config file on first
run is not an error: defaults are written out and used.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from budgetwise.services.storage.json_file import backup_path_for


DEFAULT_HOME = Path.home() / ".budgetwise"
DEFAULT_LEDGER_FILENAME = "finance_data.json"
AUDIT_LOG_FILENAME = "audit.jsonl"


class ConfigError(Exception):
    """Configuration file exists but cannot be used."""
    pass


class ExportFormat(str, Enum):
    """
    Default format for exports.

    Recorded for export tooling outside the core; the ledger itself always
    persists JSON.
    """
    CSV = "csv"
    JSON = "json"
    PDF = "pdf"


class AppSettings(BaseSettings):
    """
    Process-level settings.

    Loads configuration from BUDGETWISE_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUDGETWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    config_path: Path = Field(
        default=DEFAULT_HOME / "config.json",
        description="Where the persisted LedgerConfig lives"
    )
    data_directory: Path = Field(
        default=DEFAULT_HOME,
        description="Data directory used when the config file is first created"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for diagnostic logs on stderr"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of console text"
    )
    audit_log_enabled: bool = Field(
        default=True,
        description="Append audit events to audit.jsonl in the data directory"
    )

    # Bulk transform
    transform_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Thread pool size for the bulk transform pass"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class LedgerConfig(BaseModel):
    """User configuration persisted as JSON."""

    data_directory: Path = Field(
        ...,
        description="Where the ledger and its backup live"
    )
    backup_enabled: bool = Field(
        default=True,
        description="Copy the previous ledger aside before each save"
    )
    default_format: ExportFormat = Field(
        default=ExportFormat.JSON,
        description="Default export format (used by export tooling only)"
    )
    ledger_filename: str = Field(
        default=DEFAULT_LEDGER_FILENAME,
        min_length=1,
        description="File name of the primary ledger inside data_directory"
    )

    @field_validator('ledger_filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        if Path(v).name != v:
            raise ValueError("ledger_filename must be a bare file name")
        return v

    @property
    def ledger_path(self) -> Path:
        return self.data_directory.expanduser() / self.ledger_filename

    @property
    def backup_path(self) -> Path:
        return backup_path_for(self.ledger_path)

    @property
    def audit_log_path(self) -> Path:
        return self.data_directory.expanduser() / AUDIT_LOG_FILENAME


def load_config(
    path: Path,
    defaults: Optional[LedgerConfig] = None,
) -> tuple[LedgerConfig, bool]:
    """
    Load the config file, creating it with defaults on first run.

    Args:
        path: Config file location
        defaults: Config to materialize if the file is missing

    Returns:
        (config, created) where created is True if defaults were written

    Raises:
        ConfigError: If the file exists but is not a valid config, or
            defaults could not be written
    """
    path = Path(path).expanduser()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        config = defaults or LedgerConfig(data_directory=DEFAULT_HOME)
        save_config(config, path)
        return config, True
    except OSError as e:
        raise ConfigError(f"Unable to read config {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid UTF-8: {e}") from e

    try:
        return LedgerConfig.model_validate_json(raw), False
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def save_config(config: LedgerConfig, path: Path) -> None:
    path = Path(path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Unable to write config {path}: {e}") from e


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()

"""
Dashboard Configuration

Pydantic models for the dashboard's JSON configuration document (accounts
plus operational settings), the loader, and the best-effort local backup
mirror.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ConfigError(Exception):
    """Raised when the dashboard configuration cannot be loaded."""


class AccountCredential(BaseModel):
    """One set of exchange credentials. Immutable for the session."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    api_key: str = Field(..., alias="apiKey")
    api_secret: str = Field(..., alias="apiSecret", repr=False)
    passphrase: str = Field(..., repr=False)
    enabled: bool = True
    equity: Optional[float] = None


class DashboardSettings(BaseModel):
    """Operational settings from the configuration document."""

    model_config = ConfigDict(populate_by_name=True)

    api_base_url: str = Field("https://api.bitget.com", alias="apiBaseUrl")
    refresh_interval: float = Field(30.0, alias="refreshInterval", gt=0)
    default_symbol: str = Field("BTCUSDT", alias="defaultSymbol")


class DashboardConfig(BaseModel):
    """Top-level configuration document."""

    model_config = ConfigDict(populate_by_name=True)

    accounts: List[AccountCredential] = Field(default_factory=list)
    settings: DashboardSettings = Field(default_factory=DashboardSettings)

    @property
    def enabled_accounts(self) -> List[AccountCredential]:
        return [account for account in self.accounts if account.enabled]


def load_config(path: PathLike) -> DashboardConfig:
    """
    Load and validate the configuration document.

    Args:
        path: Path to config.json

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        raw = json.loads(config_path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {e}") from e

    try:
        config = DashboardConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Config file {config_path} is invalid: {e}") from e

    ids = [account.id for account in config.accounts]
    if len(ids) != len(set(ids)):
        raise ConfigError(f"Config file {config_path} has duplicate account ids")

    logger.info(f"Loaded config with {len(config.accounts)} accounts "
                f"({len(config.enabled_accounts)} enabled)")
    return config


def save_config_backup(config: DashboardConfig, path: PathLike) -> bool:
    """Mirror the configuration to a local backup file. Never raises."""
    try:
        backup_path = Path(path)
        backup_path.parent.mkdir(parents=True, exist_ok=True)
        backup_path.write_text(
            config.model_dump_json(by_alias=True, indent=2),
            encoding='utf-8'
        )
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Error saving config backup to {path}: {e}")
        return False


def load_config_backup(path: PathLike) -> Optional[DashboardConfig]:
    """Load the backup mirror, or None if it is absent or unreadable."""
    backup_path = Path(path)
    if not backup_path.is_file():
        return None
    try:
        return DashboardConfig.model_validate_json(backup_path.read_text(encoding='utf-8'))
    except (OSError, ValidationError) as e:
        logger.error(f"Error loading config backup from {path}: {e}")
        return None


def load_config_with_backup(path: PathLike, backup_path: Optional[PathLike] = None) -> DashboardConfig:
    """
    Load the primary configuration, falling back to the backup mirror.

    A successful primary load refreshes the mirror.
    """
    try:
        config = load_config(path)
    except ConfigError:
        if backup_path is None:
            raise
        backup = load_config_backup(backup_path)
        if backup is None:
            raise
        logger.warning(f"Primary config unavailable, using backup {backup_path}")
        return backup

    if backup_path is not None:
        save_config_backup(config, backup_path)
    return config

"""
Dashboard configuration document: accounts and operational settings.
"""

from .dashboard_config import (
    AccountCredential, DashboardSettings, DashboardConfig, ConfigError,
    load_config, load_config_with_backup, save_config_backup, load_config_backup
)

__all__ = [
    'AccountCredential',
    'DashboardSettings',
    'DashboardConfig',
    'ConfigError',
    'load_config',
    'load_config_with_backup',
    'save_config_backup',
    'load_config_backup'
]

"""Configuration package for the records manager."""

from records.config.app_config import (
    AppConfig,
    LoggingConfig,
    StorageConfig,
    load_app_config,
)
from records.config.log_setup import configure_logging

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "StorageConfig",
    "load_app_config",
    "configure_logging",
]

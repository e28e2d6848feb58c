"""Application configuration loader.

Loads configuration from data/config/records_config_v1.yaml (or the file
named by RECORDS_CONFIG) with fallback to built-in defaults.
RECORDS_DATA_DIR overrides storage.data_dir.

Usage:
    from records.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.storage.db_path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to working directory)
CONFIG_FILE = Path("data/config/records_config_v1.yaml")

CONFIG_ENV = "RECORDS_CONFIG"
DATA_DIR_ENV = "RECORDS_DATA_DIR"


@dataclass
class StorageConfig:
    """Where the database and exports live."""

    data_dir: str = "data"
    db_filename: str = "data_store.db"
    export_dir: str = "exports"

    @property
    def db_path(self) -> Path:
        return Path(self.data_dir) / self.db_filename

    @property
    def export_path(self) -> Path:
        return Path(self.export_dir)


@dataclass
class LoggingConfig:
    """Log level for structlog output (stderr)."""

    level: str = "WARNING"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: str = "defaults"


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "storage": {
            "data_dir": "data",
            "db_filename": "data_store.db",
            "export_dir": "exports",
        },
        "logging": {
            "level": "WARNING",
        },
    }


def _parse_config(data: dict[str, Any], source: str) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    storage_data = {**defaults["storage"], **(data.get("storage") or {})}
    storage = StorageConfig(
        data_dir=str(storage_data["data_dir"]),
        db_filename=str(storage_data["db_filename"]),
        export_dir=str(storage_data["export_dir"]),
    )

    logging_data = {**defaults["logging"], **(data.get("logging") or {})}
    log_config = LoggingConfig(level=str(logging_data["level"]).upper())

    return AppConfig(storage=storage, logging=log_config, source=source)


def _config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = _config_path()
    data: dict[str, Any]

    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.warning("app_config_invalid", source=str(config_path), error=str(e))
            data = _get_defaults()
            config_path = None
        if not isinstance(data, dict):
            logger.warning("app_config_invalid", source=str(config_path), error="not a mapping")
            data = _get_defaults()
            config_path = None
    else:
        logger.debug("using_default_config")
        data = _get_defaults()
        config_path = None

    config = _parse_config(data, str(config_path) if config_path else "defaults")

    data_dir = os.environ.get(DATA_DIR_ENV)
    if data_dir:
        config.storage.data_dir = data_dir

    _cached_config = config
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None

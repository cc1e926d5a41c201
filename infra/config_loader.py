from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from infra.formatting import format_datetime, human_file_size
from infra.logging_config import get_logger

logger = get_logger(__name__)


# =========================
# CONFIG MODELS
# =========================


class DatastoreConfig(BaseModel):
    """
    Where datastore files live and how they are named.

    Every store ``name`` maps to ``<data_dir>/<file_prefix><name><file_extension>``.
    The ``.php`` extension is deliberate: the header starts with an exit
    sentinel, so a web server executing the file stops before any entry.
    """

    data_dir: Path = Path("data/sucuri")
    file_prefix: str = "sucuri-"
    file_extension: str = ".php"
    dir_mode: int = 0o750
    file_mode: int = 0o640
    default_lifetime: int = 86400
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @field_validator("default_lifetime")
    @classmethod
    def _non_negative_lifetime(cls, v: int) -> int:
        if v < 0:
            raise ValueError("default_lifetime must be >= 0")
        return v

    @field_validator("dir_mode", "file_mode")
    @classmethod
    def _valid_mode(cls, v: int) -> int:
        if not 0 <= v <= 0o777:
            raise ValueError("mode must be within 0o000..0o777")
        return v

    def store_path(self, name: str) -> Path:
        return self.data_dir / f"{self.file_prefix}{name}{self.file_extension}"

    # Shared helpers handed to the store and its callers.

    def human_file_size(self, num_bytes: Optional[int]) -> str:
        return human_file_size(num_bytes)

    def format_datetime(self, epoch: Any) -> str:
        return format_datetime(epoch, self.date_format)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class AppConfig(BaseModel):
    datastore: DatastoreConfig = Field(default_factory=DatastoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =========================
# LOADER
# =========================

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "default.yml"

_ENV_OVERRIDES = {
    "SCANCACHE_DATA_DIR": ("datastore", "data_dir"),
    "SCANCACHE_LOG_LEVEL": ("logging", "level"),
    "SCANCACHE_LOG_FORMAT": ("logging", "format"),
}

_APP_CONFIG: Optional[AppConfig] = None


def _read_raw_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML safely; any problem yields an empty mapping."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(
            "Config file not found, using defaults",
            extra={"extra_data": {"config_path": str(path)}},
        )
        return {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error(
            "Error reading config file, using defaults",
            extra={"extra_data": {"config_path": str(path), "error": str(exc)}},
        )
        return {}

    if not isinstance(data, dict):
        logger.error(
            "Config YAML root is not a mapping, falling back to defaults",
            extra={"extra_data": {"config_path": str(path)}},
        )
        return {}
    return data


def _apply_env(raw: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        block = raw.get(section)
        if not isinstance(block, dict):
            block = {}
            raw[section] = block
        block[key] = value
    return raw


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load YAML config, apply env overrides, validate with pydantic.

    - No file -> defaults.
    - Invalid values -> defaults (logged).
    - Cached in memory unless a specific path is requested.
    """
    global _APP_CONFIG

    if _APP_CONFIG is not None and path is None:
        return _APP_CONFIG

    load_dotenv()

    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    raw = _apply_env(_read_raw_yaml(config_path))

    try:
        app_config = AppConfig(**raw)
    except ValidationError as exc:
        logger.error(
            "Invalid config, using defaults",
            extra={"extra_data": {"config_path": str(config_path), "error": str(exc)}},
        )
        app_config = AppConfig()

    _APP_CONFIG = app_config
    logger.debug(
        "Config loaded",
        extra={"extra_data": {"config_path": str(config_path)}},
    )
    return app_config


def get_app_config() -> AppConfig:
    return load_config()


def reset_config_cache() -> None:
    global _APP_CONFIG
    _APP_CONFIG = None

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from infra.config_loader import LoggingConfig


_TEXT_FMT = "%(asctime)s %(levelname)s %(name)s | %(message)s"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record. ``extra={"extra_data": {...}}`` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            log_entry.update(getattr(record, "extra_data"))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(config: Optional["LoggingConfig"] = None) -> None:
    """
    Install a stdout handler on the root logger.

    Importing this module does nothing; callers (the CLI) opt in. If the
    root logger already has handlers (pytest, host app) it is left alone.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    if config is None:
        from infra.config_loader import get_app_config

        config = get_app_config().logging

    log_level = getattr(logging, config.level.upper(), logging.INFO)

    if config.format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(_TEXT_FMT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_kv(logger: logging.Logger, msg: str, level: int = logging.INFO, **kv: Any) -> None:
    if not kv:
        logger.log(level, msg)
        return
    extra = " ".join([f"{k}={kv[k]!r}" for k in sorted(kv.keys())])
    logger.log(level, "%s | %s", msg, extra, extra={"extra_data": dict(kv)})

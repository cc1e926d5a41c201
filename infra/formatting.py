from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def human_file_size(num_bytes: Optional[int]) -> str:
    """
    1024-based size with two decimals, e.g. ``1536 -> "1.50 KB"``.

    ``None`` (size unknown, file missing) renders as ``"0 B"``.
    """
    if not num_bytes or num_bytes < 0:
        return "0 B"

    size = float(num_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if size < 1024 or unit == _SIZE_UNITS[-1]:
            break
        size /= 1024

    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.2f} {unit}"


def format_datetime(epoch: Any, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format an epoch timestamp (int, float or numeric str) in UTC; bad input -> ``""``."""
    try:
        ts = float(epoch)
    except (TypeError, ValueError):
        return ""
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime(fmt)
    except (OverflowError, OSError, ValueError):
        return ""


def as_int(value: Any, default: int = 0) -> int:
    """Lenient int() for values read back from text files."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default

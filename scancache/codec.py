"""
Line format of a datastore file.

    <?php
    // datastore=integrity;
    // created_on=1700000000;
    // updated_on=1700000000;
    exit(0);
    ?>
    3f2a...:{"file_path": "/a.php", "file_status": "modified"}

Header lines are ``// name=value;``. Entry lines are ``key:<json>``, split
on the first ``:``. Everything else (the exit sentinel, blank or torn
lines) is skipped on read.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import SimpleNamespace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from infra.logging_config import get_logger
from scancache.errors import DecodeFailureError, MalformedLineError

logger = get_logger(__name__)

HEADER_MARKER = "//\x20"
HEADER_ATTRS = ("datastore", "created_on", "updated_on")
EXIT_SENTINEL_OPEN = "<?php\n"
EXIT_SENTINEL_CLOSE = "exit(0);\n?>\n"


class DecodeMode(str, Enum):
    MAPPING = "mapping"
    OBJECT = "object"


@dataclass
class DatastoreContent:
    header: Dict[str, str] = field(default_factory=dict)
    entries: Dict[str, Any] = field(default_factory=dict)


def header_line(name: str, value: Any) -> str:
    return f"{HEADER_MARKER}{name}={value};\n"


def render_header(attrs: Mapping[str, Any]) -> str:
    body = "".join(header_line(k, v) for k, v in attrs.items())
    return EXIT_SENTINEL_OPEN + body + EXIT_SENTINEL_CLOSE


def encode_entry(key: str, value: Any) -> str:
    """``key:<json>\\n``. Raises TypeError/ValueError for values JSON can't carry."""
    # ensure_ascii keeps U+2028 and friends escaped, so one entry is one line.
    return f"{key}:{json.dumps(value, ensure_ascii=True, allow_nan=False)}\n"


def render_entries(entries: Mapping[str, Any]) -> str:
    return "".join(encode_entry(k, v) for k, v in entries.items())


def parse_header_line(line: str) -> Optional[Tuple[str, str]]:
    if not line.startswith(HEADER_MARKER) or "=" not in line or not line.endswith(";"):
        return None
    section = line[len(HEADER_MARKER):-1]
    name, value = section.split("=", 1)
    return name, value


def decode_value(raw: str, mode: DecodeMode = DecodeMode.MAPPING) -> Any:
    try:
        if mode == DecodeMode.OBJECT:
            return json.loads(raw, object_hook=lambda d: SimpleNamespace(**d))
        return json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise DecodeFailureError(str(exc)) from exc


def parse_entry_line(line: str, mode: DecodeMode = DecodeMode.MAPPING) -> Tuple[str, Any]:
    if ":" not in line:
        raise MalformedLineError(line[:80])
    key, raw = line.split(":", 1)
    try:
        value = decode_value(raw, mode)
    except DecodeFailureError as exc:
        logger.debug("datastore: undecodable value kept as None key=%r (%s)", key, exc)
        value = None
    return key, value


def parse_lines(
    lines: Iterable[str],
    mode: DecodeMode = DecodeMode.MAPPING,
    header_only: bool = False,
) -> DatastoreContent:
    """
    Build header + entries from raw lines.

    The first occurrence of a key wins; later duplicates are ignored until
    the store is rewritten.
    """
    content = DatastoreContent()
    for line in lines:
        parsed = parse_header_line(line)
        if parsed is not None:
            content.header[parsed[0]] = parsed[1]
            continue

        if header_only:
            continue

        try:
            key, value = parse_entry_line(line, mode)
        except MalformedLineError:
            continue

        if key not in content.entries:
            content.entries[key] = value
    return content

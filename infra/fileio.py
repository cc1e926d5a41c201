from __future__ import annotations

from pathlib import Path
from typing import List, Protocol


class LineReader(Protocol):
    """Anything that can hand back the lines of a file."""

    def read_lines(self, path: Path) -> List[str]:
        ...


class FileLines:
    """
    Default line reader: utf-8, newline characters stripped.

    Raises OSError like ``open`` does; callers decide what a missing or
    unreadable file means for them.
    """

    def read_lines(self, path: Path) -> List[str]:
        with Path(path).open("r", encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\r\n") for line in f]


def file_size(path: Path) -> int:
    """Size in bytes, 0 when the file is missing or unreadable."""
    try:
        return Path(path).stat().st_size
    except OSError:
        return 0

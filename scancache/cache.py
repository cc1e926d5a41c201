"""
File-backed datastore cache.

One store per name, one file per store. Writes append ``key:<json>``
lines; reads take the first occurrence of each key. ``delete``,
``override`` and ``compact`` rewrite the whole file and are the only
operations that move the header's ``updated_on``, which is the clock every
``lifetime`` check runs against.

Nothing here raises on I/O trouble: failures are logged and reported as
``False`` / not-found. Bad key names raise ``InvalidKeyError`` before the
file is touched.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import deal

from infra.config_loader import DatastoreConfig, get_app_config
from infra.fileio import FileLines, LineReader, file_size
from infra.formatting import as_int
from infra.logging_config import get_logger, log_kv
from infra.result import Err, Ok, Result
from infra.time_utils import epoch_now
from scancache.codec import (
    HEADER_ATTRS,
    DatastoreContent,
    DecodeMode,
    encode_entry,
    parse_lines,
    render_entries,
    render_header,
)
from scancache.errors import InvalidKeyError, UnwritablePathError
from scancache.keys import is_valid_key, require_valid_key

logger = get_logger(__name__)


class DatastoreCache:
    @deal.pre(
        lambda self, name, auto_create=True, *, config=None, reader=None, clock=None: isinstance(name, str),
        message="store name must be str",
    )
    def __init__(
        self,
        name: str,
        auto_create: bool = True,
        *,
        config: Optional[DatastoreConfig] = None,
        reader: Optional[LineReader] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.name = name
        self._config: DatastoreConfig = config if config is not None else get_app_config().datastore
        self._reader: LineReader = reader if reader is not None else FileLines()
        self._clock: Callable[[], int] = clock if clock is not None else epoch_now
        self._auto_create = bool(auto_create)
        self.path: Optional[Path] = self._resolve_path()
        self.usable: bool = self._check_usable()

    def __repr__(self) -> str:
        return f"DatastoreCache(name={self.name!r}, path={str(self.path)!r}, usable={self.usable})"

    @property
    def config(self) -> DatastoreConfig:
        return self._config

    # ------------------------------------------------------------------
    # path / lifecycle
    # ------------------------------------------------------------------

    def _resolve_path(self) -> Optional[Path]:
        if not is_valid_key(self.name):
            log_kv(logger, "datastore: invalid store name", level=logging.WARNING, name=self.name)
            return None

        path = self._config.store_path(self.name)
        if self._auto_create and not path.exists():
            created = self._create(path)
            if created.is_err():
                log_kv(
                    logger,
                    "datastore: cannot create store",
                    level=logging.WARNING,
                    name=self.name,
                    error=str(created.error),  # type: ignore[attr-defined]
                )
        return path

    def _check_usable(self) -> bool:
        if self.path is None:
            return False
        try:
            return self.path.is_file() and os.access(self.path, os.R_OK | os.W_OK)
        except OSError:
            return False

    def _ensure_directory(self, path: Path) -> Result[Path, UnwritablePathError]:
        directory = path.parent
        if directory.is_dir():
            return Ok(directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            os.chmod(directory, self._config.dir_mode)
        except OSError as exc:
            return Err(UnwritablePathError(directory, str(exc)))
        return Ok(directory)

    def _create(self, path: Path) -> Result[int, UnwritablePathError]:
        return self._ensure_directory(path).bind(
            lambda _d: self._write_atomic(path, render_header(self.datastore_default_info()))
        )

    def _ensure_store(self) -> Result[Path, UnwritablePathError]:
        """The store file exists, re-creating it after a flush when auto_create allows."""
        path = self.path
        if path is None:
            return Err(UnwritablePathError(self.name, "invalid store name"))
        if path.exists():
            return Ok(path)
        if not self._auto_create:
            return Err(UnwritablePathError(path, "store file is missing"))
        return self._create(path).map(lambda _n: path)

    # ------------------------------------------------------------------
    # raw I/O
    # ------------------------------------------------------------------

    def _write_atomic(self, path: Path, text: str) -> Result[int, UnwritablePathError]:
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
                f.flush()
            os.chmod(tmp_name, self._config.file_mode)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.debug("datastore: temp file left behind %s", tmp_name)
            return Err(UnwritablePathError(path, str(exc)))
        return Ok(len(text))

    def _append(self, path: Path, text: str) -> Result[int, UnwritablePathError]:
        # a torn last line (interrupted append) gets terminated first
        data = text.encode("utf-8")
        try:
            with path.open("a+b") as f:
                if f.seek(0, os.SEEK_END) > 0:
                    f.seek(-1, os.SEEK_END)
                    if f.read(1) != b"\n":
                        data = b"\n" + data
                written = f.write(data)
        except OSError as exc:
            return Err(UnwritablePathError(path, str(exc)))
        return Ok(written)

    def _read_lines(self) -> List[str]:
        if self.path is None:
            return []
        try:
            return list(self._reader.read_lines(self.path))
        except FileNotFoundError:
            return []
        except OSError as exc:
            log_kv(logger, "datastore: read failed", level=logging.WARNING, path=str(self.path), error=str(exc))
            return []

    # ------------------------------------------------------------------
    # header / content
    # ------------------------------------------------------------------

    def now(self) -> int:
        return self._clock()

    def datastore_default_info(self) -> Dict[str, Any]:
        now = self.now()
        return {"datastore": self.name, "created_on": now, "updated_on": now}

    def _rewrite_header(self, previous: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        attrs = self.datastore_default_info()
        if previous:
            for attr in HEADER_ATTRS:
                if attr != "updated_on" and attr in previous:
                    attrs[attr] = previous[attr]
        return attrs

    def _save_new_entries(self, previous: Optional[Mapping[str, Any]], entries: Mapping[str, Any]) -> bool:
        """Full rewrite: fresh header (created_on kept, updated_on bumped) + entries."""
        path = self.path
        if path is None:
            return False
        try:
            body = render_entries(entries)
        except (TypeError, ValueError) as exc:
            log_kv(logger, "datastore: entries not JSON-encodable", level=logging.WARNING, name=self.name, error=str(exc))
            return False

        text = render_header(self._rewrite_header(previous)) + body
        result = self._ensure_directory(path).bind(lambda _d: self._write_atomic(path, text))
        if result.is_err():
            log_kv(
                logger,
                "datastore: rewrite failed",
                level=logging.WARNING,
                name=self.name,
                error=str(result.error),  # type: ignore[attr-defined]
            )
            return False

        log_kv(logger, "datastore: rewritten", level=logging.DEBUG, name=self.name, entries=len(entries))
        return True

    @deal.raises()
    def load_content(self, mode: DecodeMode = DecodeMode.MAPPING, header_only: bool = False) -> DatastoreContent:
        """Parse the store file. Missing or unreadable files give empty content."""
        return parse_lines(self._read_lines(), mode=mode, header_only=header_only)

    @deal.raises()
    def get_datastore_info(self) -> Optional[Dict[str, Any]]:
        """Header attributes plus ``fpath``; None when there is no readable header."""
        content = self.load_content(header_only=True)
        if not content.header:
            return None
        info: Dict[str, Any] = dict(content.header)
        info["fpath"] = str(self.path)
        return info

    @deal.post(lambda result: isinstance(result, int) and result >= 0)
    def get_count(self, content: Optional[DatastoreContent] = None) -> int:
        if content is None:
            content = self.load_content()
        return len(content.entries)

    def size(self) -> int:
        return file_size(self.path) if self.path is not None else 0

    @deal.post(lambda result: isinstance(result, bool))
    def data_has_expired(self, lifetime: int = 0, content: Optional[DatastoreContent] = None) -> bool:
        """True once ``lifetime`` seconds have passed since the last full rewrite."""
        if content is None:
            header: Mapping[str, Any] = self.get_datastore_info() or {}
        else:
            header = content.header

        if lifetime > 0 and header:
            return self.now() - as_int(header.get("updated_on")) >= lifetime
        return False

    # ------------------------------------------------------------------
    # public key/value API
    # ------------------------------------------------------------------

    @deal.pre(lambda self, key, lifetime=0, mode=DecodeMode.MAPPING, default=None: isinstance(lifetime, int))
    @deal.raises(InvalidKeyError)
    def get(
        self,
        key: str,
        lifetime: int = 0,
        mode: DecodeMode = DecodeMode.MAPPING,
        default: Any = None,
    ) -> Any:
        """First stored value for ``key``, or ``default`` when missing or expired."""
        require_valid_key(key)
        if not self.usable:
            return default

        content = self.load_content(mode)
        if self.data_has_expired(lifetime, content) or key not in content.entries:
            return default
        return content.entries[key]

    @deal.pre(lambda self, lifetime=0, mode=DecodeMode.MAPPING: isinstance(lifetime, int))
    @deal.raises()
    def get_all(self, lifetime: int = 0, mode: DecodeMode = DecodeMode.MAPPING) -> Optional[Dict[str, Any]]:
        """
        Every entry (first occurrence per key).

        Returns None, not ``{}``, when the store has expired or is unusable;
        an empty but fresh store gives ``{}``.
        """
        if not self.usable:
            return None

        content = self.load_content(mode)
        if self.data_has_expired(lifetime, content):
            return None
        return content.entries

    @deal.post(lambda result: isinstance(result, bool))
    @deal.raises(InvalidKeyError)
    def set(self, key: str, value: Any) -> bool:
        """
        Append ``key:<json>``. Earlier lines for the same key are not touched,
        so ``get`` keeps returning the first value until a rewrite.
        """
        require_valid_key(key)
        if not self.usable:
            return False

        try:
            line = encode_entry(key, value)
        except (TypeError, ValueError) as exc:
            log_kv(logger, "datastore: value not JSON-encodable", level=logging.WARNING, key=key, error=str(exc))
            return False

        result = self._ensure_store().bind(lambda path: self._append(path, line))
        if result.is_err():
            log_kv(
                logger,
                "datastore: append failed",
                level=logging.WARNING,
                name=self.name,
                error=str(result.error),  # type: ignore[attr-defined]
            )
            return False
        return True

    def add(self, key: str, value: Any) -> bool:
        return self.set(key, value)

    @deal.post(lambda result: isinstance(result, bool))
    @deal.raises(InvalidKeyError)
    def exists(self, key: str) -> bool:
        require_valid_key(key)
        if not self.usable:
            return False
        return key in self.load_content().entries

    @deal.post(lambda result: isinstance(result, bool))
    @deal.raises(InvalidKeyError)
    def delete(self, key: str) -> bool:
        """Drop every line for ``key``. Deleting a missing key succeeds without writing."""
        require_valid_key(key)
        if not self.usable:
            return False

        content = self.load_content()
        if key not in content.entries:
            return True

        del content.entries[key]
        return self._save_new_entries(content.header, content.entries)

    @deal.pre(lambda self, entries: isinstance(entries, Mapping), message="entries must be a mapping")
    @deal.post(lambda result: isinstance(result, bool))
    @deal.raises(InvalidKeyError)
    def override(self, entries: Mapping[str, Any]) -> bool:
        """Replace the whole store content with ``entries``."""
        for key in entries:
            require_valid_key(key)
        if not self.usable:
            return False
        return self._save_new_entries(self.get_datastore_info(), entries)

    @deal.post(lambda result: isinstance(result, bool))
    def compact(self) -> bool:
        """Rewrite the store keeping one line per key (the first seen)."""
        if not self.usable:
            return False
        content = self.load_content()
        return self._save_new_entries(content.header, content.entries)

    @deal.post(lambda result: isinstance(result, bool))
    @deal.raises()
    def flush(self) -> bool:
        """Remove the store file. False when there was nothing to remove."""
        if self.path is None:
            return False
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            log_kv(logger, "datastore: flush failed", level=logging.WARNING, path=str(self.path), error=str(exc))
            return False
        log_kv(logger, "datastore: flushed", level=logging.DEBUG, name=self.name)
        return True


def open_datastore(name: str, auto_create: bool = True, **kwargs: Any) -> DatastoreCache:
    return DatastoreCache(name, auto_create, **kwargs)

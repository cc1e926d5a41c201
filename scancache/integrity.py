"""
Ignore list for the core integrity checker.

Files the administrator marked as "don't report this again" live in the
``integrity`` store, keyed by the md5 of their path.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from infra.config_loader import DatastoreConfig, get_app_config
from infra.formatting import as_int
from infra.logging_config import get_logger, log_kv
from scancache.cache import DatastoreCache

logger = get_logger(__name__)

INTEGRITY_STORE = "integrity"
FILE_STATUSES = ("added", "modified", "removed")


@dataclass(frozen=True)
class IgnoredFile:
    key: str
    file_path: str
    file_status: str
    ignored_at: int

    @property
    def unique_id(self) -> str:
        return self.key[:8]


class IntegrityIgnoreList:
    def __init__(
        self,
        cache: Optional[DatastoreCache] = None,
        config: Optional[DatastoreConfig] = None,
    ) -> None:
        self._config = config if config is not None else (
            cache.config if cache is not None else get_app_config().datastore
        )
        self._cache = cache if cache is not None else DatastoreCache(INTEGRITY_STORE, config=self._config)

    @property
    def cache(self) -> DatastoreCache:
        return self._cache

    @staticmethod
    def key_for(path: str) -> str:
        return hashlib.md5(path.encode("utf-8")).hexdigest()

    def ignore(self, path: str, status: str, ignored_at: Optional[int] = None) -> bool:
        if status not in FILE_STATUSES:
            raise ValueError(f"unknown file status: {status!r}")
        if self.is_ignored(path):
            return True
        entry = {
            "file_path": path,
            "file_status": status,
            "ignored_at": ignored_at if ignored_at is not None else self._cache.now(),
        }
        return self._cache.add(self.key_for(path), entry)

    def unignore(self, paths: Iterable[str]) -> List[str]:
        """Stop ignoring ``paths``; returns the ones that were actually in the list."""
        removed: List[str] = []
        for path in paths:
            key = self.key_for(path)
            if not self._cache.exists(key):
                continue
            if self._cache.delete(key):
                removed.append(path)

        if removed:
            log_kv(logger, "integrity: files no longer ignored", level=logging.INFO, paths=",".join(removed))
        return removed

    def is_ignored(self, path: str) -> bool:
        return self._cache.exists(self.key_for(path))

    def ignored_files(self, lifetime: int = 0) -> List[IgnoredFile]:
        entries = self._cache.get_all(lifetime) or {}
        files: List[IgnoredFile] = []
        for key, data in entries.items():
            if not isinstance(data, dict):
                continue
            files.append(
                IgnoredFile(
                    key=key,
                    file_path=str(data.get("file_path", "")),
                    file_status=str(data.get("file_status", "")),
                    ignored_at=as_int(data.get("ignored_at")),
                )
            )
        files.sort(key=lambda f: (f.ignored_at, f.file_path))
        return files

    def summary(self) -> Dict[str, Any]:
        files = self.ignored_files()
        return {
            "cache_size": self._config.human_file_size(self._cache.size()),
            "cache_lifetime": self._config.default_lifetime,
            "total": len(files),
            "ignored": [
                {
                    "unique_id": f.unique_id,
                    "file_path": f.file_path,
                    "file_status": f.file_status,
                    "ignored_at": self._config.format_datetime(f.ignored_at),
                }
                for f in files
            ],
        }

"""
scancache - file-backed key/value datastore for scanner state.

    from scancache import DatastoreCache

    store = DatastoreCache("integrity")
    store.set("abc123", {"file_path": "/a.php", "file_status": "modified"})
    store.get("abc123")
"""

from __future__ import annotations

from scancache.cache import DatastoreCache, open_datastore
from scancache.codec import DatastoreContent, DecodeMode
from scancache.errors import (
    DatastoreError,
    DecodeFailureError,
    InvalidKeyError,
    MalformedLineError,
    UnwritablePathError,
)
from scancache.integrity import IgnoredFile, IntegrityIgnoreList
from scancache.keys import is_valid_key

__version__ = "1.0.0"

__all__ = [
    "DatastoreCache",
    "open_datastore",
    "DatastoreContent",
    "DecodeMode",
    "DatastoreError",
    "DecodeFailureError",
    "InvalidKeyError",
    "MalformedLineError",
    "UnwritablePathError",
    "IgnoredFile",
    "IntegrityIgnoreList",
    "is_valid_key",
]

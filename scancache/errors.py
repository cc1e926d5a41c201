from __future__ import annotations


class DatastoreError(Exception):
    """Base error for the datastore cache."""


class InvalidKeyError(DatastoreError, ValueError):
    """Key (or store name) is empty or has characters outside [A-Za-z0-9_]."""

    def __init__(self, key: object) -> None:
        super().__init__(f"Invalid cache key name: {key!r}")
        self.key = key


class UnwritablePathError(DatastoreError):
    """Store directory or file could not be created, written or removed."""

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedLineError(DatastoreError):
    """A line is neither a header line nor an entry line. Skipped on read."""


class DecodeFailureError(DatastoreError):
    """An entry value is not valid JSON. The entry is kept with value None."""

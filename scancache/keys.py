from __future__ import annotations

import string
from typing import Any

from scancache.errors import InvalidKeyError

KEY_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def is_valid_key(key: Any) -> bool:
    """True for non-empty str made only of ASCII letters, digits and ``_``."""
    if not isinstance(key, str) or not key:
        return False
    return all(ch in KEY_CHARS for ch in key)


def require_valid_key(key: Any) -> str:
    if not is_valid_key(key):
        raise InvalidKeyError(key)
    return key

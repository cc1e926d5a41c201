from __future__ import annotations

import time
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def epoch_now() -> int:
    """Whole seconds since the epoch; what datastore headers record."""
    return int(time.time())

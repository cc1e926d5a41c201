from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from infra.config_loader import DatastoreConfig

# Property tests touch the filesystem; slow disks trip the default deadline.
settings.register_profile(
    "scancache_stable",
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)

settings.load_profile("scancache_stable")


class FakeClock:
    """Settable epoch clock injected into DatastoreCache."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ds_config(tmp_path: Path) -> DatastoreConfig:
    return DatastoreConfig(data_dir=tmp_path / "data" / "sucuri")

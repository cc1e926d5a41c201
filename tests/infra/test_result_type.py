from __future__ import annotations

from infra.result import Err, Ok, Result
from infra.time_utils import epoch_now, now_utc
from scancache.errors import UnwritablePathError


def test_ok_and_err_flags() -> None:
    r1: Result[int, str] = Ok(10)
    r2: Result[int, str] = Err("boom")

    assert r1.is_ok() and not r1.is_err()
    assert r2.is_err() and not r2.is_ok()


def test_bind_chains_io_steps() -> None:
    def mkdir() -> Result[str, UnwritablePathError]:
        return Ok("/data")

    def write(d: str) -> Result[int, UnwritablePathError]:
        return Ok(len(d))

    r = mkdir().bind(write).map(lambda n: n + 1)
    assert r == Ok(6)


def test_err_short_circuits() -> None:
    calls = []

    def write(d: str) -> Result[int, UnwritablePathError]:
        calls.append(d)
        return Ok(1)

    failed: Result[str, UnwritablePathError] = Err(UnwritablePathError("/data", "read-only file system"))
    r = failed.bind(write).map(lambda n: n * 2)

    assert r.is_err()
    assert calls == []
    assert isinstance(r, Err) and r.error.reason == "read-only file system"


def test_clock_helpers_agree() -> None:
    assert abs(epoch_now() - int(now_utc().timestamp())) <= 1

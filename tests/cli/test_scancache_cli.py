from __future__ import annotations

import json
from pathlib import Path

import pytest

from infra.config_loader import DatastoreConfig, reset_config_cache
from scancache.cache import DatastoreCache
from scancache.cli.main import build_parser, main


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config_cache()
    yield
    reset_config_cache()


def _argv(tmp_path: Path, *rest: str) -> list[str]:
    return ["--config", str(tmp_path / "none.yml"), "--data-dir", str(tmp_path / "data"), *rest]


def _store(tmp_path: Path, name: str = "integrity") -> DatastoreCache:
    return DatastoreCache(name, config=DatastoreConfig(data_dir=tmp_path / "data"))


def _kv(out: str) -> dict:
    return dict(line.split("=", 1) for line in out.strip().splitlines() if "=" in line)


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_info(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = _store(tmp_path)
    store.set("a", 1)
    store.set("a", 2)

    rc = main(_argv(tmp_path, "info", "integrity", "--lifetime", "3600"))

    kv = _kv(capsys.readouterr().out)
    assert rc == 0
    assert kv["datastore"] == "integrity"
    assert kv["fpath"] == str(store.path)
    assert kv["entries"] == "1"
    assert kv["usable"] == "true"
    assert kv["expired"] == "false"
    assert kv["size"].endswith("B")


def test_info_missing_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(_argv(tmp_path, "info", "nothing"))
    assert rc == 1
    assert "status=missing" in capsys.readouterr().out
    assert not (tmp_path / "data" / "sucuri-nothing.php").exists()


def test_entries_all_and_single(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = _store(tmp_path)
    store.set("abc", {"file_path": "/a.php"})
    store.set("n", None)

    assert main(_argv(tmp_path, "entries", "integrity")) == 0
    assert json.loads(capsys.readouterr().out) == {"abc": {"file_path": "/a.php"}, "n": None}

    assert main(_argv(tmp_path, "entries", "integrity", "--key", "n")) == 0
    assert json.loads(capsys.readouterr().out) is None

    assert main(_argv(tmp_path, "entries", "integrity", "--key", "zzz")) == 1
    assert "key not found" in capsys.readouterr().out


def test_entries_invalid_key_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _store(tmp_path)
    rc = main(_argv(tmp_path, "entries", "integrity", "--key", "bad:key"))
    assert rc == 2
    assert "Invalid cache key name" in capsys.readouterr().out


def test_delete_flush_compact(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = _store(tmp_path)
    store.set("a", 1)
    store.set("a", 2)
    store.set("b", 3)

    assert main(_argv(tmp_path, "compact", "integrity")) == 0
    kv = _kv(capsys.readouterr().out)
    assert kv["compacted"] == "true"
    assert kv["entries"] == "2"

    assert main(_argv(tmp_path, "delete", "integrity", "b")) == 0
    assert _kv(capsys.readouterr().out)["deleted"] == "true"
    assert store.get_all() == {"a": 1}

    assert main(_argv(tmp_path, "flush", "integrity")) == 0
    assert _kv(capsys.readouterr().out)["flushed"] == "true"
    assert store.path is not None and not store.path.exists()

    assert main(_argv(tmp_path, "flush", "integrity")) == 1

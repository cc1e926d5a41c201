from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from infra import config_loader
from infra.config_loader import AppConfig, DatastoreConfig, load_config, reset_config_cache


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("SCANCACHE_DATA_DIR", "SCANCACHE_LOG_LEVEL", "SCANCACHE_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg == AppConfig()
    assert cfg.datastore.file_prefix == "sucuri-"
    assert cfg.datastore.file_extension == ".php"


def test_yaml_values_are_loaded(tmp_path: Path) -> None:
    p = tmp_path / "c.yml"
    p.write_text(
        "datastore:\n"
        "  data_dir: /var/lib/scanner\n"
        "  default_lifetime: 600\n"
        "  dir_mode: 0700\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  format: text\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.datastore.data_dir == Path("/var/lib/scanner")
    assert cfg.datastore.default_lifetime == 600
    assert cfg.datastore.dir_mode == 0o700
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "text"


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    p = tmp_path / "c.yml"
    p.write_text("datastore:\n  default_lifetime: -1\n", encoding="utf-8")
    assert load_config(p) == AppConfig()


def test_non_mapping_root_falls_back(tmp_path: Path) -> None:
    p = tmp_path / "c.yml"
    p.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(p) == AppConfig()


def test_broken_yaml_falls_back(tmp_path: Path) -> None:
    p = tmp_path / "c.yml"
    p.write_text("datastore: [unclosed\n", encoding="utf-8")
    assert load_config(p) == AppConfig()


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCANCACHE_DATA_DIR", str(tmp_path / "env_dir"))
    monkeypatch.setenv("SCANCACHE_LOG_LEVEL", "WARNING")
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg.datastore.data_dir == tmp_path / "env_dir"
    assert cfg.logging.level == "WARNING"


def test_cached_until_reset(tmp_path: Path) -> None:
    first = load_config(tmp_path / "missing.yml")
    assert config_loader.get_app_config() is first
    reset_config_cache()
    assert config_loader._APP_CONFIG is None


def test_store_path_naming(tmp_path: Path) -> None:
    cfg = DatastoreConfig(data_dir=tmp_path)
    assert cfg.store_path("integrity") == tmp_path / "sucuri-integrity.php"


def test_shared_helpers_on_config() -> None:
    cfg = DatastoreConfig(date_format="%Y/%m/%d")
    assert cfg.human_file_size(2048) == "2.00 KB"
    assert cfg.format_datetime(86400) == "1970/01/02"


def test_repo_default_config_is_valid() -> None:
    cfg = load_config(Path(config_loader.__file__).resolve().parents[1] / "config" / "default.yml")
    assert isinstance(cfg.datastore, DatastoreConfig)
    assert cfg.datastore.default_lifetime > 0

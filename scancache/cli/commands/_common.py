from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from infra.config_loader import DatastoreConfig, load_config
from scancache.cache import DatastoreCache


def datastore_config(args: argparse.Namespace) -> DatastoreConfig:
    config_path: Optional[str] = getattr(args, "config", None)
    cfg = load_config(Path(config_path) if config_path else None).datastore
    data_dir: Optional[str] = getattr(args, "data_dir", None)
    if data_dir:
        cfg = cfg.model_copy(update={"data_dir": Path(data_dir)})
    return cfg


def open_store(args: argparse.Namespace, auto_create: bool = False) -> DatastoreCache:
    return DatastoreCache(args.name, auto_create, config=datastore_config(args))


def emit(key: str, value: object) -> None:
    print(f"{key}={value}", flush=True)

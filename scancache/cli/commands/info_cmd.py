from __future__ import annotations

import argparse

from scancache.cli.commands._common import emit, open_store


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("info", help="Show a store's header, path, entry count and size.")
    p.add_argument("name", help="Store name, e.g. integrity.")
    p.add_argument("--lifetime", type=int, default=0, help="Also report whether the store is expired for this lifetime.")
    p.set_defaults(_fn=_run)


def _run(args: argparse.Namespace) -> int:
    store = open_store(args)
    info = store.get_datastore_info()
    if info is None:
        emit("datastore", args.name)
        emit("status", "missing")
        return 1

    content = store.load_content()
    cfg = store.config
    emit("datastore", info.get("datastore", args.name))
    emit("fpath", info["fpath"])
    emit("created_on", cfg.format_datetime(info.get("created_on")))
    emit("updated_on", cfg.format_datetime(info.get("updated_on")))
    emit("entries", store.get_count(content))
    emit("size", cfg.human_file_size(store.size()))
    emit("usable", str(store.usable).lower())
    if args.lifetime > 0:
        emit("expired", str(store.data_has_expired(args.lifetime, content)).lower())
    return 0

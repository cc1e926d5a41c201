from __future__ import annotations

import argparse

from infra.logging_config import get_logger, log_kv
from scancache.cli.commands._common import emit, open_store


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("delete", help="Remove a key (rewrites the store).")
    p.add_argument("name", help="Store name.")
    p.add_argument("key", help="Key to remove.")
    p.set_defaults(_fn=_delete)

    p = sub.add_parser("flush", help="Remove the store file.")
    p.add_argument("name", help="Store name.")
    p.set_defaults(_fn=_flush)

    p = sub.add_parser("compact", help="Rewrite the store dropping duplicate lines.")
    p.add_argument("name", help="Store name.")
    p.set_defaults(_fn=_compact)


def _delete(args: argparse.Namespace) -> int:
    store = open_store(args)
    ok = store.delete(args.key)
    emit("deleted", str(ok).lower())
    return 0 if ok else 1


def _flush(args: argparse.Namespace) -> int:
    store = open_store(args)
    ok = store.flush()
    log_kv(get_logger("scancache.cli.flush"), "flush", name=args.name, ok=ok)
    emit("flushed", str(ok).lower())
    return 0 if ok else 1


def _compact(args: argparse.Namespace) -> int:
    store = open_store(args)
    before = store.size()
    ok = store.compact()
    emit("compacted", str(ok).lower())
    if ok:
        cfg = store.config
        emit("size_before", cfg.human_file_size(before))
        emit("size_after", cfg.human_file_size(store.size()))
        emit("entries", store.get_count())
    return 0 if ok else 1

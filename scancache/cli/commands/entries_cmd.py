from __future__ import annotations

import argparse
import json

from scancache.cli.commands._common import open_store


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("entries", help="Print entries of a store as JSON.")
    p.add_argument("name", help="Store name.")
    p.add_argument("--key", default=None, help="Print only this key.")
    p.add_argument("--lifetime", type=int, default=0, help="Treat the store as a miss once this many seconds old.")
    p.set_defaults(_fn=_run)


_MISSING = object()


def _run(args: argparse.Namespace) -> int:
    store = open_store(args)

    if args.key is not None:
        if not store.exists(args.key):
            print(f"scancache: key not found: {args.key}", flush=True)
            return 1
        value = store.get(args.key, lifetime=args.lifetime, default=_MISSING)
        if value is _MISSING:
            print(f"scancache: expired: {args.name}", flush=True)
            return 1
        print(json.dumps(value, indent=2, sort_keys=True), flush=True)
        return 0

    entries = store.get_all(lifetime=args.lifetime)
    if entries is None:
        print(f"scancache: expired or missing: {args.name}", flush=True)
        return 1
    print(json.dumps(entries, indent=2, sort_keys=True), flush=True)
    return 0

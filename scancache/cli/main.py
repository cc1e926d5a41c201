from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from infra.config_loader import load_config
from infra.logging_config import setup_logging
from scancache.cli.commands import entries_cmd, info_cmd, maintenance_cmd
from scancache.errors import InvalidKeyError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scancache.cli",
        description="Inspect and maintain scanner datastore files (info, entries, delete, flush, compact).",
    )
    p.add_argument("--config", default=None, help="YAML config path (default: config/default.yml).")
    p.add_argument("--data-dir", dest="data_dir", default=None, help="Override datastore.data_dir.")
    sub = p.add_subparsers(dest="command", required=True)

    info_cmd.register(sub)
    entries_cmd.register(sub)
    maintenance_cmd.register(sub)

    return p


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    fn = getattr(args, "_fn", None)
    if fn is None:
        parser.print_help()
        return 2

    setup_logging(load_config(Path(args.config) if args.config else None).logging)

    try:
        rc = fn(args)
    except KeyboardInterrupt:
        print("scancache: CANCELLED (KeyboardInterrupt)", flush=True)
        return 130
    except InvalidKeyError as e:
        print(f"scancache: ERROR: {e}", flush=True)
        return 2

    if rc is None:
        return 0
    if isinstance(rc, bool):
        return 0 if rc else 1
    return int(rc)

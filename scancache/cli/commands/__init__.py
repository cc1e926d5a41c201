"""
scancache.cli.commands

Each module exposes ``register(sub)`` and sets ``_fn`` on its parser.
"""
__all__ = [
    "info_cmd",
    "entries_cmd",
    "maintenance_cmd",
]

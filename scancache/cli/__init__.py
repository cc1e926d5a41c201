"""Admin CLI for datastore files: ``python -m scancache.cli``."""

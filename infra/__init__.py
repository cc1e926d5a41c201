"""
Shared plumbing: config, logging, result type, file and time helpers.

Nothing here imports scancache.
"""

"""Local tree reader: flatten the local store into path -> LocalEntry."""

from __future__ import annotations

import logging

from gdrivesync.models import LocalEntry

from .storage import LocalStorage

logger = logging.getLogger(__name__)


def read_local_tree(storage: LocalStorage) -> dict[str, LocalEntry]:
    """
    Read the current local listing keyed by relative path.

    Duplicate paths keep the first entry (a well-behaved store never yields
    them).
    """
    entries: dict[str, LocalEntry] = {}
    for entry in storage.list_files():
        if entry.path in entries:
            logger.warning("duplicate local path ignored: %s", entry.path)
            continue
        entries[entry.path] = entry

    logger.info("local store contains %d files", len(entries))
    return entries

"""Remote tree walker: flatten the Drive folder hierarchy into path -> RemoteEntry."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from gdrivesync.models import RemoteEntry
from gdrivesync.util.mime import is_folder, is_google_app
from gdrivesync.util.paths import join_path

from .folder_index import FolderIndex
from .transport import RemoteTransport

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RemoteTree:
    """Result of one recursive listing."""

    entries: dict[str, RemoteEntry]
    folders: FolderIndex


def walk_remote_tree(transport: RemoteTransport, root_id: str) -> RemoteTree:
    """
    Recursively list everything under root_id (BFS).

    Rules:
        - Folders go into the FolderIndex, files into `entries`.
        - Names that cannot be expressed as a path segment are skipped.
        - Google Docs/Sheets/... have no downloadable content and are skipped.
        - A second folder with an already-seen path is not descended into;
          a second file with an already-seen path is ignored.
    """
    folders = FolderIndex(root_id)
    entries: dict[str, RemoteEntry] = {}

    queue: deque[tuple[str, str]] = deque([("", root_id)])
    seen_folders: set[str] = set()

    while queue:
        dir_path, folder_id = queue.popleft()
        if folder_id in seen_folders:
            continue
        seen_folders.add(folder_id)

        for child in transport.list_children(folder_id):
            if child.trashed:
                continue
            if not _is_valid_segment(child.name):
                logger.warning("skipping remote item with unusable name %r (%s)", child.name, child.file_id)
                continue

            child_path = join_path(dir_path, child.name)

            if is_folder(child.mime_type):
                kept = folders.add(child_path, child.file_id)
                if kept != child.file_id:
                    logger.warning(
                        "duplicate remote folder %s (%s); using %s",
                        child_path,
                        child.file_id,
                        kept,
                    )
                    continue
                queue.append((child_path, child.file_id))
                continue

            if is_google_app(child.mime_type):
                logger.debug("skipping Google apps document %s", child_path)
                continue

            if child_path in entries:
                logger.warning(
                    "duplicate remote file %s (%s); using %s",
                    child_path,
                    child.file_id,
                    entries[child_path].file_id,
                )
                continue

            entries[child_path] = RemoteEntry(
                file_id=child.file_id,
                path=child_path,
                name=child.name,
                mime_type=child.mime_type,
                mtime_ms=child.mtime_ms,
                size=child.size,
                md5_checksum=child.md5_checksum,
            )

    logger.info("remote store contains %d files in %d folders", len(entries), len(folders) - 1)
    return RemoteTree(entries=entries, folders=folders)


def _is_valid_segment(name: str) -> bool:
    return bool(name) and "/" not in name and name not in (".", "..")

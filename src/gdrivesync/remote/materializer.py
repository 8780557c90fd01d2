"""Folder path materializer: make a relative directory path exist on Drive."""

from __future__ import annotations

import logging

from gdrivesync.util.paths import join_path, normalize_path, split_segments

from .folder_index import FolderIndex
from .transport import RemoteTransport

logger = logging.getLogger(__name__)


class FolderMaterializer:
    """
    Resolve directory paths to folder ids, creating missing segments.

    The FolderIndex doubles as the cache, so each missing segment costs at
    most one lookup and one create per run. Transport errors propagate; the
    caller must not upload into a parent that failed to resolve.
    """

    def __init__(self, transport: RemoteTransport, folders: FolderIndex) -> None:
        self._transport = transport
        self._folders = folders
        self.created: list[str] = []

    @property
    def folders(self) -> FolderIndex:
        return self._folders

    def ensure_path(self, rel_dir: str) -> str:
        current_id = self._folders.root_id
        sub_path = ""

        for segment in split_segments(normalize_path(rel_dir)):
            sub_path = join_path(sub_path, segment)

            cached = self._folders.get(sub_path)
            if cached is not None:
                current_id = cached
                continue

            found = self._transport.find_child_folder(current_id, segment)
            if found is None:
                found = self._transport.create_folder(current_id, segment)
                self.created.append(sub_path)
                logger.info("created remote folder %s (%s)", sub_path, found)

            current_id = self._folders.add(sub_path, found)

        return current_id

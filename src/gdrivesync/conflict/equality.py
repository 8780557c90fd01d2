"""Content equality oracle: tell false conflicts from real ones."""

from __future__ import annotations

import hashlib
import logging

from gdrivesync.errors import GDriveSyncError
from gdrivesync.local.storage import LocalStorage
from gdrivesync.models import LocalEntry, RemoteEntry
from gdrivesync.remote.transport import RemoteTransport
from gdrivesync.util.mime import DEFAULT_MIME, guess_mime_type, is_binary_mime

logger = logging.getLogger(__name__)


def md5_hex(content: bytes) -> str:
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


class ContentEqualityOracle:
    """
    Decide whether both sides of a conflict candidate hold the same bytes.

    Policy (short-circuiting):
        1. Sizes differ -> not identical.
        2. Both empty -> identical.
        3. Binary content and `binary_size_only` -> identical on equal size.
           Two same-size binaries with different bytes are therefore treated
           as identical; set `binary_size_only=False` to compare digests.
        4. Otherwise compare MD5 digests. Drive's md5Checksum is used when the
           listing carried one, so no download is needed.

    Any read, download or decode failure yields "not identical", which keeps
    the conflict visible instead of dropping a side.
    """

    def __init__(
        self,
        storage: LocalStorage,
        transport: RemoteTransport,
        *,
        binary_size_only: bool = True,
    ) -> None:
        self._storage = storage
        self._transport = transport
        self.binary_size_only = binary_size_only

    def are_identical(self, local: LocalEntry, remote: RemoteEntry) -> bool:
        if remote.size is not None and local.size != remote.size:
            return False
        if local.size == 0 and remote.size == 0:
            return True

        binary = is_binary_mime(_content_mime(local, remote))
        if binary and self.binary_size_only and remote.size is not None:
            return True

        try:
            local_digest = self._local_digest(local.path, binary)
            remote_digest = self._remote_digest(remote)
        except (GDriveSyncError, ValueError) as exc:
            logger.warning("content comparison failed for %s, treating as conflict: %s", local.path, exc)
            return False

        return local_digest == remote_digest

    def _local_digest(self, path: str, binary: bool) -> str:
        if binary:
            return md5_hex(self._storage.read_bytes(path))
        return md5_hex(self._storage.read_text(path).encode("utf-8"))

    def _remote_digest(self, remote: RemoteEntry) -> str:
        if remote.md5_checksum:
            return remote.md5_checksum.lower()
        return md5_hex(self._transport.download_file(remote.file_id))


def _content_mime(local: LocalEntry, remote: RemoteEntry) -> str:
    """Drive's MIME type when it says something specific, else the extension's."""
    if remote.mime_type and remote.mime_type != DEFAULT_MIME:
        return remote.mime_type
    return guess_mime_type(local.path)

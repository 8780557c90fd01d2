"""Remote store exports for gdrivesync."""

from __future__ import annotations

from .folder_index import FolderIndex
from .materializer import FolderMaterializer
from .transport import CredentialProvider, RemoteTransport
from .walker import RemoteTree, walk_remote_tree

__all__ = [
    "CredentialProvider",
    "FolderIndex",
    "FolderMaterializer",
    "RemoteTransport",
    "RemoteTree",
    "walk_remote_tree",
]

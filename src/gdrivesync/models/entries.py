"""Data model for entries observed in the local and remote stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class LocalEntry:
    """One file in the local store. `path` is `/`-separated and root-relative."""

    path: str
    size: int
    mtime_ms: int


@dataclass(slots=True)
class RemoteObject:
    """
    One raw child object as returned by a Drive folder listing.

    Folders are RemoteObjects too; they are told apart by `mime_type`.
    """

    file_id: str
    name: str
    mime_type: str

    mtime_ms: int = 0
    size: Optional[int] = None
    md5_checksum: Optional[str] = None
    trashed: bool = False


@dataclass(slots=True, frozen=True)
class RemoteEntry:
    """
    One non-folder Drive object placed at a path under the sync root.

    Notes:
        - `file_id` is stable across renames and globally unique.
        - `path` is reconstructed from folder ancestry during the tree walk.
    """

    file_id: str
    path: str
    name: str
    mime_type: str
    mtime_ms: int

    size: Optional[int] = None
    md5_checksum: Optional[str] = None

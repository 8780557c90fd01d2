"""Run-scoped mapping from relative directory path to Drive folder id."""

from __future__ import annotations

from typing import Iterator, Optional


class FolderIndex:
    """
    path -> folder id, with "" mapped to the sync root.

    Entries are only ever added. Registering a path twice keeps the first id,
    so callers must use the return value of `add()`.
    """

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        self._ids: dict[str, str] = {"": root_id}

    def get(self, path: str) -> Optional[str]:
        return self._ids.get(path)

    def add(self, path: str, folder_id: str) -> str:
        existing = self._ids.get(path)
        if existing is not None:
            return existing
        self._ids[path] = folder_id
        return folder_id

    def paths(self) -> list[str]:
        return sorted(p for p in self._ids if p)

    def __contains__(self, path: object) -> bool:
        return path in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

"""Local storage collaborator: a directory tree on disk plus change notifications."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from gdrivesync.errors import InvalidArgumentError, LocalStorageError
from gdrivesync.models import LocalEntry
from gdrivesync.util.paths import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (".git", ".trash", "__pycache__")


@dataclass(frozen=True)
class ChangeEvent:
    """A create/modify/delete/move notification for one store path."""

    kind: str
    path: str


ChangeCallback = Callable[[ChangeEvent], None]


class LocalStorage(Protocol):
    """What the sync engine needs from the local store."""

    def list_files(self) -> list[LocalEntry]: ...

    def read_text(self, path: str) -> str: ...

    def read_bytes(self, path: str) -> bytes: ...

    def write_text(self, path: str, content: str) -> None: ...

    def write_bytes(self, path: str, content: bytes) -> None: ...

    def make_dir(self, path: str) -> None: ...

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]: ...


class FileSystemStorage:
    """
    LocalStorage backed by a directory on disk.

    Paths handed in and out are `/`-separated and relative to `root`.
    Directories named in `exclude_dirs` are skipped at any depth.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        exclude_hidden_files: bool = False,
    ) -> None:
        self.root = Path(root).expanduser()
        self.exclude_dirs = frozenset(exclude_dirs)
        self.exclude_hidden_files = exclude_hidden_files

    # ----------------------------
    # Listing
    # ----------------------------
    def list_files(self) -> list[LocalEntry]:
        if not self.root.is_dir():
            raise LocalStorageError(
                "Local root is not a directory",
                details={"root": str(self.root)},
            )

        entries: list[LocalEntry] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
            base = Path(dirpath)
            for name in sorted(filenames):
                if self.exclude_hidden_files and name.startswith("."):
                    continue
                full = base / name
                try:
                    st = full.stat()
                except FileNotFoundError:
                    # Deleted between walk and stat.
                    continue
                except OSError as exc:
                    raise LocalStorageError(
                        "Failed to stat local file",
                        details={"path": str(full)},
                        cause=exc,
                    ) from exc
                if not full.is_file():
                    continue
                rel = full.relative_to(self.root).as_posix()
                entries.append(LocalEntry(path=rel, size=st.st_size, mtime_ms=st.st_mtime_ns // 1_000_000))
        return entries

    def is_excluded(self, path: str) -> bool:
        parts = path.split("/")
        if any(p in self.exclude_dirs for p in parts[:-1]):
            return True
        return self.exclude_hidden_files and parts[-1].startswith(".")

    # ----------------------------
    # Content
    # ----------------------------
    def read_text(self, path: str) -> str:
        full = self._resolve(path)
        try:
            with open(full, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except OSError as exc:
            raise LocalStorageError("Failed to read local file", details={"path": path}, cause=exc) from exc

    def read_bytes(self, path: str) -> bytes:
        full = self._resolve(path)
        try:
            return full.read_bytes()
        except OSError as exc:
            raise LocalStorageError("Failed to read local file", details={"path": path}, cause=exc) from exc

    def write_text(self, path: str, content: str) -> None:
        self.write_bytes(path, content.encode("utf-8"))

    def write_bytes(self, path: str, content: bytes) -> None:
        """Write atomically: temp file in the same directory, then replace."""
        full = self._resolve(path)
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".gdrivesync-", dir=full.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_name, full)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise LocalStorageError("Failed to write local file", details={"path": path}, cause=exc) from exc

    def make_dir(self, path: str) -> None:
        """Create a directory and its parents; existing directories are fine."""
        if not normalize_path(path):
            return
        full = self._resolve(path)
        try:
            full.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalStorageError("Failed to create local directory", details={"path": path}, cause=exc) from exc

    # ----------------------------
    # Change notifications
    # ----------------------------
    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Watch the tree and call `callback` for every file change.

        Returns:
            A function that stops the watcher. Calling it twice is harmless.
        """
        handler = _ChangeHandler(self, callback)
        observer = Observer()
        observer.schedule(handler, str(self.root), recursive=True)
        observer.daemon = True
        observer.start()
        logger.debug("watching %s", self.root)

        def unsubscribe() -> None:
            if not observer.is_alive():
                return
            observer.stop()
            observer.join(timeout=5)

        return unsubscribe

    def relative(self, full_path: str) -> Optional[str]:
        """Map an absolute path from a watcher event back to a store path."""
        try:
            rel = Path(full_path).resolve().relative_to(self.root.resolve())
        except ValueError:
            return None
        value = rel.as_posix()
        return None if value in ("", ".") else value

    def _resolve(self, path: str) -> Path:
        try:
            rel = normalize_path(path)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc), details={"path": path}, cause=exc) from exc
        if not rel:
            raise InvalidArgumentError("Empty path", details={"path": path})
        return self.root / rel


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, storage: FileSystemStorage, callback: ChangeCallback) -> None:
        self._storage = storage
        self._callback = callback

    def on_created(self, event: FileSystemEvent) -> None:
        self._emit("created", event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._emit("modified", event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._emit("deleted", event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._emit("moved", event)

    def _emit(self, kind: str, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = self._storage.relative(os.fsdecode(event.src_path))
        if path is None or self._storage.is_excluded(path):
            return
        if path.rsplit("/", 1)[-1].startswith(".gdrivesync-"):
            return
        self._callback(ChangeEvent(kind=kind, path=path))

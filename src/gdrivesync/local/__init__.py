"""Local store exports for gdrivesync."""

from __future__ import annotations

from .storage import ChangeEvent, FileSystemStorage, LocalStorage
from .tree import read_local_tree

__all__ = ["ChangeEvent", "FileSystemStorage", "LocalStorage", "read_local_tree"]

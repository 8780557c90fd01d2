"""Helpers for `/`-separated, root-relative store paths."""

from __future__ import annotations

import posixpath


def normalize_path(value: str) -> str:
    """Return a canonical relative path: `/` separators, no leading/trailing `/`."""
    parts = [p for p in value.replace("\\", "/").split("/") if p and p != "."]
    if any(p == ".." for p in parts):
        raise ValueError(f"Path escapes the store root: {value!r}")
    return "/".join(parts)


def join_path(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def parent_dir(path: str) -> str:
    """Parent directory of a relative path ("" for top-level entries)."""
    return posixpath.dirname(path)


def base_name(path: str) -> str:
    return posixpath.basename(path)


def split_segments(path: str) -> list[str]:
    return [p for p in path.split("/") if p]

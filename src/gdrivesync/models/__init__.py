"""Public model exports for gdrivesync."""

from __future__ import annotations

from .entries import LocalEntry, RemoteEntry, RemoteObject
from .results import SyncSummary

__all__ = [
    "LocalEntry",
    "RemoteEntry",
    "RemoteObject",
    "SyncSummary",
]

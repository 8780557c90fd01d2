"""Conflict handling exports for gdrivesync."""

from __future__ import annotations

from .equality import ContentEqualityOracle, md5_hex
from .resolver import (
    ConflictArbiter,
    ConflictOutcome,
    ConflictPolicy,
    ConflictResolution,
    ConflictResolver,
    PendingConflict,
)

__all__ = [
    "ConflictArbiter",
    "ConflictOutcome",
    "ConflictPolicy",
    "ConflictResolution",
    "ConflictResolver",
    "ContentEqualityOracle",
    "PendingConflict",
    "md5_hex",
]

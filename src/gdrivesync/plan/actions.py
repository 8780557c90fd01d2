"""Per-path verdicts produced by the classifier."""

from __future__ import annotations

from enum import Enum


class Decision(str, Enum):
    """What a reconciliation run does with one path."""

    UPLOAD = "UPLOAD"
    DOWNLOAD = "DOWNLOAD"
    CONFLICT = "CONFLICT"
    DELETE_REMOTE = "DELETE_REMOTE"
    SKIP = "SKIP"

"""Change classifier: compare two snapshots against the watermark."""

from __future__ import annotations

from collections import Counter
from typing import Mapping

from gdrivesync.models import LocalEntry, RemoteEntry

from .actions import Decision
from .decision import ClassificationDecision

# Absorbs clock skew and latency between entry timestamps and the watermark
# write, so a file touched by the previous run is not seen as changed.
SLACK_MS: int = 2000


def changed_since(mtime_ms: int, watermark_ms: int) -> bool:
    return mtime_ms > watermark_ms + SLACK_MS


def classify(
    local: Mapping[str, LocalEntry],
    remote: Mapping[str, RemoteEntry],
    watermark_ms: int,
    *,
    to_remote: bool,
    from_remote: bool,
) -> list[ClassificationDecision]:
    """
    Classify every path in the union of both snapshots.

    Rules:
        - local only: UPLOAD if to_remote, else SKIP.
        - remote only: DOWNLOAD if changed since the watermark; otherwise it
          was deleted locally, so DELETE_REMOTE if the run goes both ways,
          else SKIP. A one-way run never deletes.
        - both: CONFLICT if both changed; UPLOAD (in place) if only local
          changed and to_remote; DOWNLOAD if only remote changed and
          from_remote; else SKIP.

    Returns:
        Exactly one decision per path, sorted by path.
    """
    decisions: list[ClassificationDecision] = []

    for path in sorted(set(local) | set(remote)):
        local_entry = local.get(path)
        remote_entry = remote.get(path)
        kind = _classify_one(local_entry, remote_entry, watermark_ms, to_remote, from_remote)
        decisions.append(
            ClassificationDecision(path=path, kind=kind, local=local_entry, remote=remote_entry)
        )

    return decisions


def count_by_kind(decisions: list[ClassificationDecision]) -> dict[str, int]:
    counts = Counter(d.kind.value for d in decisions)
    return {kind.value: counts.get(kind.value, 0) for kind in Decision}


def _classify_one(
    local_entry: LocalEntry | None,
    remote_entry: RemoteEntry | None,
    watermark_ms: int,
    to_remote: bool,
    from_remote: bool,
) -> Decision:
    if remote_entry is None:
        return Decision.UPLOAD if to_remote else Decision.SKIP

    remote_changed = changed_since(remote_entry.mtime_ms, watermark_ms)

    if local_entry is None:
        if remote_changed:
            return Decision.DOWNLOAD
        return Decision.DELETE_REMOTE if to_remote and from_remote else Decision.SKIP

    local_changed = changed_since(local_entry.mtime_ms, watermark_ms)

    if local_changed and remote_changed:
        return Decision.CONFLICT
    if local_changed and to_remote:
        return Decision.UPLOAD
    if remote_changed and from_remote:
        return Decision.DOWNLOAD
    return Decision.SKIP

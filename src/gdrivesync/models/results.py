"""Result model for one reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SyncSummary:
    """Counters reported at the end of a run."""

    uploaded: int = 0
    downloaded: int = 0
    deleted_remote: int = 0
    conflicts: int = 0

    false_conflicts: int = 0
    pending_conflicts: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.uploaded or self.downloaded or self.deleted_remote or self.conflicts)

    def status_message(self) -> str:
        """Short status line, e.g. 'Synced - 2↑ 1↓ 1🗑 1⚠'."""
        if not self.has_changes:
            return "Synced - No changes"
        message = f"Synced - {self.uploaded}↑ {self.downloaded}↓"
        if self.deleted_remote:
            message += f" {self.deleted_remote}🗑"
        if self.conflicts:
            message += f" {self.conflicts}⚠"
        return message

    def log_message(self) -> str:
        if not self.has_changes:
            return "Sync complete: No changes detected"
        message = f"Sync complete: {self.uploaded} uploaded, {self.downloaded} downloaded"
        if self.deleted_remote:
            message += f", {self.deleted_remote} deleted"
        if self.conflicts:
            plural = "" if self.conflicts == 1 else "s"
            message += f", {self.conflicts} conflict{plural} resolved"
        return message

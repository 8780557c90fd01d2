"""Classification decision model (explicit fields)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gdrivesync.models import LocalEntry, RemoteEntry

from .actions import Decision


@dataclass(slots=True, frozen=True)
class ClassificationDecision:
    """
    The verdict for one path in one reconciliation pass.

    `local` / `remote` reference the snapshot entries the verdict was derived
    from; either may be None when the path exists on one side only.
    """

    path: str
    kind: Decision
    local: Optional[LocalEntry] = None
    remote: Optional[RemoteEntry] = None

    @property
    def remote_id(self) -> Optional[str]:
        return self.remote.file_id if self.remote is not None else None

    def validate_required_fields(self) -> None:
        """Validate entry references according to kind. Raises ValueError."""
        if self.kind is Decision.UPLOAD:
            _require(self.local, "local")
            return

        if self.kind in (Decision.DOWNLOAD, Decision.DELETE_REMOTE):
            _require(self.remote, "remote")
            return

        if self.kind is Decision.CONFLICT:
            _require(self.local, "local")
            _require(self.remote, "remote")
            return

        if self.kind is Decision.SKIP:
            return

        raise ValueError(f"Unsupported decision: {self.kind}")


def _require(value: object, field_name: str) -> None:
    if value is None:
        raise ValueError(f"Missing required field: {field_name}")

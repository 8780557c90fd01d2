"""Persisted sync state: the watermark of the last successful run."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from gdrivesync.errors import ConfigurationError
from gdrivesync.util.time import format_ms

logger = logging.getLogger(__name__)


class SyncState(BaseModel):
    # Epoch milliseconds; 0 means "never synced".
    last_sync_time: int = Field(default=0, ge=0)


class SyncStateStore:
    """
    JSON-file store for SyncState.

    `commit()` never moves the watermark backwards.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self) -> SyncState:
        if not self.path.exists():
            return SyncState()
        try:
            return SyncState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise ConfigurationError(
                "Sync state file is unreadable",
                details={"path": str(self.path)},
                cause=exc,
            ) from exc

    def commit(self, timestamp_ms: int) -> SyncState:
        with self._lock:
            current = self.load()
            state = SyncState(last_sync_time=max(current.last_sync_time, timestamp_ms))
            self._write(state)
        logger.debug("watermark committed: %s", format_ms(state.last_sync_time))
        return state

    def _write(self, state: SyncState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(state.model_dump_json())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

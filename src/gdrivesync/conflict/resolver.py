"""Conflict resolver: apply the configured policy to a genuine conflict."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from gdrivesync.errors import InvalidArgumentError, InvalidStateError
from gdrivesync.models import LocalEntry, RemoteEntry
from gdrivesync.plan import ClassificationDecision, Decision

logger = logging.getLogger(__name__)

TransferAction = Callable[[ClassificationDecision], None]


class ConflictPolicy(str, Enum):
    """Values match the `conflict_resolution` setting."""

    REPLACE_WITH_LOCAL = "overwrite"
    KEEP_LOCAL = "keep-local"
    KEEP_REMOTE = "keep-remote"
    ASK = "ask"


class ConflictOutcome(str, Enum):
    UPLOADED = "UPLOADED"
    DOWNLOADED = "DOWNLOADED"
    # Both sides keep their own version; they stay diverged.
    KEPT_BOTH = "KEPT_BOTH"
    DEFERRED = "DEFERRED"
    # The policy asked for a transfer the run's direction does not allow.
    BLOCKED = "BLOCKED"


class PendingConflict:
    """
    A conflict waiting for an external choice.

    Exactly one of `choose_local()` / `choose_remote()` takes effect. If the
    chosen transfer raises, the conflict becomes pending again so the caller
    can retry.
    """

    def __init__(
        self,
        decision: ClassificationDecision,
        *,
        upload: TransferAction,
        download: TransferAction,
    ) -> None:
        self.decision = decision
        self._upload = upload
        self._download = download
        self._lock = threading.Lock()
        self._resolution: Optional[str] = None

    @property
    def path(self) -> str:
        return self.decision.path

    @property
    def local(self) -> LocalEntry:
        return self.decision.local  # type: ignore[return-value]

    @property
    def remote(self) -> RemoteEntry:
        return self.decision.remote  # type: ignore[return-value]

    @property
    def resolution(self) -> Optional[str]:
        return self._resolution

    @property
    def is_resolved(self) -> bool:
        return self._resolution is not None

    def choose_local(self) -> None:
        """Keep the local version: upload it over the remote object."""
        self._consume("local", self._upload)

    def choose_remote(self) -> None:
        """Keep the remote version: download it over the local file."""
        self._consume("remote", self._download)

    def _consume(self, choice: str, action: TransferAction) -> None:
        with self._lock:
            if self._resolution is not None:
                raise InvalidStateError(
                    "Conflict already resolved",
                    details={"path": self.path, "resolution": self._resolution},
                )
            self._resolution = choice

        try:
            action(self.decision)
        except BaseException:
            with self._lock:
                self._resolution = None
            raise
        logger.info("conflict on %s resolved: kept %s version", self.path, choice)

    def __repr__(self) -> str:
        return f"PendingConflict(path={self.path!r}, resolution={self._resolution!r})"


ConflictArbiter = Callable[[PendingConflict], None]


@dataclass(slots=True)
class ConflictResolution:
    outcome: ConflictOutcome
    pending: Optional[PendingConflict] = None


class ConflictResolver:
    """
    Stateless across conflicts: each call handles one conflict instance.

    `upload` replaces the remote object in place with the local content,
    `download` overwrites the local file with the remote content.
    """

    def __init__(
        self,
        policy: ConflictPolicy | str,
        *,
        upload: TransferAction,
        download: TransferAction,
        arbiter: Optional[ConflictArbiter] = None,
        allow_upload: bool = True,
        allow_download: bool = True,
    ) -> None:
        try:
            self.policy = ConflictPolicy(policy)
        except ValueError as exc:
            raise InvalidArgumentError(
                "Unknown conflict policy",
                details={"policy": policy},
                cause=exc,
            ) from exc
        self._upload = upload
        self._download = download
        self._arbiter = arbiter
        self._allow_upload = allow_upload
        self._allow_download = allow_download

    def resolve(self, decision: ClassificationDecision) -> ConflictResolution:
        if decision.kind is not Decision.CONFLICT:
            raise InvalidArgumentError(
                "Only CONFLICT decisions can be resolved",
                details={"path": decision.path, "kind": decision.kind.value},
            )
        decision.validate_required_fields()

        if self.policy is ConflictPolicy.REPLACE_WITH_LOCAL:
            if not self._allow_upload:
                return self._blocked(decision, "upload")
            self._upload(decision)
            return ConflictResolution(ConflictOutcome.UPLOADED)

        if self.policy is ConflictPolicy.KEEP_LOCAL:
            logger.info("conflict on %s: keeping local version, remote left as is", decision.path)
            return ConflictResolution(ConflictOutcome.KEPT_BOTH)

        if self.policy is ConflictPolicy.KEEP_REMOTE:
            if not self._allow_download:
                return self._blocked(decision, "download")
            self._download(decision)
            return ConflictResolution(ConflictOutcome.DOWNLOADED)

        pending = PendingConflict(decision, upload=self._upload, download=self._download)
        if self._arbiter is not None:
            self._arbiter(pending)
        else:
            logger.info("conflict on %s deferred; no arbiter attached", decision.path)
        return ConflictResolution(ConflictOutcome.DEFERRED, pending=pending)

    def _blocked(self, decision: ClassificationDecision, transfer: str) -> ConflictResolution:
        logger.info(
            "conflict on %s: policy %s needs an %s, not allowed in this run direction",
            decision.path,
            self.policy.value,
            transfer,
        )
        return ConflictResolution(ConflictOutcome.BLOCKED)

"""SyncManager: one reconciliation run = snapshot -> classify -> transfer -> commit."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional

from gdrivesync.auth import OAuthClient
from gdrivesync.config import (
    AppConfig,
    SyncStateStore,
    auth_info_from_config,
    save_config,
)
from gdrivesync.conflict import (
    ConflictArbiter,
    ConflictOutcome,
    ConflictResolver,
    ContentEqualityOracle,
    PendingConflict,
)
from gdrivesync.controller import GoogleDriveController
from gdrivesync.errors import (
    AuthError,
    ConfigurationError,
    GDriveSyncError,
    InvalidStateError,
    NotFoundError,
    PermissionError,
    RemoteRootAccessDeniedError,
    RemoteRootError,
    RemoteRootNotFolderError,
    RemoteRootNotFoundError,
    SyncInProgressError,
)
from gdrivesync.local import FileSystemStorage, LocalStorage, read_local_tree
from gdrivesync.models import SyncSummary
from gdrivesync.plan import ClassificationDecision, Decision, classify, count_by_kind
from gdrivesync.remote import (
    CredentialProvider,
    FolderMaterializer,
    RemoteTransport,
    walk_remote_tree,
)
from gdrivesync.util.mime import guess_mime_type, is_folder
from gdrivesync.util.paths import base_name, parent_dir
from gdrivesync.util.time import format_ms, now_ms

logger = logging.getLogger(__name__)


@dataclass
class _RunContext:
    materializer: FolderMaterializer
    to_remote: bool
    from_remote: bool
    summary: SyncSummary = field(default_factory=SyncSummary)


class SyncManager:
    """
    Reconciliation driver for one local root and one Drive folder.

    Runs are serialized: a second `run()` while one is in flight raises
    SyncInProgressError instead of waiting. After `shutdown()` no new run
    starts; a run already in flight completes.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        config_path: Optional[Path] = None,
        arbiter: Optional[ConflictArbiter] = None,
    ) -> None:
        self._credentials: CredentialProvider = OAuthClient(
            auth_info_from_config(config),
            scopes=config.auth.scopes,
        )
        # Authentication works without a local root; runs check for it.
        storage: Optional[LocalStorage] = None
        if config.sync.local_root.strip():
            storage = FileSystemStorage(
                config.sync.local_root,
                exclude_dirs=config.sync.exclude_dirs,
                exclude_hidden_files=config.sync.exclude_hidden_files,
            )
        self._setup(
            config,
            storage=storage,
            transport=None,
            state_store=SyncStateStore(config.state_file),
            arbiter=arbiter,
            clock=now_ms,
        )
        self._config_path = config_path

    @classmethod
    def from_components(
        cls,
        config: AppConfig,
        *,
        storage: LocalStorage,
        transport: RemoteTransport,
        credentials: CredentialProvider,
        state_store: SyncStateStore,
        arbiter: Optional[ConflictArbiter] = None,
        clock: Callable[[], int] = now_ms,
    ) -> "SyncManager":
        """Create a manager with injected collaborators (useful for tests)."""
        obj = cls.__new__(cls)
        obj._credentials = credentials
        obj._config_path = None
        obj._setup(
            config,
            storage=storage,
            transport=transport,
            state_store=state_store,
            arbiter=arbiter,
            clock=clock,
        )
        return obj

    def _setup(
        self,
        config: AppConfig,
        *,
        storage: Optional[LocalStorage],
        transport: Optional[RemoteTransport],
        state_store: SyncStateStore,
        arbiter: Optional[ConflictArbiter],
        clock: Callable[[], int],
    ) -> None:
        self._config = config
        self._storage = storage
        self._transport = transport
        self._state_store = state_store
        self._arbiter = arbiter
        self._clock = clock
        self._run_gate = threading.Lock()
        # Thread currently holding the gate for a run, if any.
        self._run_owner: Optional[int] = None
        self._closed = False
        self._pending: dict[str, PendingConflict] = {}

    # ----------------------------
    # Public API
    # ----------------------------
    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def storage(self) -> LocalStorage:
        if self._storage is None:
            raise ConfigurationError("Please set the local root folder in settings")
        return self._storage

    @property
    def last_sync_time(self) -> int:
        return self._state_store.load().last_sync_time

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pending_conflicts(self) -> list[PendingConflict]:
        """Conflicts deferred to an arbiter that have not been resolved yet."""
        self._pending = {p: c for p, c in self._pending.items() if not c.is_resolved}
        return list(self._pending.values())

    def authenticate(self, read_code: Callable[[str], str]) -> None:
        """
        Run the OAuth consent flow.

        Args:
            read_code: Receives the authorization URL, returns the code the
                user obtained from it.
        """
        url = self._credentials.begin_authorization()
        code = read_code(url)
        refresh_token = self._credentials.exchange_code(code)

        self._config.auth.refresh_token = refresh_token
        if self._config_path is not None:
            save_config(self._config, self._config_path)
        # The transport was bound to the previous credentials.
        if isinstance(self._credentials, OAuthClient):
            self._transport = None
        logger.info("Authenticated successfully")

    def run(self, to_remote: bool = True, from_remote: bool = True) -> SyncSummary:
        """
        Run one reconciliation pass.

        Raises:
            ConfigurationError: missing folder id / credentials.
            SyncInProgressError: another run holds the gate.
            InvalidStateError: the manager was shut down.
            AuthError, RemoteRootError: before any mutation.
            GDriveSyncError: any transfer failure; the watermark is unchanged.
        """
        if self._closed:
            raise InvalidStateError("Sync manager is shut down")
        if not self._run_gate.acquire(blocking=False):
            raise SyncInProgressError("A sync run is already in progress")
        self._run_owner = threading.get_ident()
        try:
            if self._closed:
                raise InvalidStateError("Sync manager is shut down")
            return self._run_locked(to_remote, from_remote)
        finally:
            self._run_owner = None
            self._run_gate.release()

    def shutdown(self) -> None:
        """Refuse new runs from now on. A run in flight is not interrupted."""
        self._closed = True

    # ----------------------------
    # Internals
    # ----------------------------
    def _run_locked(self, to_remote: bool, from_remote: bool) -> SyncSummary:
        storage = self.storage
        folder_id = self._config.sync.folder_id.strip()
        if not folder_id:
            raise ConfigurationError("Please authenticate and set Folder ID in settings")

        watermark = self._state_store.load().last_sync_time
        logger.info(
            "Starting Google Drive sync (to_remote=%s, from_remote=%s, last sync %s)",
            to_remote,
            from_remote,
            format_ms(watermark) if watermark else "never",
        )

        try:
            self._refresh_token()
            transport = self._get_transport()
            self._validate_root(transport, folder_id)

            local = read_local_tree(storage)
            tree = walk_remote_tree(transport, folder_id)

            decisions = classify(
                local,
                tree.entries,
                watermark,
                to_remote=to_remote,
                from_remote=from_remote,
            )
            logger.info("classified %d paths: %s", len(decisions), count_by_kind(decisions))

            ctx = _RunContext(
                materializer=FolderMaterializer(transport, tree.folders),
                to_remote=to_remote,
                from_remote=from_remote,
            )
            by_kind = _group_by_kind(decisions)

            self._upload_phase(by_kind[Decision.UPLOAD], ctx)
            self._download_phase(by_kind[Decision.DOWNLOAD], ctx)
            self._conflict_phase(by_kind[Decision.CONFLICT], ctx)
            self._delete_phase(by_kind[Decision.DELETE_REMOTE], ctx)
        except (ConfigurationError, AuthError, RemoteRootError) as exc:
            logger.error("Sync failed: %s", exc)
            raise
        except GDriveSyncError as exc:
            logger.error("Sync failed: %s %s", exc, exc.details)
            raise
        except Exception:
            logger.exception("Sync failed unexpectedly")
            raise

        self._state_store.commit(self._clock())
        if ctx.materializer.created:
            logger.info("created remote folders: %s", ", ".join(ctx.materializer.created))
        summary = ctx.summary
        logger.info(summary.log_message())
        return summary

    def _refresh_token(self) -> None:
        self._credentials.get_access_token()

    def _get_transport(self) -> RemoteTransport:
        if self._transport is None:
            if not isinstance(self._credentials, OAuthClient):
                raise InvalidStateError("No remote transport configured")
            self._transport = GoogleDriveController(self._credentials)
        return self._transport

    def _validate_root(self, transport: RemoteTransport, folder_id: str) -> None:
        details = {"folder_id": folder_id}
        try:
            info = transport.get_metadata(folder_id)
        except NotFoundError as exc:
            raise RemoteRootNotFoundError(
                "Google Drive folder not found. Please check your Folder ID in settings.",
                details=details,
                cause=exc,
            ) from exc
        except PermissionError as exc:
            raise RemoteRootAccessDeniedError(
                "Access denied to Google Drive folder. Please check permissions.",
                details=details,
                cause=exc,
            ) from exc
        except AuthError:
            raise
        except GDriveSyncError as exc:
            raise RemoteRootError(
                f"Failed to access Google Drive folder: {exc}",
                details={**details, **exc.details},
                cause=exc,
            ) from exc

        if not is_folder(info.mime_type):
            raise RemoteRootNotFolderError(
                "The specified ID is not a Google Drive folder.",
                details={**details, "mime_type": info.mime_type},
            )
        logger.info("Validated Google Drive folder: %s", info.name)

    def _upload_phase(self, decisions: list[ClassificationDecision], ctx: _RunContext) -> None:
        self._refresh_token()
        for decision in decisions:
            self._upload(decision, ctx.materializer)
            ctx.summary.uploaded += 1

    def _download_phase(self, decisions: list[ClassificationDecision], ctx: _RunContext) -> None:
        self._refresh_token()
        if not ctx.from_remote:
            if decisions:
                logger.info("skipping %d downloads (not downloading in this run)", len(decisions))
            return
        for decision in decisions:
            self._download(decision)
            ctx.summary.downloaded += 1

    def _conflict_phase(self, decisions: list[ClassificationDecision], ctx: _RunContext) -> None:
        self._refresh_token()
        if not decisions:
            return

        oracle = ContentEqualityOracle(
            self.storage,
            self._get_transport(),
            binary_size_only=self._config.sync.binary_size_only,
        )
        resolver = ConflictResolver(
            self._config.sync.conflict_resolution,
            upload=self._deferred_upload,
            download=self._deferred_download,
            arbiter=self._arbiter,
            allow_upload=ctx.to_remote,
            allow_download=ctx.from_remote,
        )

        for decision in decisions:
            if oracle.are_identical(decision.local, decision.remote):  # type: ignore[arg-type]
                logger.info("both sides changed but content is identical: %s", decision.path)
                ctx.summary.false_conflicts += 1
                continue

            logger.info("conflict: %s modified on both sides since last sync", decision.path)
            ctx.summary.conflicts += 1
            resolution = resolver.resolve(decision)
            if resolution.outcome is ConflictOutcome.DEFERRED and resolution.pending is not None:
                ctx.summary.pending_conflicts += 1
                if not resolution.pending.is_resolved:
                    self._pending[decision.path] = resolution.pending

    def _delete_phase(self, decisions: list[ClassificationDecision], ctx: _RunContext) -> None:
        # Absence on the local side only means "deleted" when both sides are
        # being reconciled.
        if not (ctx.to_remote and ctx.from_remote):
            return
        transport = self._get_transport()
        for decision in decisions:
            logger.info("deleting %s from Google Drive (deleted locally)", decision.path)
            with _operation_context(decision, "delete_remote"):
                transport.delete_file(decision.remote.file_id)  # type: ignore[union-attr]
            ctx.summary.deleted_remote += 1

    def _upload(
        self,
        decision: ClassificationDecision,
        materializer: Optional[FolderMaterializer],
    ) -> None:
        local = decision.local
        if local is None:
            raise InvalidStateError("Upload without a local entry", details={"path": decision.path})

        transport = self._get_transport()
        with _operation_context(decision, "upload"):
            content = self.storage.read_bytes(local.path)
            mime_type = guess_mime_type(local.path)

            if decision.remote is not None:
                logger.info("updating %s (%d bytes) in place", local.path, len(content))
                transport.update_file(decision.remote.file_id, content, mime_type)
                return

            if materializer is None:
                raise InvalidStateError("No folder materializer for new upload", details={"path": local.path})
            parent_id = materializer.ensure_path(parent_dir(local.path))
            logger.info("uploading new file %s (%d bytes)", local.path, len(content))
            transport.create_file(parent_id, base_name(local.path), mime_type, content)

    def _download(self, decision: ClassificationDecision) -> None:
        remote = decision.remote
        if remote is None:
            raise InvalidStateError("Download without a remote entry", details={"path": decision.path})

        with _operation_context(decision, "download"):
            parent = parent_dir(remote.path)
            if parent:
                self.storage.make_dir(parent)
            content = self._get_transport().download_file(remote.file_id)
            logger.info("downloading %s (%d bytes)", remote.path, len(content))
            self.storage.write_bytes(remote.path, content)

    @contextmanager
    def _deferred_transfer(self) -> Iterator[None]:
        """
        Serialize an arbiter's choice with runs.

        A choice made from inside a run (synchronous arbiter) already holds
        the gate; any other caller waits for the run in flight to finish.
        """
        if self._closed:
            raise InvalidStateError("Sync manager is shut down")
        if self._run_owner == threading.get_ident():
            yield
            return
        with self._run_gate:
            if self._closed:
                raise InvalidStateError("Sync manager is shut down")
            yield

    def _deferred_upload(self, decision: ClassificationDecision) -> None:
        with self._deferred_transfer():
            # May run after the run ended (arbiter choice), so refresh first.
            self._refresh_token()
            self._upload(decision, None)

    def _deferred_download(self, decision: ClassificationDecision) -> None:
        with self._deferred_transfer():
            self._refresh_token()
            self._download(decision)


@contextmanager
def _operation_context(decision: ClassificationDecision, operation: str) -> Iterator[None]:
    """Attach path/operation details to gdrivesync errors raised inside."""
    try:
        yield
    except GDriveSyncError as exc:
        exc.details.setdefault("path", decision.path)
        exc.details.setdefault("operation", operation)
        raise


def _group_by_kind(
    decisions: list[ClassificationDecision],
) -> dict[Decision, list[ClassificationDecision]]:
    grouped: dict[Decision, list[ClassificationDecision]] = {kind: [] for kind in Decision}
    for decision in decisions:
        decision.validate_required_fields()
        grouped[decision.kind].append(decision)
    return grouped

"""gdrivesync public API."""

from __future__ import annotations

from gdrivesync.auth import AuthInfo, OAuthClient
from gdrivesync.config import AppConfig, SyncState, SyncStateStore, load_config, save_config
from gdrivesync.conflict import (
    ConflictOutcome,
    ConflictPolicy,
    ConflictResolver,
    ContentEqualityOracle,
    PendingConflict,
)
from gdrivesync.controller import GoogleDriveController
from gdrivesync.errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    ConflictError,
    GDriveSyncError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    LocalStorageError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    RemoteRootAccessDeniedError,
    RemoteRootError,
    RemoteRootNotFolderError,
    RemoteRootNotFoundError,
    SyncInProgressError,
    map_http_error,
)
from gdrivesync.local import FileSystemStorage, LocalStorage, read_local_tree
from gdrivesync.manager import SyncManager
from gdrivesync.models import LocalEntry, RemoteEntry, RemoteObject, SyncSummary
from gdrivesync.plan import SLACK_MS, ClassificationDecision, Decision, classify
from gdrivesync.remote import FolderIndex, FolderMaterializer, walk_remote_tree
from gdrivesync.scheduler import SyncScheduler

__all__ = [
    # High-level
    "SyncManager",
    "SyncScheduler",
    "GoogleDriveController",
    "FileSystemStorage",
    "LocalStorage",
    # Auth / config
    "AuthInfo",
    "OAuthClient",
    "AppConfig",
    "SyncState",
    "SyncStateStore",
    "load_config",
    "save_config",
    # Engine
    "SLACK_MS",
    "ClassificationDecision",
    "Decision",
    "classify",
    "read_local_tree",
    "walk_remote_tree",
    "FolderIndex",
    "FolderMaterializer",
    "ContentEqualityOracle",
    "ConflictPolicy",
    "ConflictOutcome",
    "ConflictResolver",
    "PendingConflict",
    # Models
    "LocalEntry",
    "RemoteEntry",
    "RemoteObject",
    "SyncSummary",
    # Errors
    "GDriveSyncError",
    "ConfigurationError",
    "InvalidStateError",
    "SyncInProgressError",
    "LocalStorageError",
    "AuthError",
    "RemoteRootError",
    "RemoteRootNotFoundError",
    "RemoteRootAccessDeniedError",
    "RemoteRootNotFolderError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]

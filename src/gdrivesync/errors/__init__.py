"""Public error exports for gdrivesync."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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

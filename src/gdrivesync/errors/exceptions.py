"""Exception hierarchy and HTTP error mapping for gdrivesync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GDriveSyncError(Exception):
    """
    Base exception for gdrivesync.

    Attributes:
        details: Optional structured information (e.g., HTTP status, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ConfigurationError(GDriveSyncError):
    """Raised when required settings (credentials, folder id) are missing."""


class InvalidStateError(GDriveSyncError):
    """Raised when the library is used in an invalid state (e.g., after shutdown)."""


class SyncInProgressError(InvalidStateError):
    """Raised when a run is requested while another run holds the gate."""


class LocalStorageError(GDriveSyncError):
    """Raised when the local store cannot be read or written."""


class AuthError(GDriveSyncError):
    """Raised when OAuth authorization, exchange or refresh fails."""


class RemoteRootError(GDriveSyncError):
    """Raised when the configured sync root cannot be used."""


class RemoteRootNotFoundError(RemoteRootError):
    """The sync root folder id does not exist (HTTP 404)."""


class RemoteRootAccessDeniedError(RemoteRootError):
    """The sync root folder exists but is not accessible (HTTP 403)."""


class RemoteRootNotFolderError(RemoteRootError):
    """The sync root id points at something other than a folder."""


class PermissionError(GDriveSyncError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(GDriveSyncError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class NotFoundError(GDriveSyncError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class ConflictError(GDriveSyncError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(GDriveSyncError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(GDriveSyncError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GDriveSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GDriveSyncError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivesync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveSyncError:
    """
    Map an HTTP error to a gdrivesync exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError, or QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - otherwise (5xx included) -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)

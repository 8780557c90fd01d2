"""Google Drive API controller: the remote transport used by the sync engine."""

from __future__ import annotations

import io
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from gdrivesync.auth import OAuthClient
from gdrivesync.errors import (
    ApiError,
    AuthError,
    HttpErrorInfo,
    NetworkError,
    RateLimitError,
    map_http_error,
)
from gdrivesync.models import RemoteObject
from gdrivesync.util.mime import FOLDER_MIME
from gdrivesync.util.time import rfc3339_to_ms

from .fields import FILE_FIELDS, ID_FIELDS, LIST_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GoogleDriveController:
    """
    Drive API controller.

    Notes:
        - The Drive `service` object is NOT exposed.
        - `supports_all_drives` is applied to all requests consistently.
        - Rate limits, 5xx and network errors are retried with backoff; any
          other HTTP status is mapped to a gdrivesync error and raised.
    """

    def __init__(
        self,
        oauth_client: OAuthClient,
        *,
        supports_all_drives: bool = True,
    ) -> None:
        self._supports_all_drives = supports_all_drives
        self._retry_policy = _RetryPolicy()
        self._service = oauth_client.build_drive_service()

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
    ) -> "GoogleDriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._supports_all_drives = supports_all_drives
        obj._retry_policy = _RetryPolicy()
        obj._service = service
        return obj

    # ----------------------------
    # Public API
    # ----------------------------
    def get_metadata(self, file_id: str) -> RemoteObject:
        req = self._service.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _file_dict_to_object(data)

    def list_children(self, folder_id: str) -> list[RemoteObject]:
        """List non-trashed direct children of folder_id (all pages)."""
        q = f"'{_escape_query_value(folder_id)}' in parents and trashed=false"
        return self._find_by_query(q)

    def find_child_folder(self, parent_id: str, name: str) -> Optional[str]:
        """Return the id of a child folder called `name`, or None."""
        q = (
            f"'{_escape_query_value(parent_id)}' in parents"
            f" and name='{_escape_query_value(name)}'"
            f" and mimeType='{FOLDER_MIME}'"
            " and trashed=false"
        )
        matches = self._find_by_query(q)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "multiple folders named %r under %s; using %s",
                name,
                parent_id,
                matches[0].file_id,
            )
        return matches[0].file_id

    def create_folder(self, parent_id: str, name: str) -> str:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _require_id(data, "create_folder")

    def create_file(self, parent_id: str, name: str, mime_type: str, content: bytes) -> str:
        """Create a file with metadata and content in one multipart request."""
        media = _media_upload(content, mime_type)
        body = {"name": name, "parents": [parent_id], "mimeType": mime_type}
        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        data = self._execute(req.execute)
        return _require_id(data, "create_file")

    def update_file(self, file_id: str, content: bytes, mime_type: str) -> None:
        """Replace the content of an existing file in place."""
        media = _media_upload(content, mime_type)
        req = self._service.files().update(
            fileId=file_id,
            media_body=media,
            fields=ID_FIELDS,
            **self._common_kwargs(),
        )
        self._execute(req.execute)

    def download_file(self, file_id: str) -> bytes:
        try:
            from googleapiclient.http import MediaIoBaseDownload
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                cause=exc,
            ) from exc

        req = self._service.files().get_media(
            fileId=file_id,
            **self._common_kwargs(),
        )
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req)
        done = False
        while not done:
            _status, done = self._execute(downloader.next_chunk)
        return buffer.getvalue()

    def delete_file(self, file_id: str) -> None:
        req = self._service.files().delete(
            fileId=file_id,
            **self._common_kwargs(),
        )
        self._execute(req.execute)

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _find_by_query(self, q: str) -> list[RemoteObject]:
        all_files: list[RemoteObject] = []
        page_token: Optional[str] = None

        while True:
            req = self._service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageToken=page_token,
                **self._common_list_kwargs(),
            )
            data = self._execute(req.execute)
            for f in data.get("files", []):
                all_files.append(_file_dict_to_object(f))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_files

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.warning(
                        "Drive request failed (%s), retrying in %.1fs [%d/%d]",
                        mapped,
                        delay,
                        attempt + 1,
                        self._retry_policy.max_retries,
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, (RateLimitError, NetworkError)):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        try:
            from googleapiclient.errors import HttpError
        except Exception:  # pragma: no cover
            HttpError = None  # type: ignore[assignment]

        if HttpError is not None and isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)

        return ApiError("Drive API error", cause=exc)


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _media_upload(content: bytes, mime_type: str):
    try:
        from googleapiclient.http import MediaIoBaseUpload
    except Exception as exc:  # pragma: no cover
        raise AuthError(
            "google-api-python-client is not available",
            cause=exc,
        ) from exc
    return MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)


def _require_id(data: dict[str, Any], operation: str) -> str:
    file_id = data.get("id")
    if not isinstance(file_id, str) or not file_id:
        raise ApiError("Drive did not return an id", details={"operation": operation})
    return file_id


def _file_dict_to_object(data: dict[str, Any]) -> RemoteObject:
    file_id = data.get("id")
    name = data.get("name", "")
    mime_type = data.get("mimeType", "")

    mtime_ms = 0
    if isinstance(data.get("modifiedTime"), str):
        try:
            mtime_ms = rfc3339_to_ms(data["modifiedTime"])
        except ValueError:
            mtime_ms = 0

    size = None
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int):
        size = data["size"]

    md5 = data.get("md5Checksum")

    return RemoteObject(
        file_id=file_id if isinstance(file_id, str) else "",
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        mtime_ms=mtime_ms,
        size=size,
        md5_checksum=md5 if isinstance(md5, str) else None,
        trashed=bool(data.get("trashed", False)),
    )


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        if isinstance(payload, dict):
            err = payload.get("error", {})
            if isinstance(err, dict):
                message = err.get("message") or None
                errors = err.get("errors") or []
                if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                    details["domain"] = errors[0].get("domain")
                    details["reason_detail"] = errors[0].get("reason")
                    if isinstance(errors[0].get("reason"), str):
                        reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        try:
            status_code = int(status_code)
        except (TypeError, ValueError):
            status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )

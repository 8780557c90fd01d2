"""Field definitions for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "trashed,"
    "modifiedTime,"
    "size,"
    "md5Checksum"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

ID_FIELDS: str = "id"

from __future__ import annotations

import mimetypes
import posixpath

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_MIME: str = "application/octet-stream"

# Extensions the host store cares about most; everything else falls back to
# the mimetypes registry.
_EXTENSION_MIMES: dict[str, str] = {
    ".md": "text/markdown",
    ".txt": "text/plain",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".dat": DEFAULT_MIME,
}

# MIME prefixes treated as text content.
TEXT_MIME_PREFIXES: tuple[str, ...] = (
    "text/",
    "application/json",
    "application/javascript",
    "application/xml",
    "application/x-yaml",
    "application/x-tex",
    "application/x-latex",
)


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: str) -> bool:
    """
    Returns True if the MIME type is a Google 'apps' type (Docs, Sheets, ...).

    Those items have no binary content reachable through media download.
    """
    return mime_type.startswith("application/vnd.google-apps.")


def guess_mime_type(path: str) -> str:
    """Guess the MIME type for a store path from its extension."""
    ext = posixpath.splitext(path)[1].lower()
    if ext in _EXTENSION_MIMES:
        return _EXTENSION_MIMES[ext]
    guessed, _ = mimetypes.guess_type(posixpath.basename(path))
    return guessed or DEFAULT_MIME


def is_binary_mime(mime_type: str) -> bool:
    """Everything that is not a known text format is binary."""
    return not any(mime_type.startswith(prefix) for prefix in TEXT_MIME_PREFIXES)

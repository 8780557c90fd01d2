from .mime import (
    DEFAULT_MIME,
    FOLDER_MIME,
    guess_mime_type,
    is_binary_mime,
    is_folder,
    is_google_app,
)
from .paths import base_name, join_path, normalize_path, parent_dir, split_segments
from .time import format_ms, now_ms, parse_rfc3339, rfc3339_to_ms, to_epoch_ms

__all__ = [
    "DEFAULT_MIME",
    "FOLDER_MIME",
    "guess_mime_type",
    "is_binary_mime",
    "is_folder",
    "is_google_app",
    "base_name",
    "join_path",
    "normalize_path",
    "parent_dir",
    "split_segments",
    "now_ms",
    "parse_rfc3339",
    "to_epoch_ms",
    "rfc3339_to_ms",
    "format_ms",
]

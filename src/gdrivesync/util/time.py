from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Return the current wall-clock time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def parse_rfc3339(value: str) -> datetime:
    """
    Parse RFC3339 timestamp string into tz-aware UTC datetime.

    Accepts strings like:
      - 2025-01-01T12:34:56Z
      - 2025-01-01T12:34:56.123Z
      - 2025-01-01T12:34:56+09:00
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    # fromisoformat doesn't accept 'Z' before 3.11, so normalize.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)  # raises ValueError if invalid
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt.astimezone(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a tz-aware datetime to epoch milliseconds."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return int(dt.timestamp() * 1000)


def rfc3339_to_ms(value: str) -> int:
    return to_epoch_ms(parse_rfc3339(value))


def format_ms(value: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string (for logs)."""
    dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

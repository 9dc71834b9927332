"""Shared model utilities used across all models."""

import re
from datetime import UTC, datetime
from typing import Any

_KEY_UNSAFE = re.compile(r"[^a-z0-9_\-]")


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def absint(value: Any) -> int:
    """Convert a value to a non-negative integer; non-numeric values become 0."""
    try:
        return abs(int(value))
    except (TypeError, ValueError):
        return 0


def sanitize_key(value: Any) -> str:
    """Lowercase a value and strip everything but a-z, 0-9, dashes and underscores."""
    if value is None:
        return ""
    return _KEY_UNSAFE.sub("", str(value).lower())


def intval(value: Any) -> int:
    """Convert a value to an integer; non-numeric values become 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_id_list(value: Any) -> list[int]:
    """Parse a comma-joined ID string into integers, skipping empty parts."""
    if not value:
        return []
    return [intval(part) for part in str(value).split(",") if part.strip()]

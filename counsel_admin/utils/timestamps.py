"""Timestamp coercion shared by the document store and record schemas.

Documents written by older clients carry timestamps in several shapes:
native datetimes, ISO-8601 strings, epoch seconds or milliseconds, and
exported Firestore maps (``{"seconds": ..., "nanoseconds": ...}``). All of
them normalise to timezone-aware UTC datetimes here.
"""

from datetime import datetime, timezone
from typing import Any, Optional

# Anything above this is treated as epoch milliseconds (year 33658 in seconds)
_EPOCH_MILLIS_THRESHOLD = 10**12


def normalize_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware UTC datetime.

    Args:
        value: datetime, ISO string, epoch number, Firestore map or None

    Returns:
        Aware UTC datetime, or None when value is None/empty

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        return _from_epoch(seconds, value)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return normalize_timestamp(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"Unsupported timestamp string: {value!r}")

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if seconds is not None:
            try:
                total = int(seconds) + int(nanos) / 1e9
            except (OverflowError, TypeError):
                raise ValueError(f"Unsupported timestamp value: {value!r}")
            return _from_epoch(total, value)

    raise ValueError(f"Unsupported timestamp value: {value!r}")


def _from_epoch(seconds: float, original: Any) -> datetime:
    """Epoch seconds to aware UTC; out-of-range values raise ValueError."""
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError):
        raise ValueError(f"Timestamp out of range: {original!r}")


def format_date(value: Any) -> str:
    """Render a timestamp as YYYY-MM-DD for list rows; empty string if unknown."""
    try:
        timestamp = normalize_timestamp(value)
    except ValueError:
        return ""
    return timestamp.strftime("%Y-%m-%d") if timestamp else ""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

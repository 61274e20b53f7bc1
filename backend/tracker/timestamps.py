"""
UTC timestamp helpers shared by entities, DTOs and mappers.

Everything the API emits is `YYYY-MM-DDTHH:MM:SS[.ffffff]Z`; everything it
reads may be an ISO string (with `Z`, an offset, or naive) or a datetime.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[Union[datetime, date]]) -> Optional[str]:
    """UTC ISO-8601 with a trailing `Z`; plain dates render as `YYYY-MM-DD`."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    return value.isoformat()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Reads a timestamp from an ISO string, datetime or date; None and "" give None.

    Naive values are taken as UTC, which is how SQLite hands back
    `DateTime(timezone=True)` columns.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Cannot read a timestamp from {type(value).__name__}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

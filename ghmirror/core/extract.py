# ghmirror/core/extract.py
from datetime import datetime, timezone
from typing import Any

# Returned when a path cannot be followed. Optional fields on the remote side
# degrade to this instead of raising.
MISSING = ""

# GitHub returns dates as either of:
# - yyyy-mm-ddThh:mm:ssZ
# - yyyy/mm/dd hh:mm:ss {+/-}hhmm
DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y/%m/%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S %z",
)


def read_value(source: Any, path: str | None) -> Any:
    """Read a value addressed as "foo.bar.baz" from a parsed JSON document.

    Each dot descends one mapping level. An empty path returns ``source``
    unchanged. A missing key, an empty mapping, or a non-mapping value
    (including None) met before the last segment all yield ``MISSING``.

    Note that a key present with a null value at the *last* segment is
    returned as None, while the same null one level higher gives ``MISSING``.
    """
    if not path:
        return source

    current = source
    for key in path.split("."):
        if not isinstance(current, dict) or not current:
            return MISSING
        if key not in current:
            return MISSING
        current = current[key]
    return current


def parse_date(value: str | None) -> int | None:
    """Convert a GitHub date string into epoch seconds."""
    if not value:
        return None

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())

    # Anything else ISO-8601 shaped, e.g. "2012-03-01T10:00:00+02:00"
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False

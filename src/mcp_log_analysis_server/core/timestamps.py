"""Timestamp normalization.

Turns the timestamp shapes found in supported log formats into timezone-aware
UTC datetimes:

- ISO-8601 (``2023-12-10T10:15:32Z``, optional fraction, naive means UTC)
- Apache/NGINX (``[10/Dec/2023:10:15:32 +0000]``, brackets optional)
- Syslog short form (``Dec 10 10:15:32``)

Syslog timestamps carry no year. They are assigned the year of ``now`` (the
current UTC time unless the caller passes one), so a December log parsed in
January lands in the wrong year. Callers that know better should pass ``now``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

MONTHS: Mapping[str, int] = MappingProxyType(
    {
        "Jan": 1,
        "Feb": 2,
        "Mar": 3,
        "Apr": 4,
        "May": 5,
        "Jun": 6,
        "Jul": 7,
        "Aug": 8,
        "Sep": 9,
        "Oct": 10,
        "Nov": 11,
        "Dec": 12,
    }
)

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?Z?$")
_ACCESS_RE = re.compile(
    r"\[?(?P<d>\d{1,2})/(?P<mon>\w{3})/(?P<y>\d{4}):"
    r"(?P<h>\d{2}):(?P<mi>\d{2}):(?P<s>\d{2})\s+[+-]\d{4}\]?"
)
_SYSLOG_RE = re.compile(
    r"^(?P<mon>\w{3})\s+(?P<d>\d{1,2})\s+(?P<h>\d{2}):(?P<mi>\d{2}):(?P<s>\d{2})$"
)


def _parse_iso(ts: str) -> datetime | None:
    try:
        dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _build(year: int, month_name: str, m: re.Match[str]) -> datetime | None:
    month = MONTHS.get(month_name)
    if month is None:
        return None
    try:
        return datetime(
            year,
            month,
            int(m.group("d")),
            int(m.group("h")),
            int(m.group("mi")),
            int(m.group("s")),
            tzinfo=UTC,
        )
    except ValueError:
        return None


def parse_timestamp(raw: Any, *, now: datetime | None = None) -> datetime | None:
    """Parse a raw timestamp into UTC, or return None when unrecognized."""
    if not isinstance(raw, str) or not raw:
        return None
    ts = raw.strip()

    if _ISO_RE.match(ts):
        return _parse_iso(ts)

    # The offset is not applied: the wall clock is read as UTC.
    m = _ACCESS_RE.search(ts)
    if m:
        return _build(int(m.group("y")), m.group("mon"), m)

    m = _SYSLOG_RE.match(ts)
    if m:
        year = (now or datetime.now(UTC)).year
        return _build(year, m.group("mon"), m)

    return None


def timestamp_text(fields: Mapping[str, Any]) -> str | None:
    """Pick the raw timestamp of a record.

    Syslog records split the timestamp over several fields; they are joined
    back into the short form here.
    """
    for key in ("timestamp", "_timestamp"):
        val = fields.get(key)
        if isinstance(val, str) and val:
            return val

    parts = [fields.get(k) for k in ("month", "day", "hour", "minute", "second")]
    if all(isinstance(p, str) and p for p in parts):
        month, day, hour, minute, second = parts
        return f"{month} {day} {hour}:{minute}:{second}"
    return None


def to_iso(dt: datetime) -> str:
    """Render a UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def bucket_label(dt: datetime) -> str:
    """Render the UTC wall clock as ``HH:MM``."""
    return dt.astimezone(UTC).strftime("%H:%M")

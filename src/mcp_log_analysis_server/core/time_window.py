"""Fixed-width time-window helpers.

A window of ``minutes`` minutes is identified by its index since the epoch:
``floor(epoch_seconds / (minutes * 60))``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime

from .models import LogEntry


def bucket_index(ts: datetime, minutes: int) -> int:
    """Return the index of the window containing ``ts``."""
    if minutes < 1:
        raise ValueError("minutes must be >= 1")
    return math.floor(ts.timestamp() / (minutes * 60))


def bucket_start(index: int, minutes: int) -> datetime:
    """Return the UTC start of window ``index``."""
    return datetime.fromtimestamp(index * minutes * 60, tz=UTC)


def bucket_entries(entries: Iterable[LogEntry], minutes: int) -> dict[int, list[LogEntry]]:
    """Group timestamped entries by window, ordered by window index.

    Entries without a timestamp are skipped.
    """
    buckets: dict[int, list[LogEntry]] = {}
    for e in entries:
        if e.timestamp is None:
            continue
        buckets.setdefault(bucket_index(e.timestamp, minutes), []).append(e)
    return dict(sorted(buckets.items()))

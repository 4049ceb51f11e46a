"""Regex-driven line parser (NGINX, Apache, Syslog and custom patterns)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import LogEntry
from ..timestamps import parse_timestamp, timestamp_text


@dataclass(frozen=True, slots=True)
class RegexLineParser:
    """Map the groups of ``pattern`` onto ``fields``.

    A field named after a named group takes that group; otherwise field ``i``
    takes group ``i + 1``. Groups that did not participate yield ``""``.
    """

    pattern: re.Pattern[str]
    fields: tuple[str, ...]

    def parse(self, line_no: int, line: str) -> LogEntry | None:
        """Parse a line into a LogEntry when the pattern matches."""
        m = self.pattern.search(line)
        if not m:
            return None

        named = self.pattern.groupindex
        values: dict[str, str] = {}
        for i, name in enumerate(self.fields):
            group = named.get(name, i + 1)
            if group > self.pattern.groups:
                values[name] = ""
                continue
            values[name] = m.group(group) or ""

        ts = parse_timestamp(timestamp_text(values))
        return LogEntry(line_no=line_no, fields=values, raw=line, timestamp=ts)

"""JSON-lines parser."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..models import LogEntry
from ..timestamps import parse_timestamp, timestamp_text

# Vendor logger key -> canonical key.
DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "time": "timestamp",
        "msg": "message",
        "reqId": "request_id",
        "userId": "user_id",
        "responseTime": "duration",
        "statusCode": "status",
    }
)


@dataclass(frozen=True, slots=True)
class JsonLinesParser:
    """Parse JSON-lines logs (one JSON object per line).

    Values keep their decoded JSON types. Aliased keys are copied onto their
    canonical name only when the canonical key is absent.
    """

    aliases: Mapping[str, str] = field(default_factory=lambda: DEFAULT_ALIASES)

    def parse(self, line_no: int, line: str) -> LogEntry | None:
        """Parse a JSON object line into a LogEntry."""
        s = line.strip()
        if not (s.startswith("{") and s.endswith("}")):
            return None

        try:
            obj = json.loads(s)
        except ValueError:  # also int literals past the interpreter digit limit
            return None
        if not isinstance(obj, dict):
            return None

        for alias, canonical in self.aliases.items():
            if obj.get(alias) is not None and obj.get(canonical) is None:
                obj[canonical] = obj[alias]

        ts = parse_timestamp(timestamp_text(obj))
        return LogEntry(line_no=line_no, fields=obj, raw=line, timestamp=ts)

"""Catalog of supported log formats."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from .base import (
    DurationField,
    FormatDefinition,
    HttpStatusField,
    IPAddressField,
    LogLevelField,
    SyslogPriorityField,
)

DEFAULT_FORMAT = "nginx"

_HTTP_ANOMALY_FIELDS = MappingProxyType(
    {
        "status": HttpStatusField(critical_codes=(500, 502, 503, 504)),
        "ip": IPAddressField(),
    }
)

LOG_FORMATS: Mapping[str, FormatDefinition] = MappingProxyType(
    {
        "nginx": FormatDefinition(
            id="nginx",
            display_name="NGINX Access Log",
            pattern=re.compile(
                r'^(\S+) - (\S+) \[([^\]]+)\] "(\S+) (\S+) (\S+)" (\d+) (\d+) "([^"]*)" "([^"]*)"$'
            ),
            fields=(
                "ip",
                "ident",
                "timestamp",
                "method",
                "path",
                "protocol",
                "status",
                "bytes",
                "referer",
                "user_agent",
            ),
            anomaly_fields=_HTTP_ANOMALY_FIELDS,
            example=(
                '192.168.1.100 - - [10/Dec/2023:10:15:32 +0000] "GET /api/users HTTP/1.1" '
                '200 1024 "-" "Mozilla/5.0"'
            ),
        ),
        "apache": FormatDefinition(
            id="apache",
            display_name="Apache Access Log",
            pattern=re.compile(
                r'^(\S+) (\S+) (\S+) \[([^\]]+)\] "(\S+) (\S+) (\S+)" (\d+) (\d+) "([^"]*)" "([^"]*)"$'
            ),
            fields=(
                "ip",
                "ident",
                "user",
                "timestamp",
                "method",
                "path",
                "protocol",
                "status",
                "bytes",
                "referer",
                "user_agent",
            ),
            anomaly_fields=_HTTP_ANOMALY_FIELDS,
            example=(
                '192.168.1.100 - john [10/Dec/2023:10:15:32 +0000] "GET /api/users HTTP/1.1" '
                '200 1024 "-" "Mozilla/5.0"'
            ),
        ),
        "json": FormatDefinition(
            id="json",
            display_name="JSON Log",
            pattern=None,
            fields=(
                "timestamp",
                "level",
                "message",
                "service",
                "request_id",
                "user_id",
                "duration",
                "status",
                "error",
                "stack_trace",
            ),
            anomaly_fields=MappingProxyType(
                {
                    "level": LogLevelField(critical_levels=("ERROR", "FATAL", "CRITICAL")),
                    "duration": DurationField(unit="ms", warning_ms=1000, critical_ms=5000),
                    "status": HttpStatusField(critical_codes=(500, 502, 503, 504)),
                }
            ),
            example=(
                '{"timestamp":"2023-12-10T10:15:32Z","level":"INFO",'
                '"message":"User login successful","service":"auth","request_id":"req-123",'
                '"user_id":"user-456","duration":150,"status":200}'
            ),
        ),
        "syslog": FormatDefinition(
            id="syslog",
            display_name="Syslog",
            pattern=re.compile(r"^<(\d+)>(\w{3})\s+(\d+)\s+(\d+):(\d+):(\d+)\s+(\S+)\s+(.+)$"),
            fields=("priority", "month", "day", "hour", "minute", "second", "hostname", "message"),
            # Emergency through Error.
            anomaly_fields=MappingProxyType(
                {"priority": SyslogPriorityField(critical_codes=(0, 1, 2, 3))}
            ),
            example="<30>Dec 10 10:15:32 web-server User login: user123",
        ),
        "custom": FormatDefinition(
            id="custom",
            display_name="Custom Regex",
            pattern=None,
            fields=(),
        ),
    }
)


class UnsupportedFormatError(ValueError):
    """Raised when a caller asks for a format id that is not in the catalog."""

    def __init__(self, format_id: str) -> None:
        super().__init__(f"Unsupported log format: {format_id}")
        self.format_id = format_id
        self.supported_formats = supported_formats()


def supported_formats() -> list[str]:
    """Return format ids in catalog order."""
    return list(LOG_FORMATS)


def get_format(format_id: str) -> FormatDefinition:
    """Return the catalog entry for ``format_id``."""
    try:
        return LOG_FORMATS[format_id]
    except KeyError:
        raise UnsupportedFormatError(format_id) from None


def custom_format(pattern: re.Pattern[str], fields: Sequence[str] = ()) -> FormatDefinition:
    """Derive the runtime definition for a caller-supplied regex.

    Without an explicit field list, named groups (in pattern order) are used.
    """
    if not fields:
        by_index = sorted(pattern.groupindex.items(), key=lambda kv: kv[1])
        fields = [name for name, _ in by_index]
    return replace(LOG_FORMATS["custom"], pattern=pattern, fields=tuple(fields))


def format_catalog() -> list[dict[str, Any]]:
    """Describe every format for format pickers."""
    return [
        {
            "id": fmt.id,
            "name": fmt.display_name,
            "fields": list(fmt.fields),
            "example": fmt.example,
            "supportsAnomalyDetection": fmt.supports_anomaly_detection,
        }
        for fmt in LOG_FORMATS.values()
    ]

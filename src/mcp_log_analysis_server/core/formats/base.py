"""Parser interface, format definitions and anomaly-field rules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol, TypeAlias

from ..models import LogEntry


class LogParser(Protocol):
    """Parser interface: return LogEntry if line matches, else None."""

    def parse(self, line_no: int, line: str) -> LogEntry | None:
        """Parse a log line into a LogEntry if recognized."""
        ...


@dataclass(frozen=True, slots=True)
class HttpStatusField:
    """HTTP status field; a high share of any critical code is anomalous."""

    critical_codes: tuple[int, ...] = (500, 502, 503, 504)


@dataclass(frozen=True, slots=True)
class LogLevelField:
    """Log level field; a high share of any critical level is anomalous."""

    critical_levels: tuple[str, ...] = ("ERROR", "FATAL", "CRITICAL")


@dataclass(frozen=True, slots=True)
class DurationField:
    """Response time field; single outliers far above p95 are anomalous."""

    unit: str = "ms"
    warning_ms: float = 1000
    critical_ms: float = 5000


@dataclass(frozen=True, slots=True)
class IPAddressField:
    """Client address field; one address dominating traffic is anomalous."""


@dataclass(frozen=True, slots=True)
class SyslogPriorityField:
    """Syslog PRI field; ``critical_codes`` are severities (PRI % 8)."""

    critical_codes: tuple[int, ...] = (0, 1, 2, 3)


AnomalyFieldConfig: TypeAlias = (
    HttpStatusField | LogLevelField | DurationField | IPAddressField | SyslogPriorityField
)


@dataclass(frozen=True, slots=True)
class FormatDefinition:
    """Static description of one supported log format.

    ``pattern`` is None for JSON lines and for the custom format, whose
    pattern is only known once a caller supplies it.
    """

    id: str
    display_name: str
    pattern: re.Pattern[str] | None
    fields: tuple[str, ...]
    anomaly_fields: Mapping[str, AnomalyFieldConfig] = field(
        default_factory=lambda: MappingProxyType({})
    )
    example: str = ""

    @property
    def supports_anomaly_detection(self) -> bool:
        """True when at least one field has an anomaly rule."""
        return len(self.anomaly_fields) > 0

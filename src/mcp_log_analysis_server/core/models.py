"""Core data models for log analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class FilterOperator(str, Enum):
    """Comparison operators accepted by field filters."""

    EQUALS = "equals"
    CONTAINS = "contains"
    REGEX = "regex"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CorrelationType(str, Enum):
    REQUEST_FLOW = "request_flow"
    ERROR_CHAIN = "error_chain"


class Sensitivity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """Structured record produced by a line parser.

    ``fields`` keeps the values the parser extracted (strings for regex
    formats, decoded JSON values for JSON lines).
    """

    line_no: int
    fields: dict[str, Any]
    raw: str
    timestamp: datetime | None = None  # None when missing or unparseable

    def get(self, name: str, default: Any = None) -> Any:
        """Return a field value, like dict.get."""
        return self.fields.get(name, default)


@dataclass(frozen=True, slots=True)
class FilterPredicate:
    """One field predicate; a list of them is applied as a conjunction."""

    field: str
    operator: FilterOperator
    value: str


@dataclass(frozen=True, slots=True)
class AnomalyConfig:
    """Gates whether (and how) anomaly detection runs for one batch."""

    enabled: bool = True
    sensitivity: Sensitivity = Sensitivity.MEDIUM  # accepted and echoed, thresholds are fixed
    time_window_minutes: int = 5
    min_samples: int = 10


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Output of parsing one batch of lines."""

    entries: list[LogEntry] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_lines: int = 0  # non-blank lines inside the batch

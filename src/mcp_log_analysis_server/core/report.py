"""Report models.

Everything the analysis returns to callers is a pydantic model so the report
has one JSON schema. Fields serialize under camelCase aliases.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .models import CorrelationType, Impact, LogEntry, Severity
from .timestamps import to_iso

logger = logging.getLogger(__name__)

ENTRY_METADATA_KEYS = ("lineNumber", "originalLine", "parsedTimestamp")


def entry_to_dict(entry: LogEntry) -> dict[str, Any]:
    """Convert a LogEntry into a JSON-serializable dict.

    Entry metadata wins over record fields of the same name.
    """
    d: dict[str, Any] = dict(entry.fields)
    clashes = [k for k in ENTRY_METADATA_KEYS if k in d]
    if clashes:
        logger.debug("Line %s: fields %s replaced by entry metadata", entry.line_no, clashes)
    d["lineNumber"] = entry.line_no
    d["originalLine"] = entry.raw
    d["parsedTimestamp"] = to_iso(entry.timestamp) if entry.timestamp is not None else None
    return d


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Percentiles(ReportModel):
    p25: float
    p50: float
    p75: float
    p95: float
    p99: float


class NumericStats(ReportModel):
    min: float
    max: float
    mean: float
    median: float
    std_dev: float
    percentiles: Percentiles


class FieldStatResult(ReportModel):
    field: str
    count: int
    unique_count: int
    distribution: dict[str, int]
    numeric: NumericStats | None = None


class AnomalyResult(ReportModel):
    type: str
    severity: Severity
    field: str
    observed_value: Any
    expected_value: Any = None
    confidence: float = Field(ge=0.0, le=1.0)
    description: str
    line_number: int
    timestamp: str | None = None


class CorrelationResult(ReportModel):
    type: CorrelationType
    events: list[LogEntry]
    pattern_description: str
    confidence: float = Field(ge=0.0, le=1.0)
    impact: Impact

    @field_serializer("events")
    def _serialize_events(self, events: list[LogEntry]) -> list[dict[str, Any]]:
        return [entry_to_dict(e) for e in events]


class Spike(ReportModel):
    time: str = Field(description="Bucket start as HH:MM (UTC).")
    count: int
    percentage: float


class PeakHour(ReportModel):
    hour: int
    count: int


class TimeRange(ReportModel):
    min: int
    max: int
    avg: float


class TimeAnalysis(ReportModel):
    start_time: str
    end_time: str
    duration_label: str
    activity_pattern: str
    spikes: list[Spike]
    hourly_distribution: dict[int, int]
    peak_hours: list[PeakHour]
    total_entries: int
    analyzed_entries: int
    time_range: TimeRange


class ReportSummary(ReportModel):
    total_lines: int
    parsed_lines: int
    filtered_lines: int
    error_lines: int
    format: str
    fields: list[str]
    anomalies_detected: int
    correlations_found: int


class AnomalyDetectionSettings(ReportModel):
    enabled: bool
    sensitivity: str
    time_window: int
    min_samples: int


class ReportConfig(ReportModel):
    format: str
    filters: list[dict[str, Any]]
    max_lines: int
    custom_pattern: str | None = None
    anomaly_detection: AnomalyDetectionSettings


class AnalysisReport(ReportModel):
    summary: ReportSummary
    field_stats: dict[str, FieldStatResult]
    time_analysis: TimeAnalysis | None = None
    anomalies: list[AnomalyResult]
    correlations: list[CorrelationResult]
    entries: list[LogEntry]
    errors: list[str]
    config: ReportConfig

    @field_serializer("entries")
    def _serialize_entries(self, entries: list[LogEntry]) -> list[dict[str, Any]]:
        return [entry_to_dict(e) for e in entries]

    def to_dict(self) -> dict[str, Any]:
        """Dump the report as camelCase JSON-compatible data."""
        return self.model_dump(mode="json", by_alias=True)

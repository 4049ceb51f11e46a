"""Rule-based anomaly detection.

Each anomaly-configured field of a format is checked with the rule of its
config type; independently, timestamped entries are bucketed into windows and
windows far above the average size are reported as traffic spikes.

Thresholds are fixed:

- HTTP status: a critical code above 5% of statuses
- log level: a critical level above 10% of levels
- syslog priority: critical severities above 10% of priorities
- duration: a single value above 2 x p95
- IP address: one address above 30% of traffic
- traffic spike: a window above mean + 2 standard deviations
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any

from .formats import (
    AnomalyFieldConfig,
    DurationField,
    FormatDefinition,
    HttpStatusField,
    IPAddressField,
    LogLevelField,
    SyslogPriorityField,
)
from .models import AnomalyConfig, LogEntry, Severity
from .report import AnomalyResult
from .stats import calculate_stats, mean_and_std, percentile
from .time_window import bucket_entries, bucket_start
from .timestamps import to_iso
from .values import to_int, to_number, value_text

logger = logging.getLogger(__name__)

ERROR_RATE_PCT = 5.0
ERROR_LOGS_PCT = 10.0
SYSLOG_SEVERITY_PCT = 10.0
HIGH_TRAFFIC_PCT = 30.0
HIGH_TRAFFIC_MIN_SAMPLES = 10
SLOW_RESPONSE_FACTOR = 2.0
SPIKE_SIGMAS = 2.0
MIN_SPIKE_BUCKETS = 4


def _pct(count: int, total: int) -> float:
    return count * 100 / total


def _ts(entry: LogEntry) -> str | None:
    return to_iso(entry.timestamp) if entry.timestamp is not None else None


def _first(entries: Sequence[LogEntry], field: str, predicate) -> LogEntry | None:
    for e in entries:
        value = e.fields.get(field)
        if value is not None and predicate(value):
            return e
    return None


def _http_status(
    entries: Sequence[LogEntry], field: str, values: list[Any], rule: HttpStatusField
) -> list[AnomalyResult]:
    counts = Counter(code for code in (to_int(v) for v in values) if code is not None)
    out: list[AnomalyResult] = []
    for code in rule.critical_codes:
        if counts[code] == 0:
            continue
        pct = _pct(counts[code], len(values))
        if pct <= ERROR_RATE_PCT:
            continue
        first = _first(entries, field, lambda v, code=code: to_int(v) == code)
        out.append(
            AnomalyResult(
                type="high_error_rate",
                severity=Severity.HIGH,
                field=field,
                observed_value=code,
                confidence=min(pct / 10, 1.0),
                description=f"{pct:.1f}% of requests returned {code} status",
                line_number=first.line_no if first else 0,
                timestamp=_ts(first) if first else None,
            )
        )
    return out


def _log_level(
    entries: Sequence[LogEntry], field: str, values: list[Any], rule: LogLevelField
) -> list[AnomalyResult]:
    counts = Counter(value_text(v).upper() for v in values)
    out: list[AnomalyResult] = []
    for level in rule.critical_levels:
        level = level.upper()
        if counts[level] == 0:
            continue
        pct = _pct(counts[level], len(values))
        if pct <= ERROR_LOGS_PCT:
            continue
        first = _first(entries, field, lambda v, level=level: value_text(v).upper() == level)
        out.append(
            AnomalyResult(
                type="high_error_logs",
                severity=Severity.MEDIUM,
                field=field,
                observed_value=level,
                confidence=min(pct / 20, 1.0),
                description=f"{pct:.1f}% of logs are {level} level",
                line_number=first.line_no if first else 0,
                timestamp=_ts(first) if first else None,
            )
        )
    return out


def _syslog_priority(
    entries: Sequence[LogEntry], field: str, values: list[Any], rule: SyslogPriorityField
) -> list[AnomalyResult]:
    def severity_of(value: Any) -> int | None:
        pri = to_int(value)
        return None if pri is None else pri % 8

    counts = Counter(sev for sev in (severity_of(v) for v in values) if sev is not None)
    out: list[AnomalyResult] = []
    for sev in rule.critical_codes:
        if counts[sev] == 0:
            continue
        pct = _pct(counts[sev], len(values))
        if pct <= SYSLOG_SEVERITY_PCT:
            continue
        first = _first(entries, field, lambda v, sev=sev: severity_of(v) == sev)
        out.append(
            AnomalyResult(
                type="high_severity_syslog",
                severity=Severity.MEDIUM,
                field=field,
                observed_value=sev,
                confidence=min(pct / 20, 1.0),
                description=f"{pct:.1f}% of messages have syslog severity {sev}",
                line_number=first.line_no if first else 0,
                timestamp=_ts(first) if first else None,
            )
        )
    return out


def _duration(
    entries: Sequence[LogEntry], field: str, values: list[Any], rule: DurationField
) -> list[AnomalyResult]:
    durations = [d for d in (to_number(v) for v in values) if d is not None]
    if not durations:
        return []

    p95 = calculate_stats(durations).p95
    threshold = p95 * SLOW_RESPONSE_FACTOR
    out: list[AnomalyResult] = []
    for e in entries:
        duration = to_number(e.fields.get(field))
        if duration is None or duration <= threshold:
            continue
        confidence = 1.0 if p95 <= 0 else min(duration / (p95 * 3), 1.0)
        out.append(
            AnomalyResult(
                type="slow_response",
                severity=Severity.MEDIUM,
                field=field,
                observed_value=duration,
                expected_value=p95,
                confidence=confidence,
                description=(
                    f"Response time {duration:g}{rule.unit} exceeds threshold "
                    f"{threshold:.0f}{rule.unit}"
                ),
                line_number=e.line_no,
                timestamp=_ts(e),
            )
        )
    return out


def _ip_address(
    entries: Sequence[LogEntry], field: str, values: list[Any], cfg: AnomalyConfig
) -> list[AnomalyResult]:
    # A caller that lowers min_samples below the default floor lowers it here too.
    if cfg.min_samples >= HIGH_TRAFFIC_MIN_SAMPLES:
        floor = HIGH_TRAFFIC_MIN_SAMPLES
    else:
        floor = cfg.min_samples - 1
    if len(values) <= floor:
        return []

    counts = Counter(value_text(v) for v in values)
    out: list[AnomalyResult] = []
    for ip, count in counts.items():
        pct = _pct(count, len(values))
        if pct <= HIGH_TRAFFIC_PCT:
            continue
        first = _first(entries, field, lambda v, ip=ip: value_text(v) == ip)
        out.append(
            AnomalyResult(
                type="high_traffic_ip",
                severity=Severity.LOW,
                field=field,
                observed_value=ip,
                confidence=min(pct / 50, 1.0),
                description=f"IP {ip} accounts for {pct:.1f}% of traffic",
                line_number=first.line_no if first else 0,
                timestamp=_ts(first) if first else None,
            )
        )
    return out


def _field_anomalies(
    entries: Sequence[LogEntry],
    field: str,
    rule: AnomalyFieldConfig,
    cfg: AnomalyConfig,
) -> list[AnomalyResult]:
    values = [e.fields[field] for e in entries if e.fields.get(field) is not None]
    if len(values) < cfg.min_samples:
        return []

    match rule:
        case HttpStatusField():
            return _http_status(entries, field, values, rule)
        case LogLevelField():
            return _log_level(entries, field, values, rule)
        case DurationField():
            return _duration(entries, field, values, rule)
        case IPAddressField():
            return _ip_address(entries, field, values, cfg)
        case SyslogPriorityField():
            return _syslog_priority(entries, field, values, rule)
    return []


def detect_traffic_spikes(entries: Sequence[LogEntry], minutes: int) -> list[AnomalyResult]:
    """Flag windows whose size exceeds mean + 2 sigma of all window sizes."""
    buckets = bucket_entries(entries, minutes)
    if len(buckets) < MIN_SPIKE_BUCKETS:
        return []

    sizes = [len(b) for b in buckets.values()]
    mean, std = mean_and_std(sizes)
    p95 = percentile(sorted(sizes), 0.95)
    threshold = mean + SPIKE_SIGMAS * std

    out: list[AnomalyResult] = []
    for index, members in buckets.items():
        size = len(members)
        if size <= threshold:
            continue
        out.append(
            AnomalyResult(
                type="traffic_spike",
                severity=Severity.MEDIUM,
                field="timestamp",
                observed_value=size,
                expected_value=p95,
                confidence=min(size / (p95 * 3), 1.0),
                description=f"Traffic spike: {size} requests in {minutes}min window",
                line_number=members[0].line_no,
                timestamp=to_iso(bucket_start(index, minutes)),
            )
        )
    return out


def detect_anomalies(
    entries: Sequence[LogEntry],
    cfg: AnomalyConfig,
    fmt: FormatDefinition,
) -> list[AnomalyResult]:
    """Return anomalies sorted by descending confidence."""
    if not cfg.enabled or len(entries) < cfg.min_samples:
        return []

    anomalies: list[AnomalyResult] = []
    for field, rule in fmt.anomaly_fields.items():
        anomalies.extend(_field_anomalies(entries, field, rule, cfg))
    anomalies.extend(detect_traffic_spikes(entries, cfg.time_window_minutes))

    logger.debug("Detected %s anomalies over %s entries", len(anomalies), len(entries))
    return sorted(anomalies, key=lambda a: a.confidence, reverse=True)

"""Event correlation: request flows and error chains."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

from .models import CorrelationType, Impact, LogEntry
from .report import CorrelationResult
from .values import to_int, value_text

CORRELATION_KEYS: tuple[str, ...] = ("request_id", "req_id", "requestId")
ERROR_LEVELS: frozenset[str] = frozenset({"ERROR", "FATAL"})
CHAIN_GAP = timedelta(minutes=5)
REQUEST_FLOW_CONFIDENCE = 0.9


def correlation_key(entry: LogEntry) -> str | None:
    """Return the first non-empty correlation key of an entry."""
    for key in CORRELATION_KEYS:
        value = entry.fields.get(key)
        if value is not None and value_text(value):
            return value_text(value)
    return None


def _level(entry: LogEntry) -> str:
    value = entry.fields.get("level")
    return value_text(value).upper() if value is not None else ""


def _status(entry: LogEntry) -> int:
    return to_int(entry.fields.get("status")) or 0


def has_error_signal(entry: LogEntry) -> bool:
    """Error level or a 4xx/5xx status."""
    return _level(entry) in ERROR_LEVELS or 400 <= _status(entry) < 600


def is_error_event(entry: LogEntry) -> bool:
    """Error level or a 5xx status."""
    return _level(entry) in ERROR_LEVELS or 500 <= _status(entry) < 600


def request_flows(entries: Sequence[LogEntry]) -> list[CorrelationResult]:
    """Groups of entries sharing a correlation key that include an error."""
    groups: dict[str, list[LogEntry]] = {}
    for e in entries:
        key = correlation_key(e)
        if key is not None:
            groups.setdefault(key, []).append(e)

    out: list[CorrelationResult] = []
    for key, members in groups.items():
        if len(members) < 2 or not any(has_error_signal(e) for e in members):
            continue
        out.append(
            CorrelationResult(
                type=CorrelationType.REQUEST_FLOW,
                events=members,
                pattern_description=(
                    f"Request {key} has {len(members)} related events including errors"
                ),
                confidence=REQUEST_FLOW_CONFIDENCE,
                impact=Impact.HIGH,
            )
        )
    return out


def error_chains(entries: Sequence[LogEntry]) -> list[CorrelationResult]:
    """Runs of error events each within five minutes of the previous one.

    Errors are chained in chronological order. An error without a timestamp
    cannot be chained: it splits the errors into the ones on lines before it
    and the ones after it, and each side is ordered and chained separately.
    """
    segments: list[list[LogEntry]] = [[]]
    for e in entries:
        if not is_error_event(e):
            continue
        if e.timestamp is None:
            segments.append([])
        else:
            segments[-1].append(e)

    chains: list[list[LogEntry]] = []
    for segment in segments:
        current: list[LogEntry] = []
        for e in sorted(segment, key=lambda x: (x.timestamp, x.line_no)):
            if current and e.timestamp - current[-1].timestamp <= CHAIN_GAP:
                current.append(e)
            else:
                chains.append(current)
                current = [e]
        chains.append(current)

    out: list[CorrelationResult] = []
    for chain in chains:
        if len(chain) < 2:
            continue
        out.append(
            CorrelationResult(
                type=CorrelationType.ERROR_CHAIN,
                events=chain,
                pattern_description=f"{len(chain)} sequential errors within 5 minutes",
                confidence=min(len(chain) / 5, 1.0),
                impact=Impact.HIGH if len(chain) > 3 else Impact.MEDIUM,
            )
        )
    return out


def analyze_correlations(entries: Sequence[LogEntry]) -> list[CorrelationResult]:
    """Request flows first, then error chains."""
    return request_flows(entries) + error_chains(entries)

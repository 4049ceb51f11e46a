"""Temporal activity analysis."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence

from .models import LogEntry
from .report import PeakHour, Spike, TimeAnalysis, TimeRange
from .stats import mean_and_std
from .time_window import bucket_entries, bucket_start
from .timestamps import bucket_label, to_iso

SPIKE_BUCKET_MINUTES = 5
MAX_SPIKES = 5
PEAK_HOURS = 3
BUSINESS_HOURS = range(9, 18)  # 9..17 inclusive


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def duration_label(ms: float) -> str:
    """Human span: seconds below a minute, minutes below an hour, else hours."""
    if ms < 60_000:
        return f"{_round_half_up(ms / 1000)}s"
    if ms < 3_600_000:
        return f"{_round_half_up(ms / 60_000)}m"
    return f"{_round_half_up(ms / 3_600_000)}h"


def _is_night(hour: int) -> bool:
    return hour >= 22 or hour <= 4


def activity_pattern(peak_hours: Sequence[int]) -> str:
    """Classify the busiest hours of the day."""
    if len(peak_hours) < 2:
        return "Irregular activity"
    if all(h in BUSINESS_HOURS for h in peak_hours):
        return "Business hours activity"
    if all(_is_night(h) for h in peak_hours):
        return "Night time activity"
    return "Mixed activity pattern"


def analyze_time_patterns(entries: Sequence[LogEntry]) -> TimeAnalysis | None:
    """Characterize activity over time; None when no entry has a timestamp."""
    stamps = sorted(e.timestamp for e in entries if e.timestamp is not None)
    if not stamps:
        return None

    start, end = stamps[0], stamps[-1]
    span_ms = (end - start).total_seconds() * 1000

    buckets = bucket_entries(entries, SPIKE_BUCKET_MINUTES)
    counts = [len(b) for b in buckets.values()]
    mean, std = mean_and_std(counts)
    threshold = mean + 2 * std

    # Ties keep the earlier window.
    spiking = sorted(
        ((index, len(members)) for index, members in buckets.items() if len(members) > threshold),
        key=lambda kv: kv[1],
        reverse=True,
    )[:MAX_SPIKES]
    spikes = [
        Spike(
            time=bucket_label(bucket_start(index, SPIKE_BUCKET_MINUTES)),
            count=count,
            percentage=round(count * 100 / len(entries), 1),
        )
        for index, count in spiking
    ]

    hourly = Counter(ts.hour for ts in stamps)
    hourly_distribution = dict(sorted(hourly.items()))
    peaks = sorted(hourly_distribution.items(), key=lambda kv: kv[1], reverse=True)[:PEAK_HOURS]

    return TimeAnalysis(
        start_time=to_iso(start),
        end_time=to_iso(end),
        duration_label=duration_label(span_ms),
        activity_pattern=activity_pattern([hour for hour, _ in peaks]),
        spikes=spikes,
        hourly_distribution=hourly_distribution,
        peak_hours=[PeakHour(hour=hour, count=count) for hour, count in peaks],
        total_entries=len(entries),
        analyzed_entries=len(stamps),
        time_range=TimeRange(
            min=min(counts),
            max=max(counts),
            avg=round(mean, 1),
        ),
    )

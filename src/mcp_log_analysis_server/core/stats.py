"""Descriptive statistics over parsed fields.

Percentiles use the nearest-rank rule without interpolation: the value at
index ``floor(N * fraction)`` of the ascending sort. The standard deviation
is the population one (divide by N).
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .models import LogEntry
from .report import FieldStatResult, NumericStats, Percentiles
from .values import to_number, value_text

PERCENTILES: tuple[tuple[str, float], ...] = (
    ("p25", 0.25),
    ("p50", 0.5),
    ("p75", 0.75),
    ("p95", 0.95),
    ("p99", 0.99),
)


@dataclass(frozen=True, slots=True)
class NumericSummary:
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p95: float = 0.0
    p99: float = 0.0


def percentile(sorted_values: Sequence[float], fraction: float) -> float:
    """Nearest-rank percentile of an ascending sequence."""
    if not sorted_values:
        return 0.0
    idx = min(math.floor(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[idx]


def mean_and_std(values: Sequence[float]) -> tuple[float, float]:
    """Mean and population standard deviation."""
    if not values:
        return 0.0, 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)


def calculate_stats(values: Sequence[float]) -> NumericSummary:
    """Summarize numeric values; all zeros for an empty input."""
    if not values:
        return NumericSummary()

    ordered = sorted(values)
    mean, std_dev = mean_and_std(values)
    ranks = {name: percentile(ordered, frac) for name, frac in PERCENTILES}
    return NumericSummary(
        min=ordered[0],
        max=ordered[-1],
        mean=mean,
        median=ordered[len(ordered) // 2],
        std_dev=std_dev,
        **ranks,
    )


def _field_names(entries: Iterable[LogEntry]) -> list[str]:
    seen: dict[str, None] = {}
    for e in entries:
        for name in e.fields:
            seen.setdefault(name, None)
    return list(seen)


def field_stats(entries: Sequence[LogEntry]) -> dict[str, FieldStatResult]:
    """Compute per-field statistics for every field seen in ``entries``.

    A field gets a numeric summary when more than half of its values parse
    as numbers; the summary covers the numeric values only.
    """
    out: dict[str, FieldStatResult] = {}
    for name in _field_names(entries):
        values = [e.fields[name] for e in entries if e.fields.get(name) is not None]
        if not values:
            continue

        texts = [value_text(v) for v in values]
        distribution = dict(Counter(texts))
        numbers = [n for n in (to_number(v) for v in values) if n is not None]

        numeric: NumericStats | None = None
        if len(numbers) * 2 > len(values):
            s = calculate_stats(numbers)
            numeric = NumericStats(
                min=s.min,
                max=s.max,
                mean=s.mean,
                median=s.median,
                std_dev=s.std_dev,
                percentiles=Percentiles(p25=s.p25, p50=s.p50, p75=s.p75, p95=s.p95, p99=s.p99),
            )

        out[name] = FieldStatResult(
            field=name,
            count=len(values),
            unique_count=len(distribution),
            distribution=distribution,
            numeric=numeric,
        )
    return out

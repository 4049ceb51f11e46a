from __future__ import annotations

import math
from collections.abc import Callable

import pytest

from mcp_log_analysis_server.core.models import LogEntry
from mcp_log_analysis_server.core.stats import (
    NumericSummary,
    calculate_stats,
    field_stats,
    percentile,
)
from mcp_log_analysis_server.core.values import to_number


def test_calculate_stats_nearest_rank() -> None:
    s = calculate_stats([7, 3, 9, 1, 5, 8, 2, 6, 4])

    assert (s.min, s.max) == (1, 9)
    assert s.mean == 5
    assert s.median == 5
    assert s.std_dev == pytest.approx(math.sqrt(60 / 9))
    assert (s.p25, s.p50, s.p75, s.p95, s.p99) == (3, 5, 7, 9, 9)


def test_percentile_does_not_interpolate() -> None:
    values = [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
    # floor(10 * 0.5) = 5 -> 60, not 55
    assert percentile(values, 0.5) == 60
    assert percentile(values, 0.99) == 100
    assert percentile([], 0.5) == 0.0


def test_calculate_stats_empty_is_zero() -> None:
    assert calculate_stats([]) == NumericSummary()


def test_field_stats_distribution_and_numeric(make_entry: Callable[..., LogEntry]) -> None:
    entries = [
        make_entry(1, status="200", ip="10.0.0.1"),
        make_entry(2, status="200", ip="10.0.0.2"),
        make_entry(3, status="500", ip="10.0.0.1", level="ERROR"),
    ]
    stats = field_stats(entries)

    assert list(stats) == ["status", "ip", "level"]

    status = stats["status"]
    assert status.count == 3
    assert status.unique_count == 2
    assert status.distribution == {"200": 2, "500": 1}
    assert status.numeric is not None
    assert status.numeric.max == 500
    assert status.numeric.percentiles.p50 == 200

    assert stats["ip"].numeric is None
    assert stats["level"].count == 1


def test_numeric_summary_requires_majority(make_entry: Callable[..., LogEntry]) -> None:
    half = [make_entry(1, v="1"), make_entry(2, v="x")]
    majority = [make_entry(1, v="1"), make_entry(2, v="2"), make_entry(3, v="x")]

    assert field_stats(half)["v"].numeric is None
    numeric = field_stats(majority)["v"].numeric
    assert numeric is not None
    assert numeric.mean == 1.5


def test_field_stats_serializes_camel_case(make_entry: Callable[..., LogEntry]) -> None:
    out = field_stats([make_entry(1, duration=100), make_entry(2, duration=300)])["duration"]
    dumped = out.model_dump(by_alias=True)

    assert dumped["uniqueCount"] == 2
    assert dumped["numeric"]["stdDev"] == 100
    assert dumped["distribution"] == {"100": 1, "300": 1}


def test_oversized_integers_are_not_numeric(make_entry: Callable[..., LogEntry]) -> None:
    huge = int("9" * 400)
    assert to_number(huge) is None
    assert to_number(12) == 12.0

    stats = field_stats([make_entry(1, duration=huge), make_entry(2, duration=5), make_entry(3, duration=7)])
    numeric = stats["duration"].numeric
    assert numeric is not None
    assert numeric.max == 7

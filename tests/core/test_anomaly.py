from __future__ import annotations

from collections.abc import Callable

import pytest

from mcp_log_analysis_server.core.anomaly import detect_anomalies, detect_traffic_spikes
from mcp_log_analysis_server.core.formats import get_format
from mcp_log_analysis_server.core.models import AnomalyConfig, LogEntry, Severity

NGINX = get_format("nginx")
JSON = get_format("json")


def _status_batch(make_entry: Callable[..., LogEntry], errors: int, total: int = 100) -> list[LogEntry]:
    return [
        make_entry(i + 1, status="500" if i < errors else "200", ip=f"10.0.{i // 250}.{i % 250}")
        for i in range(total)
    ]


def test_error_rate_above_five_percent(make_entry: Callable[..., LogEntry]) -> None:
    out = detect_anomalies(_status_batch(make_entry, 6), AnomalyConfig(), NGINX)

    assert len(out) == 1
    a = out[0]
    assert a.type == "high_error_rate"
    assert a.severity is Severity.HIGH
    assert a.field == "status"
    assert a.observed_value == 500
    assert a.confidence == pytest.approx(0.6)
    assert a.description == "6.0% of requests returned 500 status"
    assert a.line_number == 1


def test_error_rate_at_five_percent_is_normal(make_entry: Callable[..., LogEntry]) -> None:
    assert detect_anomalies(_status_batch(make_entry, 5), AnomalyConfig(), NGINX) == []


def test_disabled_or_too_few_samples(make_entry: Callable[..., LogEntry]) -> None:
    batch = _status_batch(make_entry, 50)

    assert detect_anomalies(batch, AnomalyConfig(enabled=False), NGINX) == []
    assert detect_anomalies(batch[:9], AnomalyConfig(min_samples=10), NGINX) == []


def test_error_level_share(make_entry: Callable[..., LogEntry]) -> None:
    levels = ["error", "ERROR", "Error"] + ["INFO"] * 17
    entries = [make_entry(i + 1, level=lv) for i, lv in enumerate(levels)]
    out = detect_anomalies(entries, AnomalyConfig(), JSON)

    assert [a.type for a in out] == ["high_error_logs"]
    assert out[0].observed_value == "ERROR"
    assert out[0].confidence == pytest.approx(0.75)
    assert out[0].description == "15.0% of logs are ERROR level"


def test_slow_response_above_twice_p95(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(i + 1, duration=100) for i in range(39)]
    entries.append(make_entry(40, duration=5000))
    out = detect_anomalies(entries, AnomalyConfig(), JSON)

    assert len(out) == 1
    a = out[0]
    assert a.type == "slow_response"
    assert a.severity is Severity.MEDIUM
    assert a.observed_value == 5000
    assert a.expected_value == 100
    assert a.confidence == 1.0
    assert a.line_number == 40
    assert a.description == "Response time 5000ms exceeds threshold 200ms"


def test_dominant_ip(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(i + 1, ip="10.0.0.1" if i < 8 else f"10.0.1.{i}") for i in range(20)]
    out = detect_anomalies(entries, AnomalyConfig(), NGINX)

    assert [a.type for a in out] == ["high_traffic_ip"]
    assert out[0].severity is Severity.LOW
    assert out[0].observed_value == "10.0.0.1"
    assert out[0].confidence == pytest.approx(0.8)
    assert out[0].description == "IP 10.0.0.1 accounts for 40.0% of traffic"


def test_dominant_ip_needs_more_than_ten_samples(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(i + 1, ip="10.0.0.1") for i in range(10)]
    assert detect_anomalies(entries, AnomalyConfig(), NGINX) == []


def test_low_min_samples_lowers_ip_floor(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(i + 1, ip="10.0.0.1", status="500") for i in range(2)]
    out = detect_anomalies(entries, AnomalyConfig(min_samples=2), NGINX)

    assert {a.type for a in out} == {"high_error_rate", "high_traffic_ip"}
    assert all(a.confidence == 1.0 for a in out)


def test_syslog_critical_severity(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(i + 1, priority="27" if i < 2 else "30") for i in range(10)]
    out = detect_anomalies(entries, AnomalyConfig(), get_format("syslog"))

    assert [a.type for a in out] == ["high_severity_syslog"]
    assert out[0].observed_value == 3
    assert out[0].confidence == 1.0


def test_traffic_spike_in_one_window(make_entry: Callable[..., LogEntry]) -> None:
    entries: list[LogEntry] = []
    for window in range(10):
        for _ in range(10 if window == 4 else 2):
            entries.append(make_entry(len(entries) + 1, minute=window * 5 + 1))

    spikes = detect_traffic_spikes(entries, 5)

    assert len(spikes) == 1
    s = spikes[0]
    assert s.type == "traffic_spike"
    assert s.observed_value == 10
    assert s.expected_value == 10
    assert s.confidence == pytest.approx(1 / 3)
    assert s.timestamp == "2023-12-10T10:20:00.000Z"
    assert s.line_number == 9
    assert s.description == "Traffic spike: 10 requests in 5min window"


def test_spikes_need_four_windows(make_entry: Callable[..., LogEntry]) -> None:
    entries = [make_entry(1, minute=1)] + [make_entry(i + 2, minute=6) for i in range(20)]
    assert detect_traffic_spikes(entries, 5) == []


def test_results_sorted_by_confidence(make_entry: Callable[..., LogEntry]) -> None:
    # 500 at 6% (0.6) and one IP at 35% (0.7)
    entries = [
        make_entry(i + 1, status="500" if i < 6 else "200", ip="10.0.0.1" if i < 35 else f"10.0.1.{i}")
        for i in range(100)
    ]
    out = detect_anomalies(entries, AnomalyConfig(), NGINX)

    assert [a.type for a in out] == ["high_traffic_ip", "high_error_rate"]
    assert [a.confidence for a in out] == sorted((a.confidence for a in out), reverse=True)

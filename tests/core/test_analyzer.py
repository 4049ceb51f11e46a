from __future__ import annotations

import json
import logging
from collections.abc import Callable

import pytest

from mcp_log_analysis_server.core.analyzer import (
    MAX_ENTRIES,
    MAX_ERRORS,
    get_log_formats,
    process_log_parser,
    run_analysis,
)
from mcp_log_analysis_server.core.config import TEXT_LIMIT_ENV

TWO_ERRORS = (
    '192.168.1.1 - - [10/Dec/2023:10:15:32 +0000] "GET /x HTTP/1.1" 500 10 "-" "UA"\n'
    '192.168.1.1 - - [10/Dec/2023:10:15:33 +0000] "GET /x HTTP/1.1" 500 12 "-" "UA"'
)


def _envelope(logs: str, **config: object) -> str:
    return json.dumps({"logs": logs, "config": config})


def test_two_line_batch_with_low_min_samples() -> None:
    report = run_analysis(_envelope(TWO_ERRORS, minSamples=2))

    assert report["summary"]["parsedLines"] == 2
    assert report["summary"]["totalLines"] == 2
    assert report["summary"]["errorLines"] == 0

    by_type = {a["type"]: a for a in report["anomalies"]}
    assert set(by_type) == {"high_traffic_ip", "high_error_rate"}
    assert by_type["high_traffic_ip"]["observedValue"] == "192.168.1.1"
    assert by_type["high_traffic_ip"]["description"] == "IP 192.168.1.1 accounts for 100.0% of traffic"
    assert by_type["high_traffic_ip"]["confidence"] == 1.0
    assert by_type["high_error_rate"]["observedValue"] == 500
    assert by_type["high_error_rate"]["description"] == "100.0% of requests returned 500 status"
    assert by_type["high_error_rate"]["timestamp"] == "2023-12-10T10:15:32.000Z"
    assert report["summary"]["anomaliesDetected"] == 2

    entry = report["entries"][0]
    assert entry["lineNumber"] == 1
    assert entry["status"] == "500"
    assert entry["parsedTimestamp"] == "2023-12-10T10:15:32.000Z"
    assert entry["originalLine"].startswith("192.168.1.1 - - ")

    assert report["timeAnalysis"]["durationLabel"] == "1s"
    assert report["config"]["anomalyDetection"]["minSamples"] == 2


def test_plain_text_uses_defaults() -> None:
    report = run_analysis(TWO_ERRORS)

    assert report["summary"]["format"] == "nginx"
    assert report["summary"]["parsedLines"] == 2
    # Below the default minimum of 10 samples.
    assert report["anomalies"] == []
    assert report["config"] == {
        "format": "nginx",
        "filters": [],
        "maxLines": 100,
        "customPattern": None,
        "anomalyDetection": {"enabled": True, "sensitivity": "medium", "timeWindow": 5, "minSamples": 10},
    }


def test_output_is_deterministic() -> None:
    request = _envelope(TWO_ERRORS, minSamples=2)
    assert json.dumps(run_analysis(request)) == json.dumps(run_analysis(request))


def test_field_stats_and_summary_fields() -> None:
    report = run_analysis(TWO_ERRORS)

    assert report["summary"]["fields"][:3] == ["ip", "ident", "timestamp"]
    stats = report["fieldStats"]["bytes"]
    assert stats["count"] == 2
    assert stats["uniqueCount"] == 2
    assert stats["numeric"]["mean"] == 11


@pytest.mark.parametrize("text", ["", "   \n  "])
def test_empty_input(text: str) -> None:
    assert run_analysis(text) == {"error": "Input cannot be empty"}


def test_size_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    out = run_analysis(TWO_ERRORS, text_limit=10)
    assert list(out) == ["error"]
    assert out["error"].startswith("Input exceeds size limit of ")

    monkeypatch.setenv(TEXT_LIMIT_ENV, "1048576")
    assert run_analysis("x" * 1048577) == {"error": "Input exceeds size limit of 1MB"}


def test_bad_limit_setting_is_processing_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TEXT_LIMIT_ENV, "lots")
    out = run_analysis(TWO_ERRORS)

    assert out["error"].startswith("Processing error: ")
    assert TEXT_LIMIT_ENV in out["error"]


def test_unsupported_format() -> None:
    out = run_analysis(_envelope(TWO_ERRORS, format="xml"))

    assert out == {
        "error": "Unsupported log format: xml",
        "supportedFormats": ["nginx", "apache", "json", "syslog", "custom"],
    }


def test_invalid_config_is_processing_error() -> None:
    out = run_analysis(_envelope(TWO_ERRORS, maxLines=-1))
    assert out["error"].startswith("Processing error: ")


def test_falsy_config_values_fall_back() -> None:
    report = run_analysis(_envelope(TWO_ERRORS, format="", maxLines=0, minSamples=0))

    assert report["config"]["format"] == "nginx"
    assert report["config"]["maxLines"] == 100
    assert report["config"]["anomalyDetection"]["minSamples"] == 10


def test_envelope_without_logs_is_plain_text() -> None:
    text = json.dumps({"config": {"format": "json"}})
    report = run_analysis(text)

    assert report["summary"]["format"] == "nginx"
    assert report["summary"]["errorLines"] == 1


def test_max_lines_truncates_before_parsing(nginx_line: Callable[..., str]) -> None:
    logs = "\n".join(nginx_line(ip=f"10.0.0.{i}") for i in range(5))
    report = run_analysis(_envelope(logs, maxLines=3))

    assert report["summary"]["totalLines"] == 3
    assert [e["ip"] for e in report["entries"]] == ["10.0.0.0", "10.0.0.1", "10.0.0.2"]


def test_report_lists_are_capped(nginx_line: Callable[..., str]) -> None:
    lines = [nginx_line(ip=f"10.0.{i // 200}.{i % 200}") for i in range(60)] + ["bad"] * 15
    report = run_analysis(_envelope("\n".join(lines), maxLines=200))

    assert report["summary"]["parsedLines"] == 60
    assert report["summary"]["errorLines"] == 15
    assert len(report["entries"]) == MAX_ENTRIES
    assert len(report["errors"]) == MAX_ERRORS
    assert report["summary"]["totalLines"] == report["summary"]["parsedLines"] + report["summary"]["errorLines"]


def test_filters_reduce_analyzed_entries(nginx_line: Callable[..., str]) -> None:
    logs = "\n".join([nginx_line(status=200), nginx_line(status=503), nginx_line(status=404)])
    report = run_analysis(
        _envelope(logs, filters=[{"field": "status", "operator": "gte", "value": 500}])
    )

    assert report["summary"]["parsedLines"] == 3
    assert report["summary"]["filteredLines"] == 1
    assert report["entries"][0]["status"] == "503"
    assert report["config"]["filters"] == [{"field": "status", "operator": "gte", "value": 500}]


def test_bad_custom_regex_is_reported_per_line() -> None:
    report = run_analysis(_envelope("a\nb", format="custom", customPattern="([a-z"))

    assert report["summary"]["parsedLines"] == 0
    assert report["summary"]["errorLines"] == 2
    assert all("Invalid regex pattern" in e for e in report["errors"])


def test_json_batch_with_correlations(json_line: Callable[..., str]) -> None:
    logs = "\n".join(
        [
            json_line(timestamp="2023-12-10T10:15:32Z", level="INFO", request_id="req-1", status=200),
            json_line(timestamp="2023-12-10T10:15:33Z", level="ERROR", request_id="req-1", status=500),
            json_line(timestamp="2023-12-10T10:16:00Z", level="ERROR", request_id="req-2", status=503),
        ]
    )
    report = run_analysis(_envelope(logs, format="json"))

    types = [c["type"] for c in report["correlations"]]
    assert types == ["request_flow", "error_chain"]
    assert report["summary"]["correlationsFound"] == 2
    assert [e["lineNumber"] for e in report["correlations"][1]["events"]] == [2, 3]


def test_disabled_anomaly_detection(nginx_line: Callable[..., str]) -> None:
    logs = "\n".join(nginx_line(status=500) for _ in range(20))
    report = run_analysis(_envelope(logs, anomalyDetection=False))

    assert report["anomalies"] == []
    assert report["config"]["anomalyDetection"]["enabled"] is False


@pytest.mark.asyncio
async def test_process_log_parser_returns_indented_json() -> None:
    first = await process_log_parser(_envelope(TWO_ERRORS, minSamples=2))
    second = await process_log_parser(_envelope(TWO_ERRORS, minSamples=2))

    assert first == second
    assert first.startswith("{\n  ")
    assert json.loads(first)["summary"]["parsedLines"] == 2


@pytest.mark.asyncio
async def test_get_log_formats() -> None:
    out = json.loads(await get_log_formats())
    assert [f["id"] for f in out["formats"]] == ["nginx", "apache", "json", "syslog", "custom"]


def test_oversized_json_number_does_not_fail_batch(json_line: Callable[..., str]) -> None:
    huge = "9" * 400
    logs = "\n".join(
        [
            '{"level": "INFO", "duration": ' + huge + "}",
            json_line(level="INFO", duration=120),
            '{"level": "INFO", "duration": ' + "9" * 5000 + "}",
        ]
    )
    report = run_analysis(_envelope(logs, format="json", minSamples=1))

    assert "error" not in report
    assert report["summary"]["parsedLines"] == 2
    assert report["summary"]["errorLines"] == 1
    assert report["fieldStats"]["duration"]["count"] == 2


def test_record_fields_named_like_metadata(caplog: pytest.LogCaptureFixture) -> None:
    logs = '{"level": "INFO", "lineNumber": 99, "originalLine": "spoofed"}'
    with caplog.at_level(logging.DEBUG, logger="mcp_log_analysis_server.core.report"):
        report = run_analysis(_envelope(logs, format="json"))

    entry = report["entries"][0]
    assert entry["lineNumber"] == 1
    assert entry["originalLine"] == logs
    assert "replaced by entry metadata" in caplog.text

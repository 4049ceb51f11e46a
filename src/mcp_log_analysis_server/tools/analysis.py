"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from mcp_log_analysis_server.core.analyzer import log_formats, run_analysis
from mcp_log_analysis_server.core.config import AnalyzerConfig
from mcp_log_analysis_server.tools.files import read_head, resolve_log_path

logger = logging.getLogger(__name__)


def _config_payload(
    *,
    format: str | None,
    custom_pattern: str | None,
    fields: Sequence[str] | None,
    filters: Sequence[dict[str, Any]] | None,
    max_lines: int | None,
    anomaly_detection: bool,
    sensitivity: str | None,
    time_window: int | None,
    min_samples: int | None,
) -> dict[str, Any]:
    """Build the camelCase config object understood by the analyzer."""
    config: dict[str, Any] = {"anomalyDetection": anomaly_detection}
    optional = {
        "format": format,
        "customPattern": custom_pattern,
        "fields": list(fields) if fields else None,
        "filters": list(filters) if filters else None,
        "maxLines": max_lines,
        "sensitivity": sensitivity,
        "timeWindow": time_window,
        "minSamples": min_samples,
    }
    config.update({k: v for k, v in optional.items() if v is not None})
    return config


def analyze_logs_impl(
    *,
    logs: str,
    format: str | None = None,
    custom_pattern: str | None = None,
    fields: Sequence[str] | None = None,
    filters: Sequence[dict[str, Any]] | None = None,
    max_lines: int | None = None,
    anomaly_detection: bool = True,
    sensitivity: str | None = None,
    time_window: int | None = None,
    min_samples: int | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_logs` MCP tool."""
    if not logs or not logs.strip():
        return run_analysis(logs)

    config = _config_payload(
        format=format,
        custom_pattern=custom_pattern,
        fields=fields,
        filters=filters,
        max_lines=max_lines,
        anomaly_detection=anomaly_detection,
        sensitivity=sensitivity,
        time_window=time_window,
        min_samples=min_samples,
    )
    return run_analysis(json.dumps({"logs": logs, "config": config}))


async def analyze_log_file_impl(
    *,
    log_path: str,
    format: str | None = None,
    custom_pattern: str | None = None,
    fields: Sequence[str] | None = None,
    filters: Sequence[dict[str, Any]] | None = None,
    max_lines: int | None = None,
    anomaly_detection: bool = True,
    sensitivity: str | None = None,
    time_window: int | None = None,
    min_samples: int | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_log_file` MCP tool.

    Only the first ``max_lines`` lines of the file are read.
    """
    path = resolve_log_path(log_path)
    effective_max = max_lines or AnalyzerConfig().max_lines
    logs = await read_head(path, effective_max)
    logger.debug("Read %s lines from %s", logs.count("\n") + 1 if logs else 0, path)

    return analyze_logs_impl(
        logs=logs,
        format=format,
        custom_pattern=custom_pattern,
        fields=fields,
        filters=filters,
        max_lines=effective_max,
        anomaly_detection=anomaly_detection,
        sensitivity=sensitivity,
        time_window=time_window,
        min_samples=min_samples,
    )


def list_log_formats_impl() -> dict[str, Any]:
    """Implementation for the `list_log_formats` MCP tool."""
    return log_formats()

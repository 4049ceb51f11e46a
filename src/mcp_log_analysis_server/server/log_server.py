"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (analyze log text or a log file, list formats)
- Resources: addressable data blobs (format catalog, samples, report schema)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_analysis_server.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_analysis_server.prompts.registry import register_prompts
from mcp_log_analysis_server.resources.registry import register_resources
from mcp_log_analysis_server.tools.analysis import (
    analyze_log_file_impl,
    analyze_logs_impl,
    list_log_formats_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("LOG_ANALYSIS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("log-analysis", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
def analyze_logs(
    logs: str,
    format: str | None = None,
    custom_pattern: str | None = None,
    fields: list[str] | None = None,
    filters: list[dict[str, Any]] | None = None,
    max_lines: int | None = None,
    anomaly_detection: bool = True,
    sensitivity: str | None = None,
    time_window: int | None = None,
    min_samples: int | None = None,
) -> dict[str, Any]:
    """Parse a batch of log lines and return statistics, anomalies and correlations.

    Parameters
    ----------
    logs:
        Raw log text, one record per line.
    format:
        nginx (default), apache, json, syslog or custom.
    custom_pattern/fields:
        Regex and group names, required when format is custom.
    filters:
        Field predicates applied as AND, e.g.
        [{"field": "status", "operator": "gte", "value": 500}].
        Operators: equals, contains, regex, gt, lt, gte, lte.
    max_lines:
        Only the first N lines are analyzed (default 100).
    anomaly_detection/sensitivity/time_window/min_samples:
        Anomaly settings; detection is skipped below min_samples entries.

    Returns
    -------
    dict:
        The analysis report, or {"error": ...}.
    """
    return analyze_logs_impl(
        logs=logs,
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


@mcp.tool()
async def analyze_log_file(
    log_path: str,
    format: str | None = None,
    custom_pattern: str | None = None,
    fields: list[str] | None = None,
    filters: list[dict[str, Any]] | None = None,
    max_lines: int | None = None,
    anomaly_detection: bool = True,
    sensitivity: str | None = None,
    time_window: int | None = None,
    min_samples: int | None = None,
) -> dict[str, Any]:
    """Analyze the first lines of a log file under LOG_ANALYSIS_BASE_DIR.

    Same parameters as analyze_logs, with log_path instead of logs.
    Supports .log, .txt and .jsonl files, plain or .gz.
    """
    return await analyze_log_file_impl(
        log_path=log_path,
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


@mcp.tool()
def list_log_formats() -> dict[str, Any]:
    """List supported log formats with their fields and an example line."""
    return list_log_formats_impl()


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

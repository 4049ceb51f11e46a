"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_analysis_server.core.analyzer import log_formats
from mcp_log_analysis_server.core.formats import UnsupportedFormatError, get_format
from mcp_log_analysis_server.core.report import AnalysisReport
from mcp_log_analysis_server.tools.files import ALLOWED_FILE_SUFFIXES, BASE_DIR_ENV, base_dir

SAMPLE_LOGS: dict[str, str] = {
    "nginx": (
        '192.168.1.100 - - [10/Dec/2023:10:15:32 +0000] "GET /api/users HTTP/1.1" 200 1024 "-" "Mozilla/5.0"\n'
        '192.168.1.101 - - [10/Dec/2023:10:15:33 +0000] "POST /api/users HTTP/1.1" 201 256 "-" "curl/7.68.0"\n'
        '192.168.1.102 - - [10/Dec/2023:10:15:34 +0000] "GET /api/users/123 HTTP/1.1" 404 128 "-" "PostmanRuntime/7.29.2"\n'
        '192.168.1.103 - - [10/Dec/2023:10:15:35 +0000] "GET /api/users HTTP/1.1" 500 64 "-" "Mozilla/5.0"\n'
        '192.168.1.104 - - [10/Dec/2023:10:16:00 +0000] "GET /api/users HTTP/1.1" 503 32 "-" "Mozilla/5.0"\n'
        '192.168.1.105 - - [10/Dec/2023:10:16:05 +0000] "GET /api/users HTTP/1.1" 200 1024 "-" "Mozilla/5.0"\n'
        '192.168.1.106 - - [10/Dec/2023:10:16:10 +0000] "GET /api/users HTTP/1.1" 200 1024 "-" "Mozilla/5.0"\n'
        '192.168.1.107 - - [10/Dec/2023:10:16:15 +0000] "GET /api/users HTTP/1.1" 502 128 "-" "Mozilla/5.0"\n'
        '192.168.1.108 - - [10/Dec/2023:10:16:20 +0000] "GET /api/users HTTP/1.1" 504 128 "-" "Mozilla/5.0"\n'
        '192.168.1.109 - - [10/Dec/2023:10:16:25 +0000] "GET /api/users HTTP/1.1" 200 1024 "-" "Mozilla/5.0"\n'
    ),
    "apache": (
        '192.168.1.100 - john [10/Dec/2023:10:15:32 +0000] "GET /api/users HTTP/1.1" 200 1024 "-" "Mozilla/5.0"\n'
        '192.168.1.101 - alice [10/Dec/2023:10:15:33 +0000] "POST /api/users HTTP/1.1" 201 256 "-" "curl/7.68.0"\n'
        '192.168.1.102 - bob [10/Dec/2023:10:15:34 +0000] "GET /api/users/123 HTTP/1.1" 404 128 "-" "PostmanRuntime/7.29.2"\n'
        '192.168.1.103 - john [10/Dec/2023:10:15:35 +0000] "GET /api/users HTTP/1.1" 500 64 "-" "Mozilla/5.0"\n'
        '192.168.1.104 - alice [10/Dec/2023:10:16:00 +0000] "GET /api/users HTTP/1.1" 503 32 "-" "Mozilla/5.0"\n'
    ),
    "json": (
        '{"timestamp":"2023-12-10T10:15:32Z","level":"INFO","message":"User login successful","service":"auth","request_id":"req-123","user_id":"user-456","duration":150,"status":200}\n'
        '{"timestamp":"2023-12-10T10:15:33Z","level":"INFO","message":"User created","service":"auth","request_id":"req-124","user_id":"user-457","duration":200,"status":201}\n'
        '{"timestamp":"2023-12-10T10:15:34Z","level":"ERROR","message":"User not found","service":"auth","request_id":"req-125","user_id":"user-999","duration":50,"status":404}\n'
        '{"timestamp":"2023-12-10T10:15:35Z","level":"WARN","message":"Rate limit exceeded","service":"api","request_id":"req-126","user_id":"user-456","duration":10,"status":429}\n'
    ),
    "syslog": (
        "<30>Dec 10 10:15:32 web-server User login: user123 from 192.168.1.100\n"
        "<30>Dec 10 10:15:33 web-server User created: user124\n"
        "<27>Dec 10 10:15:34 web-server ERROR: User not found: user999\n"
        "<28>Dec 10 10:15:35 web-server WARN: Rate limit exceeded for user123\n"
        "<30>Dec 10 10:16:00 web-server User login: user124 from 192.168.1.101\n"
    ),
    "custom": (
        "INFO 2023-12-10T10:15:32Z User login successful user123\n"
        "INFO 2023-12-10T10:15:33Z User created user124\n"
        "ERROR 2023-12-10T10:15:34Z User not found user999\n"
        "WARN 2023-12-10T10:15:35Z Rate limit exceeded user123\n"
        "INFO 2023-12-10T10:16:00Z User login successful user124\n"
    ),
}

# Pattern/fields that parse the custom sample above.
SAMPLE_CUSTOM_PATTERN = r"^(\w+) (\S+) (.+)$"
SAMPLE_CUSTOM_FIELDS = ("level", "timestamp", "message")


def sample_log(format_id: str) -> str:
    """Return the sample batch for a supported format."""
    fmt = get_format(format_id)
    return SAMPLE_LOGS[fmt.id]


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-analysis/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        formats = ", ".join(SAMPLE_LOGS)
        return (
            "Resources:\n"
            "- app://log-analysis/help\n"
            "- app://log-analysis/formats\n"
            "- app://log-analysis/schemas/report\n"
            f"- app://log-analysis/examples/{{format}} (format: {formats})\n"
            f"\nTool analyze_log_file reads files under {BASE_DIR_ENV} "
            f"(allowed: {allowed}, optionally .gz).\n"
            f"Base directory: {base_dir()}\n"
            f"\nCustom sample pattern: {SAMPLE_CUSTOM_PATTERN} "
            f"fields: {', '.join(SAMPLE_CUSTOM_FIELDS)}\n"
        )

    @mcp.resource("app://log-analysis/formats")
    def formats_resource() -> dict[str, Any]:
        """Return supported formats with fields and example lines."""
        return log_formats()

    @mcp.resource("app://log-analysis/schemas/report")
    def report_schema() -> dict[str, Any]:
        """Return the JSON schema of analysis reports."""
        return AnalysisReport.model_json_schema(by_alias=True, mode="serialization")

    @mcp.resource("app://log-analysis/examples/{format_id}")
    def example_logs(format_id: str) -> str:
        """Return a small sample batch for a format."""
        try:
            return sample_log(format_id)
        except UnsupportedFormatError as e:
            raise ValueError(f"{e}. Supported: {', '.join(e.supported_formats)}") from e

"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP


def _format_fields(fields: Sequence[str] | str | None) -> str:
    """Return fields as a JSON array literal for prompt display."""
    if not fields:
        return "[]"
    if isinstance(fields, str):
        items = [s.strip() for s in fields.split(",") if s.strip()]
    else:
        items = [str(s).strip() for s in fields if str(s).strip()]
    quoted = ", ".join(f'"{item}"' for item in items)
    return f"[{quoted}]"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def investigate_log_file(
        log_path: str,
        format: str = "nginx",
        max_lines: int = 100,
        min_samples: int = 10,
        custom_pattern: str | None = None,
        fields: Sequence[str] | str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt that analyzes a log file and explains the findings."""
        args = [
            f'- log_path: "{log_path}"',
            f'- format: "{format}"',
            f"- max_lines: {max_lines}",
            f"- min_samples: {min_samples}",
        ]
        if custom_pattern:
            args.append(f'- custom_pattern: "{custom_pattern}"')
            args.append(f"- fields: {_format_fields(fields)}")

        return [
            {
                "role": "system",
                "content": (
                    "You are a log analysis assistant. Use only the report returned by the "
                    "analyze_log_file tool as evidence. Reference line numbers from the report."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Call the analyze_log_file tool with:\n"
                    + "\n".join(args)
                    + "\n\nThen:\n"
                    "1. Summarize parsed vs failed lines and list parse errors if any.\n"
                    "2. Explain each anomaly (type, severity, confidence) in one sentence.\n"
                    "3. Describe request flows and error chains and what they suggest.\n"
                    "4. Describe the activity pattern and spikes from timeAnalysis.\n"
                    "5. Recommend the next debugging step."
                ),
            },
        ]

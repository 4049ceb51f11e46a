from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from mcp_log_analysis_server.core.analyzer import run_analysis
from mcp_log_analysis_server.core.config import DEFAULT_MAX_LINES
from mcp_log_analysis_server.core.formats import supported_formats
from mcp_log_analysis_server.core.models import FilterOperator, Sensitivity
from mcp_log_analysis_server.tools.files import read_head

_OPERATORS = [op.value for op in FilterOperator]


def _parse_filter(s: str) -> dict[str, str]:
    """Parse FIELD:OPERATOR:VALUE (the value may contain ':')."""
    parts = s.split(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise argparse.ArgumentTypeError("filter must look like FIELD:OPERATOR:VALUE (e.g., status:gte:500)")
    field, op, value = parts
    if op not in _OPERATORS:
        raise argparse.ArgumentTypeError(f"Invalid operator. Allowed: {', '.join(_OPERATORS)}")
    return {"field": field, "operator": op, "value": value}


def _read_input(log_path: str, max_lines: int) -> str:
    if log_path == "-":
        lines = sys.stdin.read().split("\n")
        return "\n".join(lines[:max_lines])
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    return asyncio.run(read_head(path, max_lines))


def _build_config(args: argparse.Namespace) -> dict[str, Any]:
    config: dict[str, Any] = {
        "format": args.format,
        "maxLines": args.max_lines,
        "anomalyDetection": not args.no_anomalies,
        "sensitivity": args.sensitivity,
        "timeWindow": args.time_window,
        "minSamples": args.min_samples,
        "filters": args.filters,
    }
    if args.pattern:
        config["customPattern"] = args.pattern
    if args.fields:
        config["fields"] = args.fields
    return config


def main() -> None:
    """CLI entrypoint: analyze a log file (or stdin) and print the JSON report."""
    p = argparse.ArgumentParser(description="Log analysis (parse, stats, anomalies, correlations).")
    p.add_argument("log_path", help="Log file path, or - for stdin")
    p.add_argument("--format", choices=supported_formats(), default="nginx")
    p.add_argument("--pattern", default=None, help="Regex for --format custom")
    p.add_argument("--field", dest="fields", action="append", default=[], help="Field name per regex group (repeatable)")
    p.add_argument(
        "--filter",
        dest="filters",
        type=_parse_filter,
        action="append",
        default=[],
        help="FIELD:OPERATOR:VALUE, repeatable; all filters must match",
    )
    p.add_argument("--max-lines", type=int, default=DEFAULT_MAX_LINES, help="Lines analyzed (default: 100)")
    p.add_argument("--no-anomalies", action="store_true", help="Disable anomaly detection")
    p.add_argument("--sensitivity", choices=[s.value for s in Sensitivity], default="medium")
    p.add_argument("--time-window", type=int, default=5, help="Spike window in minutes")
    p.add_argument("--min-samples", type=int, default=10, help="Entries required before detecting anomalies")

    args = p.parse_args()
    if args.max_lines < 1:
        p.error("--max-lines must be >= 1")

    try:
        logs = _read_input(args.log_path, args.max_lines)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)

    if logs.strip():
        report = run_analysis(json.dumps({"logs": logs, "config": _build_config(args)}))
    else:
        report = run_analysis(logs)
    if "error" in report:
        print(f"Error: {report['error']}", file=sys.stderr)
        raise SystemExit(2)

    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()

"""Log analysis pipeline.

This module is the main integration point: it turns one request (raw log text
or a JSON envelope) into one report. Stages run in a fixed order on an
in-memory batch:

    parse -> filter -> field statistics -> anomalies -> correlations -> time analysis

The public entry points never raise; failures come back as ``{"error": ...}``
objects.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .anomaly import detect_anomalies
from .config import (
    AnalyzerConfig,
    InputValidationError,
    parse_request,
    resolve_text_limit,
    validate_input,
)
from .correlation import analyze_correlations
from .filters import apply_filters
from .formats import UnsupportedFormatError, format_catalog, get_format
from .parsing import parse_lines
from .report import (
    AnalysisReport,
    AnomalyDetectionSettings,
    ReportConfig,
    ReportSummary,
)
from .stats import field_stats
from .time_patterns import analyze_time_patterns

logger = logging.getLogger(__name__)

MAX_ANOMALIES = 20
MAX_CORRELATIONS = 10
MAX_ENTRIES = 50
MAX_ERRORS = 10


def analyze(logs: str, config: AnalyzerConfig) -> AnalysisReport:
    """Run the full pipeline over the first ``config.max_lines`` lines of ``logs``."""
    fmt = get_format(config.format)
    lines = logs.split("\n")[: config.max_lines]

    parsed = parse_lines(
        lines,
        fmt,
        custom_pattern=config.custom_pattern,
        fields=config.fields,
    )
    filtered = apply_filters(parsed.entries, config.predicates())
    stats = field_stats(filtered)
    anomalies = detect_anomalies(filtered, config.anomaly_config(), fmt)
    correlations = analyze_correlations(filtered)
    time_analysis = analyze_time_patterns(filtered)

    logger.debug(
        "Analysis done: format=%s parsed=%s filtered=%s anomalies=%s correlations=%s",
        fmt.id,
        len(parsed.entries),
        len(filtered),
        len(anomalies),
        len(correlations),
    )

    return AnalysisReport(
        summary=ReportSummary(
            total_lines=parsed.total_lines,
            parsed_lines=len(parsed.entries),
            filtered_lines=len(filtered),
            error_lines=len(parsed.errors),
            format=fmt.id,
            fields=list(stats),
            anomalies_detected=len(anomalies),
            correlations_found=len(correlations),
        ),
        field_stats=stats,
        time_analysis=time_analysis,
        anomalies=anomalies[:MAX_ANOMALIES],
        correlations=correlations[:MAX_CORRELATIONS],
        entries=filtered[:MAX_ENTRIES],
        errors=parsed.errors[:MAX_ERRORS],
        config=ReportConfig(
            format=fmt.id,
            filters=[f.model_dump(mode="json") for f in config.filters],
            max_lines=config.max_lines,
            custom_pattern=config.custom_pattern,
            anomaly_detection=AnomalyDetectionSettings(
                enabled=config.anomaly_detection,
                sensitivity=config.sensitivity.value,
                time_window=config.time_window,
                min_samples=config.min_samples,
            ),
        ),
    )


def run_analysis(input_text: str, *, text_limit: int | None = None) -> dict[str, Any]:
    """Analyze one request and return the report (or an error object) as a dict."""
    try:
        validate_input(input_text, resolve_text_limit(text_limit))
        request = parse_request(input_text)
        return analyze(request.logs, request.config).to_dict()
    except InputValidationError as e:
        return {"error": str(e)}
    except UnsupportedFormatError as e:
        return {"error": str(e), "supportedFormats": e.supported_formats}
    except Exception as e:
        logger.exception("Log analysis failed")
        return {"error": f"Processing error: {e}"}


async def process_log_parser(input_text: str) -> str:
    """Analyze one request and return the report as indented JSON.

    Declared async to match sibling tools; nothing here awaits.
    """
    return json.dumps(run_analysis(input_text), indent=2)


def log_formats() -> dict[str, Any]:
    """Return the format catalog wrapped as {"formats": [...]}."""
    return {"formats": format_catalog()}


async def get_log_formats() -> str:
    """List supported formats as indented JSON."""
    return json.dumps(log_formats(), indent=2)

"""Batch line parsing.

Chooses the parser for a format and turns a batch of raw lines into entries
plus per-line errors. A line that does not parse never stops the batch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from .formats import (
    FormatDefinition,
    JsonLinesParser,
    LogParser,
    RegexLineParser,
    custom_format,
)
from .models import LogEntry, ParseResult

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 100


def parser_for(
    fmt: FormatDefinition,
    *,
    custom_pattern: str | None = None,
    fields: Sequence[str] = (),
) -> LogParser | None:
    """Return the parser for ``fmt``, or None when nothing can parse it.

    Raises ``re.error`` when a custom pattern does not compile.
    """
    if fmt.id == "json":
        return JsonLinesParser()
    if fmt.id == "custom":
        if not custom_pattern:
            return None
        custom = custom_format(re.compile(custom_pattern), fields)
        return RegexLineParser(pattern=custom.pattern, fields=custom.fields)
    if fmt.pattern is not None:
        return RegexLineParser(pattern=fmt.pattern, fields=fmt.fields)
    return None


def parse_lines(
    lines: Sequence[str],
    fmt: FormatDefinition,
    *,
    custom_pattern: str | None = None,
    fields: Sequence[str] = (),
) -> ParseResult:
    """Parse a batch of lines; line numbers are 1-based positions in ``lines``."""
    pattern_error: str | None = None
    parser: LogParser | None = None
    try:
        parser = parser_for(fmt, custom_pattern=custom_pattern, fields=fields)
    except re.error as e:
        logger.warning("Invalid custom pattern %r: %s", custom_pattern, e)
        pattern_error = str(e)

    entries: list[LogEntry] = []
    errors: list[str] = []
    total = 0

    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        total += 1

        if pattern_error is not None:
            errors.append(f"Line {line_no}: Invalid regex pattern - {pattern_error}")
            continue

        entry = parser.parse(line_no, line) if parser is not None else None
        if entry is None:
            errors.append(f"Line {line_no}: Failed to parse - {line[:SNIPPET_CHARS]}...")
            continue
        entries.append(entry)

    logger.debug("Parsed %s/%s lines as %s", len(entries), total, fmt.id)
    return ParseResult(entries=entries, errors=errors, total_lines=total)

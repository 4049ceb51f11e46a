"""Log format catalog and line parsers."""

from __future__ import annotations

from .base import (
    AnomalyFieldConfig,
    DurationField,
    FormatDefinition,
    HttpStatusField,
    IPAddressField,
    LogLevelField,
    LogParser,
    SyslogPriorityField,
)
from .jsonl import JsonLinesParser
from .regex import RegexLineParser
from .registry import (
    DEFAULT_FORMAT,
    LOG_FORMATS,
    UnsupportedFormatError,
    custom_format,
    format_catalog,
    get_format,
    supported_formats,
)

__all__ = [
    "DEFAULT_FORMAT",
    "LOG_FORMATS",
    "AnomalyFieldConfig",
    "DurationField",
    "FormatDefinition",
    "HttpStatusField",
    "IPAddressField",
    "JsonLinesParser",
    "LogLevelField",
    "LogParser",
    "RegexLineParser",
    "SyslogPriorityField",
    "UnsupportedFormatError",
    "custom_format",
    "format_catalog",
    "get_format",
    "supported_formats",
]

"""Request configuration and process settings.

A request is either raw log text or a JSON envelope ``{"logs": ..., "config":
{...}}``. Config keys are camelCase; missing or falsy values fall back to the
defaults below.
"""

from __future__ import annotations

import json
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from .formats import DEFAULT_FORMAT
from .models import AnomalyConfig, FilterOperator, FilterPredicate, Sensitivity
from .values import value_text

DEFAULT_MAX_LINES = 100
DEFAULT_TIME_WINDOW = 5
DEFAULT_MIN_SAMPLES = 10
TEXT_SIZE_LIMIT = 10 * 1024 * 1024
TEXT_LIMIT_ENV = "LOG_ANALYSIS_TEXT_LIMIT"


class InputValidationError(ValueError):
    """Raised for input that cannot be analyzed at all (empty or too large)."""


class FilterSpec(BaseModel):
    field: str
    operator: FilterOperator
    value: str | int | float

    def to_predicate(self) -> FilterPredicate:
        """Convert to a predicate; numeric values become their text form."""
        return FilterPredicate(field=self.field, operator=self.operator, value=value_text(self.value))


class AnalyzerConfig(BaseModel):
    """Caller configuration for one analysis run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    format: str = DEFAULT_FORMAT
    custom_pattern: str | None = None
    fields: list[str] = Field(default_factory=list)
    filters: list[FilterSpec] = Field(default_factory=list)
    max_lines: int = Field(default=DEFAULT_MAX_LINES, ge=1)
    anomaly_detection: bool = True
    sensitivity: Sensitivity = Sensitivity.MEDIUM
    time_window: int = Field(default=DEFAULT_TIME_WINDOW, ge=1)
    min_samples: int = Field(default=DEFAULT_MIN_SAMPLES, ge=1)

    @field_validator(
        "format",
        "custom_pattern",
        "fields",
        "filters",
        "max_lines",
        "sensitivity",
        "time_window",
        "min_samples",
        mode="before",
    )
    @classmethod
    def _falsy_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or v == "" or v == 0 or v == []:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v

    @field_validator("anomaly_detection", mode="before")
    @classmethod
    def _enabled_unless_false(cls, v: Any) -> bool:
        return v is not False

    def anomaly_config(self) -> AnomalyConfig:
        """Return the anomaly detection settings of this run."""
        return AnomalyConfig(
            enabled=self.anomaly_detection,
            sensitivity=self.sensitivity,
            time_window_minutes=self.time_window,
            min_samples=self.min_samples,
        )

    def predicates(self) -> list[FilterPredicate]:
        """Return the filters as predicates with text values."""
        return [f.to_predicate() for f in self.filters]


class AnalysisRequest(BaseModel):
    logs: str
    config: AnalyzerConfig = Field(default_factory=AnalyzerConfig)

    @field_validator("config", mode="before")
    @classmethod
    def _none_is_default(cls, v: Any) -> Any:
        return {} if v is None else v


def parse_request(input_text: str) -> AnalysisRequest:
    """Split the input into log text and configuration."""
    try:
        payload = json.loads(input_text)
    except json.JSONDecodeError:
        payload = None

    if isinstance(payload, dict) and payload.get("logs"):
        return AnalysisRequest.model_validate(payload)
    return AnalysisRequest(logs=input_text)


def resolve_text_limit(limit: int | None = None) -> int:
    """Return the maximum input length, honouring LOG_ANALYSIS_TEXT_LIMIT."""
    if limit is not None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        return limit

    env = os.getenv(TEXT_LIMIT_ENV)
    if env:
        try:
            value = int(env)
        except ValueError as exc:
            raise ValueError(f"{TEXT_LIMIT_ENV} must be an integer") from exc
        if value < 1:
            raise ValueError(f"{TEXT_LIMIT_ENV} must be >= 1")
        return value

    return TEXT_SIZE_LIMIT


def validate_input(input_text: str, limit: int) -> None:
    """Reject empty input and input longer than ``limit`` characters."""
    if not input_text or not input_text.strip():
        raise InputValidationError("Input cannot be empty")
    if len(input_text) > limit:
        limit_mb = limit / 1024 / 1024
        raise InputValidationError(f"Input exceeds size limit of {limit_mb:g}MB")

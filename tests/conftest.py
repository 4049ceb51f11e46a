from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from mcp_log_analysis_server.core.models import LogEntry

BASE_TIME = datetime(2023, 12, 10, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def nginx_line() -> Callable[..., str]:
    def _line(
        ip: str = "192.168.1.1",
        status: int = 200,
        ts: str = "10/Dec/2023:10:15:32 +0000",
        path: str = "/api/users",
        size: int = 512,
    ) -> str:
        return f'{ip} - - [{ts}] "GET {path} HTTP/1.1" {status} {size} "-" "Mozilla/5.0"'

    return _line


@pytest.fixture
def json_line() -> Callable[..., str]:
    def _line(**fields: Any) -> str:
        return json.dumps(fields)

    return _line


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Build an entry directly; ``minute`` offsets the timestamp from BASE_TIME."""

    def _entry(line_no: int = 1, minute: float | None = None, **fields: Any) -> LogEntry:
        ts = BASE_TIME + timedelta(minutes=minute) if minute is not None else None
        return LogEntry(line_no=line_no, fields=fields, raw=json.dumps(fields), timestamp=ts)

    return _entry


@pytest.fixture
def write_log() -> Callable[[Path, list[str]], None]:
    def _write(path: Path, lines: list[str]) -> None:
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    return _write

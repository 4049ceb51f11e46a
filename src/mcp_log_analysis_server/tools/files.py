"""Sandboxed log-file access for tools and resources.

Paths resolve under ``LOG_ANALYSIS_BASE_DIR`` (default: the working directory)
and must carry an allowed suffix, optionally followed by ``.gz``.
"""

from __future__ import annotations

import gzip
import os
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

ALLOWED_FILE_SUFFIXES = {".log", ".txt", ".jsonl"}
BASE_DIR_ENV = "LOG_ANALYSIS_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"


def base_dir() -> Path:
    """Return the resolved base directory for file access."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def resolve_log_path(path: str) -> Path:
    """Resolve and validate a log file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"Log file not found: {resolved}")
    suffix = _allowed_suffix(resolved)
    if suffix not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


@asynccontextmanager
async def _open_text(path: Path):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        af = wrap(gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS))
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            yield f


async def read_head(path: Path, max_lines: int | None = None) -> str:
    """Read up to ``max_lines`` lines (all lines when None)."""
    if max_lines is not None and max_lines < 1:
        raise ValueError("max_lines must be >= 1")

    lines: list[str] = []
    async with _open_text(path) as f:
        async for line in f:
            lines.append(line.rstrip("\r\n"))
            if max_lines is not None and len(lines) >= max_lines:
                break
    return "\n".join(lines)

"""Write finished reports to Markdown files in a scratch directory."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

from ...logging_config import logger
from ...models import ReportCategory
from ..log_store import write_text_atomic

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")


class ReportWriteError(OSError):
    """Raised when a report file cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write report to {path}: {reason}")
        self.path = path
        self.reason = reason


def report_file_name(kind: ReportCategory, day: date) -> str:
    return f"{day.isoformat()}_{kind.value}_report.md"


def _safe_file_name(suggested: str) -> str:
    name = Path(suggested or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    if not name:
        name = "report"
    if not name.lower().endswith(".md"):
        name = f"{name}.md"
    return name


class ReportWriter:
    """Writes UTF-8 Markdown reports atomically into one directory."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def write(self, text: str, suggested_file_name: str) -> Path:
        path = self._directory / _safe_file_name(suggested_file_name)
        try:
            write_text_atomic(path, text)
        except (OSError, UnicodeEncodeError) as exc:
            logger.error("report write failed", extra={"path": str(path), "error": str(exc)})
            raise ReportWriteError(path, str(exc)) from exc
        logger.info("report written", extra={"path": str(path), "length": len(text)})
        return path


__all__ = ["ReportWriteError", "ReportWriter", "report_file_name"]

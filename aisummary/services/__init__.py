"""Service layer components."""

from .log_store import EntryNotFoundError, LogStore
from .reports import (
    ReportGenerator,
    ReportInProgressError,
    ReportOutcome,
    ReportWriteError,
    ReportWriter,
    SynthesisResult,
    synthesize,
)


__all__ = [
    "EntryNotFoundError",
    "LogStore",
    "ReportGenerator",
    "ReportInProgressError",
    "ReportOutcome",
    "ReportWriteError",
    "ReportWriter",
    "SynthesisResult",
    "synthesize",
]

"""Report synthesis package."""

from .generator import (
    ReportGenerator,
    ReportInProgressError,
    ReportOutcome,
    report_window,
    select_entries,
)
from .prompt_builder import PROMPT_VERSION, ReportPrompt, build_report_prompt, format_entry_lines
from .synthesizer import SynthesisFailure, SynthesisResult, clean_report_text, synthesize
from .writer import ReportWriteError, ReportWriter, report_file_name

__all__ = [
    "PROMPT_VERSION",
    "ReportGenerator",
    "ReportInProgressError",
    "ReportOutcome",
    "ReportPrompt",
    "ReportWriteError",
    "ReportWriter",
    "SynthesisFailure",
    "SynthesisResult",
    "build_report_prompt",
    "clean_report_text",
    "format_entry_lines",
    "report_file_name",
    "report_window",
    "select_entries",
    "synthesize",
]

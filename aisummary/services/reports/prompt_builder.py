from __future__ import annotations

import re
from dataclasses import dataclass
from textwrap import dedent
from typing import Dict, Iterable, List, Optional

from ...models import LogEntry, ReportCategory
from ...utils.timezones import local_date

PROMPT_VERSION = "2025-02"
DEFAULT_REPORT_LANGUAGE = "Simplified Chinese"

_NEWLINES = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class ReportPrompt:
    kind: ReportCategory
    system_prompt: str
    user_content: str
    entry_count: int
    prompt_version: str = PROMPT_VERSION


_COMMON_RULES = """
RULES:
1. Write the whole report in {language}.
2. Use bullet lists and short paragraphs; keep technical details precise and professional.
3. Only use facts present in the work logs. If a section has nothing to report, write "- None."
4. Output pure Markdown: no preamble, no closing remarks, no code fences around the report.
"""

_TEMPLATES: Dict[ReportCategory, str] = {
    ReportCategory.DAILY: """
    You are a professional work-report assistant. Turn the user's work logs (one line per entry,
    formatted "YYYY-MM-DD: content") into a concise daily summary using exactly this Markdown structure:

    # Daily Summary
    ## Completed Today
    ## Problems & Solutions
    ## Plan for Tomorrow
    """,
    ReportCategory.WEEKLY: """
    You are a professional work-report assistant. Turn the user's work logs (one line per entry,
    formatted "YYYY-MM-DD: content") into a weekly status report using exactly this Markdown structure:

    # <Report title covering the date range of the logs>
    ## Work This Week
    ## Problems & Solutions
    ## Goal Progress
    A Markdown table with the columns: Goal | Progress | Status | Notes
    ## Next Week's Plan
    ## Reflections
    """,
    ReportCategory.ANNUAL: """
    You are a professional work-report assistant. Turn the user's work logs (one line per entry,
    formatted "YYYY-MM-DD: content") into an annual review using exactly this Markdown structure:

    # <Report title covering the year of the logs>
    ## Key Achievements
    ## Major Projects
    ## Problems & Solutions
    ## Goal Progress
    A Markdown table with the columns: Goal | Progress | Status | Notes
    ## Plans for Next Year
    ## Reflections
    """,
}


def system_prompt_for(kind: ReportCategory, language: str = DEFAULT_REPORT_LANGUAGE) -> str:
    template = dedent(_TEMPLATES[kind]).strip()
    rules = dedent(_COMMON_RULES).strip().format(language=language or DEFAULT_REPORT_LANGUAGE)
    return f"{template}\n\n{rules}"


def _flatten(content: str) -> str:
    return _NEWLINES.sub(" ", content)


def format_entry_line(entry: LogEntry, tz_name: Optional[str] = None) -> str:
    day = local_date(entry.date, tz_name).isoformat()
    return f"{day}: {_flatten(entry.content)}"


def format_entry_lines(entries: Iterable[LogEntry], tz_name: Optional[str] = None) -> str:
    """One ``YYYY-MM-DD: content`` line per daily entry, in the given order."""
    lines: List[str] = [
        format_entry_line(entry, tz_name)
        for entry in entries
        if entry.category == ReportCategory.DAILY
    ]
    return "\n".join(lines)


def build_report_prompt(
    entries: Iterable[LogEntry],
    kind: ReportCategory,
    *,
    language: str = DEFAULT_REPORT_LANGUAGE,
    tz_name: Optional[str] = None,
) -> ReportPrompt:
    daily = [entry for entry in entries if entry.category == ReportCategory.DAILY]
    return ReportPrompt(
        kind=kind,
        system_prompt=system_prompt_for(kind, language),
        user_content=format_entry_lines(daily, tz_name),
        entry_count=len(daily),
    )


__all__ = [
    "DEFAULT_REPORT_LANGUAGE",
    "PROMPT_VERSION",
    "ReportPrompt",
    "build_report_prompt",
    "format_entry_line",
    "format_entry_lines",
    "system_prompt_for",
]

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

import httpx
from dateutil.relativedelta import relativedelta

from ...config import Settings
from ...logging_config import logger
from ...models import LogEntry, ReportCategory, ReportMode
from ...utils.timezones import local_date, today
from ..log_store import LogStore
from .prompt_builder import build_report_prompt, format_entry_lines
from .synthesizer import synthesize
from .writer import ReportWriteError, ReportWriter, report_file_name


class ReportInProgressError(RuntimeError):
    """Raised when a report is requested while another one is being generated."""


@dataclass(frozen=True)
class ReportOutcome:
    ok: bool
    kind: ReportCategory
    mode: ReportMode
    message: str
    text: str = ""
    path: Optional[str] = None
    entry_id: Optional[str] = None
    entry_count: int = 0


_WINDOWS = {
    ReportCategory.DAILY: relativedelta(days=0),
    ReportCategory.WEEKLY: relativedelta(days=6),
    ReportCategory.ANNUAL: relativedelta(years=1, days=-1),
}


def report_window(kind: ReportCategory, end: date) -> Tuple[date, date]:
    """Inclusive date range a report of *kind* ending on *end* conventionally covers."""
    return end - _WINDOWS[kind], end


def select_entries(
    entries: List[LogEntry],
    *,
    since: Optional[date] = None,
    until: Optional[date] = None,
    tz_name: Optional[str] = None,
) -> List[LogEntry]:
    selected: List[LogEntry] = []
    for entry in entries:
        if entry.category != ReportCategory.DAILY:
            continue
        day = local_date(entry.date, tz_name)
        if since is not None and day < since:
            continue
        if until is not None and day > until:
            continue
        selected.append(entry)
    return selected


class ReportGenerator:
    """Runs the gather → prompt → synthesize → write workflow, one report at a time."""

    def __init__(
        self,
        store: LogStore,
        writer: ReportWriter,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._store = store
        self._writer = writer
        self._settings = settings
        self._transport = transport
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def generate(
        self,
        kind: ReportCategory,
        *,
        mode: ReportMode = ReportMode.AI,
        since: Optional[date] = None,
        until: Optional[date] = None,
        current_period: bool = False,
        save_as_entry: Optional[bool] = None,
    ) -> ReportOutcome:
        if self._busy:
            raise ReportInProgressError("A report is already being generated")
        self._busy = True
        try:
            return await self._generate(
                kind,
                mode=mode,
                since=since,
                until=until,
                current_period=current_period,
                save_as_entry=save_as_entry,
            )
        finally:
            self._busy = False

    async def _generate(
        self,
        kind: ReportCategory,
        *,
        mode: ReportMode,
        since: Optional[date],
        until: Optional[date],
        current_period: bool,
        save_as_entry: Optional[bool],
    ) -> ReportOutcome:
        settings = self._settings
        run_day = today(settings.timezone)
        if current_period and since is None and until is None:
            since, until = report_window(kind, run_day)

        entries = select_entries(self._store.entries(), since=since, until=until, tz_name=settings.timezone)
        logger.info(
            "report generation started",
            extra={"kind": kind.value, "mode": mode.value, "entries": len(entries)},
        )

        if mode == ReportMode.OFFLINE:
            text = format_entry_lines(entries, settings.timezone)
        else:
            prompt = build_report_prompt(
                entries,
                kind,
                language=settings.report_language,
                tz_name=settings.timezone,
            )
            logger.debug(
                "report prompt built",
                extra={"kind": kind.value, "prompt_version": prompt.prompt_version},
            )
            result = await synthesize(
                prompt.system_prompt,
                prompt.user_content,
                settings.endpoint,
                transport=self._transport,
            )
            if not result.succeeded:
                return ReportOutcome(
                    ok=False,
                    kind=kind,
                    mode=mode,
                    message=result.text,
                    entry_count=len(entries),
                )
            text = result.text

        try:
            path = await asyncio.to_thread(self._writer.write, text, report_file_name(kind, run_day))
        except ReportWriteError as exc:
            return ReportOutcome(
                ok=False,
                kind=kind,
                mode=mode,
                message=str(exc),
                text=text,
                entry_count=len(entries),
            )

        entry_id: Optional[str] = None
        store_report = settings.store_reports if save_as_entry is None else save_as_entry
        if store_report and kind != ReportCategory.DAILY and mode == ReportMode.AI:
            entry = await self._store.add(LogEntry(content=text, category=kind))
            entry_id = entry.id

        logger.info(
            "report generation completed",
            extra={"kind": kind.value, "path": str(path), "entry_id": entry_id},
        )
        return ReportOutcome(
            ok=True,
            kind=kind,
            mode=mode,
            message=f"Report saved to {path}",
            text=text,
            path=str(path),
            entry_id=entry_id,
            entry_count=len(entries),
        )


__all__ = [
    "ReportGenerator",
    "ReportInProgressError",
    "ReportOutcome",
    "report_window",
    "select_entries",
]

"""Tests for the end-to-end report workflow."""

import asyncio
from datetime import date
from pathlib import Path

import httpx
import pytest
from conftest import RecordingTransport, completion_body, make_entry

from aisummary.models import ReportCategory, ReportMode
from aisummary.services import LogStore, ReportWriter
from aisummary.services.reports.generator import (
    ReportGenerator,
    ReportInProgressError,
    report_window,
    select_entries,
)
from aisummary.utils.timezones import today


async def _seeded_store(settings) -> LogStore:
    store = LogStore(settings.data_path)
    await store.add(make_entry("2025-02-10", "fixed bug A"))
    await store.add(make_entry("2025-02-11", "reviewed PR"))
    return store


def _generator(store, settings, transport) -> ReportGenerator:
    return ReportGenerator(store, ReportWriter(settings.report_dir), settings, transport=transport)


class TestWeeklyScenario:
    @pytest.mark.asyncio
    async def test_weekly_report_end_to_end(self, settings, reply_with):
        store = await _seeded_store(settings)
        transport = reply_with("<think>ok</think>\n```markdown\n# Report\n...\n```")
        generator = _generator(store, settings, transport)

        outcome = await generator.generate(ReportCategory.WEEKLY)

        body = transport.json_bodies()[0]
        assert body["messages"][1]["content"] == "2025-02-10: fixed bug A\n2025-02-11: reviewed PR"
        assert outcome.ok
        assert outcome.text == "# Report\n..."
        assert outcome.entry_count == 2

        path = Path(outcome.path)
        assert path.parent == settings.report_dir
        assert path.name == f"{today('UTC').isoformat()}_weekly_report.md"
        assert path.read_text(encoding="utf-8") == "# Report\n..."

    @pytest.mark.asyncio
    async def test_weekly_report_is_stored_as_entry(self, settings, reply_with):
        store = await _seeded_store(settings)
        generator = _generator(store, settings, reply_with("# Week 7"))

        outcome = await generator.generate(ReportCategory.WEEKLY)

        stored = store.get(outcome.entry_id)
        assert stored.category == ReportCategory.WEEKLY
        assert stored.content == "# Week 7"
        assert len(await LogStore(settings.data_path).load()) == 3

    @pytest.mark.asyncio
    async def test_stored_reports_do_not_feed_the_next_report(self, settings, reply_with):
        store = await _seeded_store(settings)
        transport = reply_with("# Week 7")
        generator = _generator(store, settings, transport)

        await generator.generate(ReportCategory.WEEKLY)
        await generator.generate(ReportCategory.ANNUAL)

        first, second = transport.json_bodies()
        assert first["messages"][1]["content"] == second["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_store_can_be_skipped(self, settings, reply_with):
        store = await _seeded_store(settings)
        generator = _generator(store, settings, reply_with("# Week"))

        outcome = await generator.generate(ReportCategory.WEEKLY, save_as_entry=False)

        assert outcome.entry_id is None
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_daily_summary_is_not_stored(self, settings, reply_with):
        store = await _seeded_store(settings)
        generator = _generator(store, settings, reply_with("# Today"))

        outcome = await generator.generate(ReportCategory.DAILY)

        assert outcome.ok
        assert outcome.entry_id is None
        assert Path(outcome.path).name.endswith("_daily_report.md")


class TestFailures:
    @pytest.mark.asyncio
    async def test_remote_failure_is_reported_without_file(self, settings, reply_with):
        store = await _seeded_store(settings)
        generator = _generator(store, settings, reply_with(status_code=500, body={"error": "down"}))

        outcome = await generator.generate(ReportCategory.WEEKLY)

        assert not outcome.ok
        assert "500" in outcome.message
        assert outcome.path is None
        assert not settings.report_dir.exists()
        assert len(store) == 2
        assert generator.busy is False

    @pytest.mark.asyncio
    async def test_write_failure_is_reported(self, settings, reply_with, tmp_path):
        store = await _seeded_store(settings)
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        generator = ReportGenerator(
            store, ReportWriter(blocker / "reports"), settings, transport=reply_with("# Week")
        )

        outcome = await generator.generate(ReportCategory.WEEKLY)

        assert not outcome.ok
        assert "Failed to write report" in outcome.message
        assert outcome.entry_id is None
        assert generator.busy is False

    @pytest.mark.asyncio
    async def test_overlapping_generation_rejected(self, settings):
        store = await _seeded_store(settings)
        release = asyncio.Event()

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json=completion_body("# Week"))

        generator = _generator(store, settings, httpx.MockTransport(slow_handler))
        first = asyncio.create_task(generator.generate(ReportCategory.WEEKLY))
        while not generator.busy:
            await asyncio.sleep(0)

        with pytest.raises(ReportInProgressError):
            await generator.generate(ReportCategory.WEEKLY)

        release.set()
        outcome = await first
        assert outcome.ok
        assert generator.busy is False

    @pytest.mark.asyncio
    async def test_busy_cleared_after_unexpected_error(self, settings, reply_with, monkeypatch):
        store = await _seeded_store(settings)
        generator = _generator(store, settings, reply_with("# Week"))

        def explode():
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "entries", explode)

        with pytest.raises(RuntimeError):
            await generator.generate(ReportCategory.WEEKLY)
        assert generator.busy is False


class TestOfflineAndWindows:
    @pytest.mark.asyncio
    async def test_offline_mode_writes_raw_lines(self, settings):
        store = await _seeded_store(settings)
        transport = RecordingTransport(lambda request: httpx.Response(500))
        generator = _generator(store, settings, transport)

        outcome = await generator.generate(ReportCategory.WEEKLY, mode=ReportMode.OFFLINE)

        assert outcome.ok
        assert transport.requests == []
        assert outcome.entry_id is None
        assert Path(outcome.path).read_text(encoding="utf-8") == (
            "2025-02-10: fixed bug A\n2025-02-11: reviewed PR"
        )

    @pytest.mark.asyncio
    async def test_date_range_limits_entries(self, settings, reply_with):
        store = await _seeded_store(settings)
        transport = reply_with("# Day")
        generator = _generator(store, settings, transport)

        outcome = await generator.generate(
            ReportCategory.DAILY, since=date(2025, 2, 11), until=date(2025, 2, 11)
        )

        assert outcome.entry_count == 1
        assert transport.json_bodies()[0]["messages"][1]["content"] == "2025-02-11: reviewed PR"

    def test_report_windows(self):
        end = date(2025, 2, 14)
        assert report_window(ReportCategory.DAILY, end) == (end, end)
        assert report_window(ReportCategory.WEEKLY, end) == (date(2025, 2, 8), end)
        assert report_window(ReportCategory.ANNUAL, date(2024, 2, 29)) == (date(2023, 3, 1), date(2024, 2, 29))

    def test_select_entries_only_daily(self):
        entries = [
            make_entry("2025-02-10", "a"),
            make_entry("2025-02-14", "w", ReportCategory.WEEKLY),
        ]
        assert [entry.content for entry in select_entries(entries)] == ["a"]

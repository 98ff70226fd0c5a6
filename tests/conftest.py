from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, List

import httpx
import pytest

from aisummary.config import EndpointConfig, Settings
from aisummary.models import LogEntry, ReportCategory


def make_entry(day: str, content: str, category: ReportCategory = ReportCategory.DAILY, **kwargs) -> LogEntry:
    year, month, dom = (int(part) for part in day.split("-"))
    return LogEntry(
        date=datetime(year, month, dom, 9, 30, tzinfo=timezone.utc),
        content=content,
        category=category,
        **kwargs,
    )


def completion_body(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_bodies(self) -> List[dict]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def endpoint() -> EndpointConfig:
    return EndpointConfig(
        endpoint_url="http://model.test/v1/chat/completions",
        model_name="test-model",
        max_tokens=512,
        temperature=0.3,
        timeout_seconds=5,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        endpoint_url="http://model.test/v1/chat/completions",
        model_name="test-model",
        api_key=None,
        max_tokens=512,
        temperature=0.3,
        timeout_seconds=5,
        data_path=tmp_path / "data" / "worklogs.json",
        report_dir=tmp_path / "reports",
        timezone="UTC",
        report_language="English",
        store_reports=True,
        cors_allow_origins_raw="*",
        enable_docs=False,
    )


@pytest.fixture
def reply_with() -> Callable[..., RecordingTransport]:
    def _factory(content: str = "# Report", status_code: int = 200, body=None) -> RecordingTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if body is not None:
                return httpx.Response(status_code, json=body)
            return httpx.Response(status_code, json=completion_body(content))

        return RecordingTransport(handler)

    return _factory

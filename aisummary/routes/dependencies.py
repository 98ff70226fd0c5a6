from __future__ import annotations

from fastapi import Request

from ..config import Settings
from ..services import LogStore, ReportGenerator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_log_store(request: Request) -> LogStore:
    return request.app.state.log_store


def get_report_generator(request: Request) -> ReportGenerator:
    return request.app.state.report_generator


__all__ = ["get_app_settings", "get_log_store", "get_report_generator"]

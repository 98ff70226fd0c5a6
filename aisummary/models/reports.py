from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .entries import ReportCategory


class ReportMode(str, Enum):
    AI = "ai"
    OFFLINE = "offline"


class ReportRequest(BaseModel):
    kind: ReportCategory = ReportCategory.WEEKLY
    mode: ReportMode = ReportMode.AI
    since: Optional[date] = None
    until: Optional[date] = None
    current_period: bool = False
    save_as_entry: Optional[bool] = None

    @model_validator(mode="after")
    def _check_window(self) -> "ReportRequest":
        if self.since and self.until and self.since > self.until:
            raise ValueError("since must not be after until")
        return self


class ReportResponse(BaseModel):
    ok: bool
    kind: ReportCategory
    mode: ReportMode
    message: str
    text: str = ""
    path: Optional[str] = None
    entry_id: Optional[str] = None
    entry_count: int = 0


class ReportStatusResponse(BaseModel):
    busy: bool = Field(default=False)


__all__ = ["ReportMode", "ReportRequest", "ReportResponse", "ReportStatusResponse"]

from __future__ import annotations

import base64
import binascii
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.timezones import utc_now


class ReportCategory(str, Enum):
    """Kind of journal entry; weekly and annual entries are stored reports."""

    DAILY = "daily"
    WEEKLY = "weekly"
    ANNUAL = "annual"

    @classmethod
    def coerce(cls, value: Any) -> "ReportCategory":
        """Map unknown or missing values to ``daily``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.DAILY


def _new_entry_id() -> str:
    return uuid.uuid4().hex


def _decode_images(value: Any) -> Any:
    if value is None:
        return []
    if not isinstance(value, list):
        return value
    decoded: List[Any] = []
    for item in value:
        if isinstance(item, str):
            try:
                decoded.append(base64.b64decode(item, validate=True))
            except (binascii.Error, ValueError) as exc:
                raise ValueError("image data must be base64 encoded") from exc
        else:
            decoded.append(item)
    return decoded


class LogEntry(BaseModel):
    """A dated journal entry with optional image attachments."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=_new_entry_id, min_length=1)
    date: datetime = Field(default_factory=utc_now)
    content: str = ""
    image_data: List[bytes] = Field(default_factory=list, alias="imageData")
    category: ReportCategory = ReportCategory.DAILY

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("image_data", mode="before")
    @classmethod
    def _decode_image_data(cls, value: Any) -> Any:
        return _decode_images(value)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> ReportCategory:
        return ReportCategory.coerce(value)

    @field_serializer("image_data", when_used="json")
    def _encode_image_data(self, value: List[bytes]) -> List[str]:
        return [base64.b64encode(blob).decode("ascii") for blob in value]

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EntryCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: str = ""
    date: Optional[datetime] = None
    category: ReportCategory = ReportCategory.DAILY
    images: List[bytes] = Field(default_factory=list, alias="imageData")

    @field_validator("images", mode="before")
    @classmethod
    def _decode_image_payload(cls, value: Any) -> Any:
        return _decode_images(value)

    def to_entry(self) -> LogEntry:
        entry = LogEntry(content=self.content, category=self.category, image_data=list(self.images))
        if self.date is not None:
            entry.date = self.date
        return entry


class EntryUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: Optional[str] = None
    date: Optional[datetime] = None
    category: Optional[ReportCategory] = None
    images: Optional[List[bytes]] = Field(default=None, alias="imageData")

    @field_validator("images", mode="before")
    @classmethod
    def _decode_image_payload(cls, value: Any) -> Any:
        if value is None:
            return None
        return _decode_images(value)

    def apply(self, entry: LogEntry) -> LogEntry:
        changes = {}
        if self.content is not None:
            changes["content"] = self.content
        if self.date is not None:
            changes["date"] = self.date
        if self.category is not None:
            changes["category"] = self.category
        if self.images is not None:
            changes["image_data"] = list(self.images)
        return entry.model_copy(update=changes)


class ImageAttachRequest(BaseModel):
    images: List[bytes] = Field(..., min_length=1)

    @field_validator("images", mode="before")
    @classmethod
    def _decode_image_payload(cls, value: Any) -> Any:
        return _decode_images(value)


class EntryListResponse(BaseModel):
    entries: List[LogEntry] = Field(default_factory=list)


class EntryDeleteResponse(BaseModel):
    ok: bool = True
    id: str


__all__ = [
    "EntryCreateRequest",
    "EntryDeleteResponse",
    "EntryListResponse",
    "EntryUpdateRequest",
    "ImageAttachRequest",
    "LogEntry",
    "ReportCategory",
]

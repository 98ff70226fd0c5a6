from .entries import (
    EntryCreateRequest,
    EntryDeleteResponse,
    EntryListResponse,
    EntryUpdateRequest,
    ImageAttachRequest,
    LogEntry,
    ReportCategory,
)
from .meta import HealthResponse, RootResponse
from .reports import ReportMode, ReportRequest, ReportResponse, ReportStatusResponse

__all__ = [
    "EntryCreateRequest",
    "EntryDeleteResponse",
    "EntryListResponse",
    "EntryUpdateRequest",
    "ImageAttachRequest",
    "LogEntry",
    "ReportCategory",
    "HealthResponse",
    "RootResponse",
    "ReportMode",
    "ReportRequest",
    "ReportResponse",
    "ReportStatusResponse",
]

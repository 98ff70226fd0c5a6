from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..models import (
    EntryCreateRequest,
    EntryDeleteResponse,
    EntryListResponse,
    EntryUpdateRequest,
    ImageAttachRequest,
    LogEntry,
    ReportCategory,
)
from ..services import EntryNotFoundError, LogStore
from .dependencies import get_log_store

router = APIRouter(prefix="/entries", tags=["entries"])


def _not_found(exc: EntryNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc.args[0]))


@router.get("", response_model=EntryListResponse)
# List journal entries in insertion order, optionally limited to one category
def list_entries(
    category: Optional[ReportCategory] = None,
    store: LogStore = Depends(get_log_store),
) -> EntryListResponse:
    entries = store.filter_by_category(category) if category else store.entries()
    return EntryListResponse(entries=entries)


@router.post("", response_model=LogEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    payload: EntryCreateRequest,
    store: LogStore = Depends(get_log_store),
) -> LogEntry:
    return await store.add(payload.to_entry())


@router.get("/{entry_id}", response_model=LogEntry)
def get_entry(entry_id: str, store: LogStore = Depends(get_log_store)) -> LogEntry:
    try:
        return store.get(entry_id)
    except EntryNotFoundError as exc:
        raise _not_found(exc)


@router.put("/{entry_id}", response_model=LogEntry)
async def update_entry(
    entry_id: str,
    payload: EntryUpdateRequest,
    store: LogStore = Depends(get_log_store),
) -> LogEntry:
    try:
        current = store.get(entry_id)
        return await store.update(payload.apply(current))
    except EntryNotFoundError as exc:
        raise _not_found(exc)


@router.delete("/{entry_id}", response_model=EntryDeleteResponse)
async def delete_entry(entry_id: str, store: LogStore = Depends(get_log_store)) -> EntryDeleteResponse:
    try:
        removed = await store.remove(entry_id)
    except EntryNotFoundError as exc:
        raise _not_found(exc)
    return EntryDeleteResponse(id=removed.id)


@router.post("/{entry_id}/images", response_model=LogEntry)
# Append base64-encoded images to an entry
async def attach_images(
    entry_id: str,
    payload: ImageAttachRequest,
    store: LogStore = Depends(get_log_store),
) -> LogEntry:
    try:
        return await store.attach_images(entry_id, payload.images)
    except EntryNotFoundError as exc:
        raise _not_found(exc)


@router.delete("/{entry_id}/images/{image_index}", response_model=LogEntry)
async def detach_image(
    entry_id: str,
    image_index: int,
    store: LogStore = Depends(get_log_store),
) -> LogEntry:
    try:
        return await store.detach_image(entry_id, image_index)
    except EntryNotFoundError as exc:
        raise _not_found(exc)


__all__ = ["router"]

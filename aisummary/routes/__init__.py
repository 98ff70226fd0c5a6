from __future__ import annotations

from fastapi import APIRouter

from .entries import router as entries_router
from .meta import router as meta_router
from .reports import router as reports_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(meta_router)
api_router.include_router(entries_router)
api_router.include_router(reports_router)

__all__ = ["api_router"]

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..config import Settings
from ..models import HealthResponse, RootResponse
from .dependencies import get_app_settings

router = APIRouter(tags=["meta"])


@router.get("/health", response_model=HealthResponse)
# Return service health status for monitoring
def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(ok=True, service="aisummary", version=settings.app_version)


@router.get("/meta", response_model=RootResponse)
# Return service metadata including available API endpoints
def meta(request: Request, settings: Settings = Depends(get_app_settings)) -> RootResponse:
    # Included routers are not always flattened into app.routes; the schema is.
    paths = request.app.openapi().get("paths", {})
    endpoints = sorted(path for path in paths if path.startswith("/api/"))
    return RootResponse(
        status="ok",
        service="aisummary",
        version=settings.app_version,
        endpoints=endpoints,
    )

from __future__ import annotations

import json
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .logging_config import configure_logging, logger
from .routes import api_router
from .services import LogStore, ReportGenerator, ReportWriter


# Register global exception handlers for consistent error responses across the API
def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error", extra={"errors": exc.errors(), "path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Invalid request", "detail": json.loads(json.dumps(exc.errors(), default=str))},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return JSONResponse({"ok": False, "error": detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Internal server error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the journal API around one explicitly owned store and generator."""

    configure_logging()
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.resolved_docs_url,
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = LogStore(settings.data_path)
    writer = ReportWriter(settings.report_dir)
    app.state.settings = settings
    app.state.log_store = store
    app.state.report_generator = ReportGenerator(store, writer, settings, transport=transport)

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    # Load the journal before serving requests
    async def _load_journal() -> None:
        await store.load()

    @app.on_event("shutdown")
    # Persist the journal one last time when the app stops
    async def _save_journal() -> None:
        if not await store.save():
            logger.warning("journal was not saved on shutdown", extra={"path": str(store.path)})

    return app


app = create_app()


__all__ = ["app", "create_app"]

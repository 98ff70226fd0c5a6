#!/usr/bin/env python3
"""CLI entrypoint for running the journal API with Uvicorn."""

import argparse
import logging
import os

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    default_host = settings.server_host
    default_port = settings.server_port

    parser = argparse.ArgumentParser(description="AISummary work journal server")
    parser.add_argument("--host", default=default_host, help=f"Host to bind (default: {default_host})")
    parser.add_argument("--port", type=int, default=default_port, help=f"Port to bind (default: {default_port})")
    parser.add_argument(
        "--data-path",
        default=None,
        help=f"Journal JSON file (default: {settings.data_path})",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help=f"Directory for generated reports (default: {settings.report_dir})",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    # The app reads its settings from the environment when it is imported,
    # including in the reload worker process.
    if args.data_path:
        os.environ["AISUMMARY_DATA_PATH"] = args.data_path
    if args.report_dir:
        os.environ["AISUMMARY_REPORT_DIR"] = args.report_dir
    if args.log_level:
        os.environ["AISUMMARY_LOG_LEVEL"] = args.log_level
    get_settings.cache_clear()

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("watchfiles.main").setLevel(logging.WARNING)

    uvicorn.run(
        "aisummary.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=(args.log_level or "info").lower(),
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()

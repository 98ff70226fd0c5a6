from __future__ import annotations

import logging
import os

logger = logging.getLogger("aisummary")


def configure_logging(level: str | None = None) -> None:
    """Configure logging once; level comes from AISUMMARY_LOG_LEVEL unless given."""
    if logger.handlers:
        return

    resolved = (level or os.getenv("AISUMMARY_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

from __future__ import annotations

import logging
import os


def configure_logging(level_name: str | None = None) -> None:
    """
    Configure root logging once per process.

    `level_name` overrides LOG_LEVEL; DEBUG shows every permit acquire,
    cooldown and release of the submission throttle.
    """
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(threadName)s] - %(message)s",
    )
    logging.getLogger("crpt_api").setLevel(level)

    # Reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)

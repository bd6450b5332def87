"""Root logger setup for ingestion runs."""

from __future__ import annotations

import logging
import os

# per-request chatter from the HTTP and Bolt clients drowns out run summaries
NOISY_LOGGERS = ("httpx", "hishel", "neo4j")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger for batch runs.

    ``level`` defaults to ``VENUEGRAPH_LOG_LEVEL`` (a level name) or INFO.
    Timestamps carry the date because runs are scheduled and logs rotate.
    """

    if level is None:
        configured = logging.getLevelNamesMapping().get(
            (os.getenv("VENUEGRAPH_LOG_LEVEL") or "").strip().upper()
        )
        level = configured if configured is not None else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

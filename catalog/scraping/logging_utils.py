"""
Structured logging helpers for catalog scraping.
"""

from __future__ import annotations

import json
import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True))


def configure_logging(*, verbose: bool = False) -> None:
    """
    Configure root logging for CLI runs; DEBUG adds per-request detail.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    # urllib3 connection chatter drowns out request events in verbose mode.
    logging.getLogger("urllib3").setLevel(logging.WARNING)

"""Process-wide logging setup, called once from the CLI entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)
    # Connection pool chatter drowns out our own messages at DEBUG.
    logging.getLogger("urllib3").setLevel(max(resolved, logging.WARNING))

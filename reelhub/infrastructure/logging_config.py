"""Logging setup for the API process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger once and set ``level``."""

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("reelhub").setLevel(level)


__all__ = ["LOG_FORMAT", "configure_logging"]

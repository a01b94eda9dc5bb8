"""Centralised logging configuration for ouidb."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Below DEBUG; used for per-record insertion events during ingest.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root ``ouidb`` logger.

    Call once from the command-line driver.  Subsequent calls only adjust
    the level; the handler is added if absent.
    """
    logger = logging.getLogger("ouidb")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``ouidb`` namespace."""
    return logging.getLogger(f"ouidb.{name}")


def level_for_verbosity(verbose: int) -> int:
    if verbose >= 3:
        return TRACE
    if verbose == 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING

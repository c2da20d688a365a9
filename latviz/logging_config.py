"""Logging setup for the latviz runner."""

import logging
import os
import sys

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging() -> None:
    """Send latviz logs to stderr at the level named by LATVIZ_LOG_LEVEL.

    Unknown or unset levels fall back to INFO. Per-request httpx logs are
    only shown at DEBUG, where they complement the probe debug lines.
    """
    log_level = LOG_LEVELS.get(os.environ.get("LATVIZ_LOG_LEVEL", "INFO").upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,  # Replace handlers installed before startup
    )

    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s", logging.getLevelName(log_level)
    )

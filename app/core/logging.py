"""
Logging utilities for the FastAPI application and command-line scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys

# Client libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "google.auth", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]

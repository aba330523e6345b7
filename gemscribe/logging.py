"""
gemscribe.logging - Logging setup for the CLI.

Debug output includes raw Gemini response bodies, so it is only enabled
with --verbose.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("gemscribe")

# HTTP client libraries log every request at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(verbose: bool = False) -> None:
    """Set up log output for a CLI run.

    Args:
        verbose: DEBUG for gemscribe modules (with logger names) instead of
            warnings only
    """
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(levelname)s %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)
    logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

"""
Logging setup for the analytics service.

One stdout handler with a single format. Domain modules log ledger
mutations and alert transitions; request bodies and webhook payloads
are never logged.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def configure_logging(level: str = "INFO", quiet: tuple[str, ...] = QUIET_LOGGERS) -> None:
    """Install the stdout handler at ``level``.

    Unknown level names fall back to INFO. Loggers named in ``quiet``
    report warnings and above only.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in quiet:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(resolved))
